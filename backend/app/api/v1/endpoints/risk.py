"""
Risk API Endpoints

User alert preferences and liquidation checks.
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_caller
from app.schemas.risk import LiquidationRiskResult, RiskPreferencesRequest, UserRiskSettings
from app.services.risk import get_risk_service

router = APIRouter()


@router.put("/preferences", response_model=UserRiskSettings)
async def set_risk_preferences(request: RiskPreferencesRequest, caller: str = Depends(get_caller)):
    """Store the caller's alert, rebalance and slippage settings (each 0..50)."""
    return await get_risk_service().set_risk_preferences(caller, request)


@router.get("/preferences", response_model=UserRiskSettings)
async def get_risk_preferences(caller: str = Depends(get_caller)):
    """The caller's settings, or the defaults if never set."""
    return await get_risk_service().get_risk_settings(caller)


@router.get("/liquidation/{protocol_id}", response_model=LiquidationRiskResult)
async def check_liquidation_risk(protocol_id: int, caller: str = Depends(get_caller)):
    """
    Check whether the caller's LTV at a protocol is within the alert buffer.

    Alerts when LTV >= liquidation_threshold - alert buffer.
    """
    return await get_risk_service().check_liquidation_risk(caller, protocol_id)
