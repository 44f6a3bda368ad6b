"""
Protocol Registry API Endpoints

Admin-only registration and risk configuration of external protocols.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_caller
from app.schemas.protocol import (
    Protocol,
    ProtocolStatusUpdate,
    RegisterProtocolRequest,
    RiskParams,
    RiskParamsUpdate,
)
from app.services.registry import get_registry_service

router = APIRouter()


@router.post("", response_model=Protocol, status_code=201)
async def register_protocol(request: RegisterProtocolRequest, caller: str = Depends(get_caller)):
    """
    Register a protocol. Admin only.

    The protocol starts active and trusted, with no risk parameters.
    """
    return await get_registry_service().register(caller, request)


@router.get("", response_model=list[Protocol])
async def list_protocols(active_only: bool = Query(default=False)):
    return await get_registry_service().list_protocols(active_only=active_only)


@router.get("/{protocol_id}", response_model=Protocol)
async def get_protocol(protocol_id: int):
    protocol = await get_registry_service().get_protocol(protocol_id)
    if protocol is None:
        raise HTTPException(status_code=404, detail=f"Protocol {protocol_id} not found")
    return protocol


@router.put("/{protocol_id}/status", response_model=Protocol)
async def update_protocol_status(
    protocol_id: int,
    update: ProtocolStatusUpdate,
    caller: str = Depends(get_caller),
):
    """Activate / deactivate and trust / distrust a protocol. Admin only."""
    return await get_registry_service().set_status(caller, protocol_id, update)


@router.get("/{protocol_id}/risk-params", response_model=RiskParams)
async def get_risk_params(protocol_id: int):
    params = await get_registry_service().get_risk_params(protocol_id)
    if params is None:
        raise HTTPException(status_code=404, detail=f"No risk parameters for protocol {protocol_id}")
    return params


@router.put("/{protocol_id}/risk-params", response_model=RiskParams)
async def set_risk_params(
    protocol_id: int,
    update: RiskParamsUpdate,
    caller: str = Depends(get_caller),
):
    """
    Set liquidation parameters. Admin only.

    Requires max_ltv <= liquidation_threshold <= 100 and penalty <= 100.
    """
    return await get_registry_service().set_risk_params(caller, protocol_id, update)
