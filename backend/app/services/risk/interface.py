"""
Risk Engine Service Interface

Defines the contract for the risk evaluation layer.
"""

from abc import abstractmethod
from dataclasses import dataclass

from app.services.base import BaseService
from app.schemas.risk import LiquidationRiskResult, RiskPreferencesRequest, UserRiskSettings


@dataclass
class LiquidationRiskInput:
    """Input for a liquidation risk check."""

    user: str
    protocol_id: int


class RiskEngineInterface(BaseService[LiquidationRiskInput, LiquidationRiskResult]):
    """
    Risk Engine Contract.

    INPUT: LiquidationRiskInput
        - user: whose position is evaluated
        - protocol_id: must be registered with risk parameters

    OUTPUT: LiquidationRiskResult
        - alert_threshold = liquidation_threshold - user alert buffer
        - at_risk = current_ltv >= alert_threshold

    current_ltv comes from the valuation oracle capability.
    A check mutates nothing; an alert only publishes an event.

    USER SETTINGS:
        - liquidation_alert_threshold, rebalance_threshold, max_slippage
          each within 0..50 (InvalidParameter otherwise)
        - defaults apply until the user sets preferences
    """

    @property
    def name(self) -> str:
        return "RiskEngine"

    @abstractmethod
    async def execute(self, input_data: LiquidationRiskInput) -> LiquidationRiskResult:
        """Evaluate liquidation risk."""
        pass

    @abstractmethod
    async def set_risk_preferences(self, user: str, request: RiskPreferencesRequest) -> UserRiskSettings:
        pass

    @abstractmethod
    async def get_risk_settings(self, user: str) -> UserRiskSettings:
        pass
