"""
CONTRACT 4: Risk Evaluation

Input:  User + Protocol (+ RiskParams, UserRiskSettings)
Output: LiquidationRiskResult

This module performs DETERMINISTIC threshold checks.
Current loan-to-value comes from an external valuation capability;
nothing here prices assets.
"""

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# INPUT: User Risk Settings
# =============================================================================


class RiskPreferencesRequest(BaseModel):
    """
    User's alert preferences.
    Each percentage must be within 0..50 (checked by the risk engine).
    """

    liquidation_alert_threshold: int = Field(
        ...,
        description="Buffer below the liquidation threshold that triggers an alert",
    )
    rebalance_threshold: int = Field(
        ...,
        description="Drift from target weights that warrants a rebalance",
    )
    max_slippage: int = Field(
        ...,
        description="Max slippage accepted on batch actions",
    )
    notifications: bool = True


class UserRiskSettings(BaseModel):
    """Stored (or default) risk settings of a user."""

    model_config = ConfigDict(from_attributes=True)

    user: str
    liquidation_alert_threshold: int
    rebalance_threshold: int
    max_slippage: int
    notifications: bool
    is_default: bool = False


# =============================================================================
# OUTPUT: Liquidation Risk
# =============================================================================


class LiquidationRiskResult(BaseModel):
    """
    Outcome of a liquidation risk check.

    at_risk is True iff current_ltv >= alert_threshold.
    """

    user: str
    protocol_id: int
    current_ltv: int
    liquidation_threshold: int
    alert_buffer: int
    alert_threshold: int
    at_risk: bool
