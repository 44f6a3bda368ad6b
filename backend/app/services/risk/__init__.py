"""
Risk Engine

CONTRACT:
    Input:  LiquidationRiskInput (user + protocol)
    Output: LiquidationRiskResult

RESPONSIBILITIES:
    - Compare current LTV against liquidation_threshold - alert buffer
    - Publish a liquidation alert when current LTV reaches that level
    - Store user risk preferences (each 0..50) and apply defaults

PURE PYTHON - No pricing.
Current LTV is supplied by the valuation oracle capability.
"""

from app.services.risk.interface import LiquidationRiskInput, RiskEngineInterface
from app.services.risk.service import RiskEngineService, get_risk_service

__all__ = [
    "LiquidationRiskInput",
    "RiskEngineInterface",
    "RiskEngineService",
    "get_risk_service",
]
