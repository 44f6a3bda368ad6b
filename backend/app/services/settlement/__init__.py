"""
Settlement

CONTRACT:
    Input:  CreditInput
    Output: AccountBalance

Funds identities with settlement currency so they can deposit.
"""

from app.services.settlement.interface import CreditInput, SettlementServiceInterface
from app.services.settlement.service import SettlementService, get_settlement_service

__all__ = [
    "CreditInput",
    "SettlementServiceInterface",
    "SettlementService",
    "get_settlement_service",
]
