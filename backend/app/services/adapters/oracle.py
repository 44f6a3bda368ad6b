"""
Position valuation oracles.

Real deployments plug in a price-aware oracle. These two cover the
reference behaviour (a fixed placeholder) and a unit-ratio view of the
caller-reported protocol positions.
"""

from typing import Optional

from app.core.config import settings
from app.db.database import Transaction
from app.db.models import UserProtocolPositionRecord
from app.services.adapters.interface import PositionValuationOracle


class FixedLtvOracle(PositionValuationOracle):
    """Reports the same LTV for every user and protocol."""

    def __init__(self, ltv: Optional[int] = None):
        self.ltv = settings.placeholder_ltv if ltv is None else ltv

    async def current_ltv(self, tx: Transaction, user: str, protocol_id: int) -> int:
        return self.ltv


class TrackedPositionOracle(PositionValuationOracle):
    """
    LTV from the position tracker: floor(borrowed * 100 / supplied).

    Amounts are summed as raw units with no pricing. No position or
    nothing borrowed gives 0; borrowing against nothing gives 100.
    """

    async def current_ltv(self, tx: Transaction, user: str, protocol_id: int) -> int:
        record = await tx.session.get(UserProtocolPositionRecord, (user, protocol_id))
        if record is None:
            return 0

        supplied = sum(entry["amount"] for entry in record.supplied)
        borrowed = sum(entry["amount"] for entry in record.borrowed)
        if borrowed == 0:
            return 0
        if supplied == 0:
            return 100
        return borrowed * 100 // supplied
