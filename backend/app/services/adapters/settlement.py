"""
In-ledger settlement.

Keeps settlement currency balances in the ledger store itself, so a
transfer made inside an operation rolls back with it.
"""

import logging

from app.db.database import Transaction
from app.db.models import SettlementAccount
from app.services.adapters.interface import SettlementGateway

logger = logging.getLogger(__name__)


class LedgerSettlement(SettlementGateway):
    """Settlement balances stored alongside the ledger."""

    async def balance_of(self, tx: Transaction, account: str) -> int:
        record = await tx.session.get(SettlementAccount, account)
        return record.balance if record else 0

    async def credit(self, tx: Transaction, account: str, amount: int) -> int:
        """Mint amount into an account. Returns the new balance."""
        record = await self._account(tx, account)
        record.balance += amount
        await tx.session.flush()
        return record.balance

    async def transfer(self, tx: Transaction, sender: str, recipient: str, amount: int) -> bool:
        source = await tx.session.get(SettlementAccount, sender)
        if source is None or source.balance < amount:
            logger.debug(f"Transfer of {amount} from {sender} refused: insufficient balance")
            return False

        target = await self._account(tx, recipient)
        source.balance -= amount
        target.balance += amount
        await tx.session.flush()
        return True

    async def _account(self, tx: Transaction, account: str) -> SettlementAccount:
        record = await tx.session.get(SettlementAccount, account)
        if record is None:
            record = SettlementAccount(account=account, balance=0)
            tx.session.add(record)
            await tx.session.flush()
        return record
