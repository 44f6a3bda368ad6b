"""
Settlement Service Implementation

Admin faucet over the configured settlement gateway.
"""

import logging
from typing import Optional

from app.schemas.events import EventType
from app.schemas.settlement import AccountBalance
from app.services.base import ErrorCode
from app.services.context import LedgerContext, get_ledger_context
from app.services.settlement.interface import CreditInput, SettlementServiceInterface

logger = logging.getLogger(__name__)


class SettlementService(SettlementServiceInterface):
    def __init__(self, context: LedgerContext):
        self.context = context

    async def execute(self, input_data: CreditInput) -> AccountBalance:
        return await self.credit(input_data.caller, input_data.account, input_data.amount)

    async def credit(self, caller: str, account: str, amount: int) -> AccountBalance:
        async with self.context.store.transaction() as tx:
            if not self.context.is_admin(caller):
                self.reject(ErrorCode.NOT_AUTHORIZED, f"{caller} may not credit accounts")
            if amount <= 0:
                self.reject(ErrorCode.INVALID_AMOUNT, f"Credit amount must be positive: {amount}")

            balance = await self.context.settlement.credit(tx, account, amount)
            tx.emit(EventType.SETTLEMENT_CREDITED, account=account, amount=amount, balance=balance)

        logger.info(f"Credited {amount} to {account} (balance {balance})")
        return AccountBalance(account=account, balance=balance)

    async def balance_of(self, account: str) -> AccountBalance:
        async with self.context.store.transaction(write=False) as tx:
            balance = await self.context.settlement.balance_of(tx, account)
        return AccountBalance(account=account, balance=balance)


# Singleton instance
_service_instance: Optional[SettlementService] = None


def get_settlement_service() -> SettlementService:
    """Get or create the settlement service bound to the current context."""
    global _service_instance
    context = get_ledger_context()
    if _service_instance is None or _service_instance.context is not context:
        _service_instance = SettlementService(context)
    return _service_instance
