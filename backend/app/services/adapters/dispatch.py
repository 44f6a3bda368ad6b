"""
Adapter call bookkeeping.

Records adapter calls made during one operation so they can be reversed,
newest first, if a later step of the same operation fails.
"""

import logging
from dataclasses import dataclass

from app.services.adapters.interface import ProtocolAdapter

logger = logging.getLogger(__name__)

DEPOSIT = "deposit"
WITHDRAW = "withdraw"


@dataclass
class AppliedCall:
    adapter: ProtocolAdapter
    operation: str  # deposit, withdraw
    protocol_id: int
    amount: int


async def invoke(adapter: ProtocolAdapter, operation: str, protocol_id: int, amount: int) -> bool:
    """Call adapter.deposit or adapter.withdraw."""
    call = adapter.deposit if operation == DEPOSIT else adapter.withdraw
    return await call(protocol_id, amount)


async def compensate(applied: list[AppliedCall]) -> None:
    """Reverse applied calls, newest first. Failures are logged, not raised."""
    for record in reversed(applied):
        reverse = WITHDRAW if record.operation == DEPOSIT else DEPOSIT
        try:
            ok = await invoke(record.adapter, reverse, record.protocol_id, record.amount)
        except Exception as e:
            logger.error(f"Reversing {record.operation} on protocol {record.protocol_id} raised: {e}")
            continue
        if not ok:
            logger.error(f"Reversing {record.operation} on protocol {record.protocol_id} was refused")
