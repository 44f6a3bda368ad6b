"""
Allocation Engine Implementation

Deterministic integer split of an amount across weighted targets.
PURE PYTHON - no pricing, no redistribution of rounding remainders.
"""

import logging
from typing import Optional

from app.db.database import Transaction
from app.schemas.vault import AllocationEntry, AllocationPlan, AllocationShare
from app.services.allocation.interface import AllocationEngineInterface, AllocationInput
from app.services.base import ErrorCode
from app.services.context import LedgerContext, get_ledger_context
from app.services.registry import ProtocolRegistryService

logger = logging.getLogger(__name__)

FULL_ALLOCATION = 100


def distribute(allocation: list[AllocationEntry], total_amount: int) -> AllocationPlan:
    """
    Split total_amount by percentage, truncating each share.

    sum(shares) <= total_amount; the difference is an accepted rounding
    loss that stays with the vault-side total.
    """
    shares = [
        AllocationShare(
            protocol_id=entry.protocol_id,
            percentage=entry.percentage,
            amount=total_amount * entry.percentage // FULL_ALLOCATION,
        )
        for entry in allocation
    ]
    return AllocationPlan(total_amount=total_amount, shares=shares)


class AllocationEngine(AllocationEngineInterface):
    """
    Allocation Engine.

    Used forward on deposit and in reverse on withdrawal; both directions
    use the same truncated split.
    """

    def __init__(self, context: LedgerContext, registry: Optional[ProtocolRegistryService] = None):
        self.context = context
        self.registry = registry or ProtocolRegistryService(context)

    async def execute(self, input_data: AllocationInput) -> AllocationPlan:
        async with self.context.store.transaction(write=False) as tx:
            return await self.plan(tx, input_data.allocation, input_data.total_amount)

    async def plan(self, tx: Transaction, allocation: list[AllocationEntry], total_amount: int) -> AllocationPlan:
        await self.validate_targets(tx, allocation)
        plan = distribute(allocation, total_amount)
        if plan.remainder:
            logger.debug(f"Allocation of {total_amount} leaves rounding remainder {plan.remainder}")
        return plan

    async def validate_targets(self, tx: Transaction, allocation: list[AllocationEntry]) -> None:
        """Every target must be a registered, active protocol."""
        for entry in allocation:
            record = await self.registry.lookup(tx, entry.protocol_id)
            if record is None:
                self.reject(ErrorCode.INVALID_PROTOCOL, f"Allocation target {entry.protocol_id} is not registered")
            if not record.active:
                self.reject(ErrorCode.INVALID_PROTOCOL, f"Allocation target {entry.protocol_id} is not active")

    def validate_percentages(self, allocation: list[AllocationEntry]) -> None:
        max_entries = self.context.settings.max_allocation_entries
        if not allocation:
            self.reject(ErrorCode.INVALID_PARAMETER, "Allocation must have at least one entry")
        if len(allocation) > max_entries:
            self.reject(
                ErrorCode.INVALID_PARAMETER,
                f"Allocation has {len(allocation)} entries; max is {max_entries}",
            )

        seen: set[int] = set()
        for entry in allocation:
            if entry.percentage <= 0 or entry.percentage > FULL_ALLOCATION:
                self.reject(
                    ErrorCode.INVALID_PARAMETER,
                    f"Percentage for protocol {entry.protocol_id} out of range: {entry.percentage}",
                )
            if entry.protocol_id in seen:
                self.reject(
                    ErrorCode.INVALID_PARAMETER,
                    f"Protocol {entry.protocol_id} appears more than once in allocation",
                )
            seen.add(entry.protocol_id)

        total = sum(entry.percentage for entry in allocation)
        if total != FULL_ALLOCATION:
            self.reject(ErrorCode.INVALID_PARAMETER, f"Allocation sums to {total}%, expected 100%")


# Singleton instance
_service_instance: Optional[AllocationEngine] = None


def get_allocation_engine() -> AllocationEngine:
    """Get or create the allocation engine bound to the current context."""
    global _service_instance
    context = get_ledger_context()
    if _service_instance is None or _service_instance.context is not context:
        _service_instance = AllocationEngine(context)
    return _service_instance
