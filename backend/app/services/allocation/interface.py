"""
Allocation Engine Interface

Defines the contract for splitting an amount across a weighted target list.
"""

from abc import abstractmethod
from dataclasses import dataclass

from app.db.database import Transaction
from app.services.base import BaseService
from app.schemas.vault import AllocationEntry, AllocationPlan


@dataclass
class AllocationInput:
    """Input for an allocation plan."""

    allocation: list[AllocationEntry]
    total_amount: int


class AllocationEngineInterface(BaseService[AllocationInput, AllocationPlan]):
    """
    Allocation Engine Contract.

    INPUT: AllocationInput
        - allocation: ordered (protocol_id, percentage) pairs summing to 100
        - total_amount: amount to split

    OUTPUT: AllocationPlan
        - shares: floor(total_amount * percentage / 100) per entry, in order
        - total_amount: passed through unchanged

    RULES:
        1. Every target must exist and be active (InvalidProtocol),
           checked for all entries before anything is distributed
        2. Percentage sum is validated once, at vault creation
        3. Truncation remainder is NOT redistributed
    """

    @property
    def name(self) -> str:
        return "AllocationEngine"

    @abstractmethod
    async def execute(self, input_data: AllocationInput) -> AllocationPlan:
        """Validate targets and compute the plan."""
        pass

    @abstractmethod
    async def plan(self, tx: Transaction, allocation: list[AllocationEntry], total_amount: int) -> AllocationPlan:
        """Same as execute, inside the caller's transaction."""
        pass

    @abstractmethod
    def validate_percentages(self, allocation: list[AllocationEntry]) -> None:
        """Check shape and 100% sum of a new allocation."""
        pass
