"""
Allocation Engine

CONTRACT:
    Input:  AllocationInput (allocation list + total amount)
    Output: AllocationPlan

RESPONSIBILITIES:
    - Validate a new vault's allocation once (1..10 entries, sum == 100)
    - Validate every target is a registered, active protocol
    - Split an amount: floor(total * pct / 100) per target, in order

The rounding remainder is never pushed to any protocol.
"""

from app.services.allocation.interface import AllocationEngineInterface, AllocationInput
from app.services.allocation.service import (
    FULL_ALLOCATION,
    AllocationEngine,
    distribute,
    get_allocation_engine,
)

__all__ = [
    "AllocationEngineInterface",
    "AllocationInput",
    "FULL_ALLOCATION",
    "AllocationEngine",
    "distribute",
    "get_allocation_engine",
]
