"""
CONTRACT 6: Batch Transactions

Ordered list of protocol actions replayed in sequence.
Either every action applies or none does.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class BatchActionType(str, Enum):
    SUPPLY = "supply"
    WITHDRAW = "withdraw"
    BORROW = "borrow"
    REPAY = "repay"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"
    STAKE = "stake"
    UNSTAKE = "unstake"

    @property
    def moves_funds_in(self) -> bool:
        """True when the action sends value into the protocol."""
        return self in (
            BatchActionType.SUPPLY,
            BatchActionType.REPAY,
            BatchActionType.ADD_LIQUIDITY,
            BatchActionType.STAKE,
        )


class BatchAction(BaseModel):
    """One protocol action."""

    protocol_id: int
    action: BatchActionType
    amount: int
    token: Optional[str] = Field(default=None, description="Must be supported by the protocol")
    max_slippage: Optional[int] = Field(
        default=None,
        description="Slippage tolerance in percent; capped by user settings",
    )


class BatchRequest(BaseModel):
    actions: list[BatchAction]


class BatchActionResult(BaseModel):
    index: int
    protocol_id: int
    action: BatchActionType
    amount: int


class BatchResult(BaseModel):
    """Applied actions, in execution order."""

    user: str
    results: list[BatchActionResult]
    height: int
