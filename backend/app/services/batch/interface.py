"""
Batch Executor Service Interface

Defines the contract for ordered multi-action protocol batches.
"""

from abc import abstractmethod
from dataclasses import dataclass

from app.services.base import BaseService
from app.schemas.batch import BatchAction, BatchResult


@dataclass
class BatchInput:
    """Input for a batch execution."""

    user: str
    actions: list[BatchAction]


class BatchExecutorInterface(BaseService[BatchInput, BatchResult]):
    """
    Batch Executor Contract.

    INPUT: BatchInput
        - actions: 1..10 protocol actions, executed in list order

    OUTPUT: BatchResult
        - one result per action, same order

    FAILURES (checked for every action before any adapter call):
        - InvalidParameter: empty batch or too many actions
        - ProtocolNotRegistered / InvalidProtocol: unknown or inactive protocol
        - InvalidAmount: amount <= 0
        - UnsupportedToken: token outside the protocol's supported_tokens
        - SlippageTooHigh: max_slippage above the user's setting
        - LiquidationThreshold: borrow while the liquidation check alerts

    All-or-nothing: an adapter failure reverses the calls already made.
    """

    @property
    def name(self) -> str:
        return "BatchExecutor"

    @abstractmethod
    async def execute(self, input_data: BatchInput) -> BatchResult:
        """Run a batch for one user."""
        pass
