"""
Batch Executor

CONTRACT:
    Input:  BatchInput (user, ordered actions)
    Output: BatchResult

RESPONSIBILITIES:
    - Check every action against the registry, user settings and risk
    - Replay actions in order through protocol adapters
    - Reverse applied calls when one fails

NOT RESPONSIBLE FOR:
    - Updating tracked positions (callers report those separately)
"""

from app.services.batch.interface import BatchExecutorInterface, BatchInput
from app.services.batch.service import BatchExecutorService, get_batch_service

__all__ = [
    "BatchExecutorInterface",
    "BatchInput",
    "BatchExecutorService",
    "get_batch_service",
]
