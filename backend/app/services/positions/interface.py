"""
Position Tracker Service Interface

Defines the contract for caller-reported protocol positions.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.services.base import BaseService
from app.schemas.position import PositionUpdateRequest, UserProtocolPosition


@dataclass
class PositionUpdateInput:
    """Input for a position update."""

    user: str
    protocol_id: int
    request: PositionUpdateRequest


class PositionTrackerInterface(BaseService[PositionUpdateInput, UserProtocolPosition]):
    """
    Position Tracker Contract.

    INPUT: PositionUpdateInput
        - supplied / borrowed / liquidity / staked: up to 5 entries each

    OUTPUT: UserProtocolPosition
        - the four lists exactly as given (replace, never merge)

    The protocol must be registered and active. Nothing is reconciled
    against vault balances.
    """

    @property
    def name(self) -> str:
        return "PositionTracker"

    @abstractmethod
    async def execute(self, input_data: PositionUpdateInput) -> UserProtocolPosition:
        """Replace a user's position in one protocol."""
        pass

    @abstractmethod
    async def get_position(self, user: str, protocol_id: int) -> Optional[UserProtocolPosition]:
        pass
