"""
Position Tracker

CONTRACT:
    Input:  PositionUpdateInput
    Output: UserProtocolPosition

A caller-asserted mirror of supplied / borrowed / liquidity / staked
holdings per (user, protocol). Updates replace all four lists.
"""

from app.services.positions.interface import PositionTrackerInterface, PositionUpdateInput
from app.services.positions.service import (
    POSITION_LISTS,
    PositionTrackerService,
    get_position_service,
)

__all__ = [
    "PositionTrackerInterface",
    "PositionUpdateInput",
    "POSITION_LISTS",
    "PositionTrackerService",
    "get_position_service",
]
