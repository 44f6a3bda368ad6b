"""
Position API Endpoints

Caller-reported holdings per protocol.
"""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_caller
from app.schemas.position import PositionUpdateRequest, UserProtocolPosition
from app.services.positions import get_position_service

router = APIRouter()


@router.put("/{protocol_id}", response_model=UserProtocolPosition)
async def update_position(
    protocol_id: int,
    request: PositionUpdateRequest,
    caller: str = Depends(get_caller),
):
    """Replace the caller's supplied, borrowed, liquidity and staked lists."""
    return await get_position_service().update(caller, protocol_id, request)


@router.get("", response_model=list[UserProtocolPosition])
async def list_positions(caller: str = Depends(get_caller)):
    return await get_position_service().list_positions(caller)


@router.get("/{protocol_id}", response_model=UserProtocolPosition)
async def get_position(protocol_id: int, caller: str = Depends(get_caller)):
    position = await get_position_service().get_position(caller, protocol_id)
    if position is None:
        raise HTTPException(status_code=404, detail=f"No position at protocol {protocol_id}")
    return position
