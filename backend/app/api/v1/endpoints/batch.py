"""
Batch API Endpoint
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_caller
from app.schemas.batch import BatchRequest, BatchResult
from app.services.batch import get_batch_service

router = APIRouter()


@router.post("", response_model=BatchResult)
async def execute_batch(request: BatchRequest, caller: str = Depends(get_caller)):
    """
    Execute up to 10 protocol actions in order.

    Either every action applies or none does.
    """
    return await get_batch_service().run(caller, request.actions)
