"""
Settlement Account API Endpoints
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_caller
from app.schemas.settlement import AccountBalance, CreditRequest
from app.services.settlement import get_settlement_service

router = APIRouter()


@router.get("/{account}", response_model=AccountBalance)
async def get_balance(account: str):
    return await get_settlement_service().balance_of(account)


@router.post("/{account}/credit", response_model=AccountBalance)
async def credit_account(account: str, request: CreditRequest, caller: str = Depends(get_caller)):
    """Mint settlement currency into an account. Admin only."""
    return await get_settlement_service().credit(caller, account, request.amount)
