"""
Vault API Endpoints

Vault creation, deposits, withdrawals and rebalance requests.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_caller
from app.schemas.vault import (
    AllocationPlan,
    AmountRequest,
    CreateVaultRequest,
    UserVaultPosition,
    Vault,
    VaultOperationResult,
    VaultStatusUpdate,
)
from app.services.allocation import AllocationInput, get_allocation_engine
from app.services.vault import get_vault_service

router = APIRouter()


@router.post("", response_model=Vault, status_code=201)
async def create_vault(request: CreateVaultRequest, caller: str = Depends(get_caller)):
    """
    Create a vault owned by the caller.

    Allocation percentages must sum to exactly 100 and every target
    protocol must be registered and active.
    """
    return await get_vault_service().create(caller, request)


@router.get("", response_model=list[Vault])
async def list_vaults(
    creator: Optional[str] = Query(default=None),
    active_only: bool = Query(default=False),
):
    return await get_vault_service().list_vaults(creator=creator, active_only=active_only)


@router.get("/{vault_id}", response_model=Vault)
async def get_vault(vault_id: int):
    vault = await get_vault_service().get_vault(vault_id)
    if vault is None:
        raise HTTPException(status_code=404, detail=f"Vault {vault_id} not found")
    return vault


@router.post("/{vault_id}/deposit", response_model=VaultOperationResult)
async def deposit(vault_id: int, request: AmountRequest, caller: str = Depends(get_caller)):
    """Deposit settlement currency; the amount is routed across the allocation."""
    return await get_vault_service().deposit(caller, vault_id, request)


@router.post("/{vault_id}/withdraw", response_model=VaultOperationResult)
async def withdraw(vault_id: int, request: AmountRequest, caller: str = Depends(get_caller)):
    """Withdraw from the caller's own position."""
    return await get_vault_service().withdraw(caller, vault_id, request)


@router.post("/{vault_id}/rebalance", response_model=Vault)
async def rebalance(vault_id: int, caller: str = Depends(get_caller)):
    """Request a rebalance. Vault creator or admin only."""
    return await get_vault_service().rebalance(caller, vault_id)


@router.put("/{vault_id}/status", response_model=Vault)
async def update_vault_status(
    vault_id: int,
    update: VaultStatusUpdate,
    caller: str = Depends(get_caller),
):
    return await get_vault_service().set_vault_status(caller, vault_id, update)


@router.get("/{vault_id}/positions", response_model=list[UserVaultPosition])
async def list_positions(vault_id: int):
    return await get_vault_service().list_vault_positions(vault_id)


@router.get("/{vault_id}/positions/{user}", response_model=UserVaultPosition)
async def get_position(vault_id: int, user: str):
    position = await get_vault_service().get_user_position(user, vault_id)
    if position is None:
        raise HTTPException(status_code=404, detail=f"No position for {user} in vault {vault_id}")
    return position


@router.get("/{vault_id}/allocation", response_model=AllocationPlan)
async def preview_allocation(vault_id: int, amount: int = Query(..., ge=0)):
    """
    Preview how an amount would be split across the vault's protocols.

    Shares are truncated; the remainder is not redistributed.
    """
    vault = await get_vault_service().get_vault(vault_id)
    if vault is None:
        raise HTTPException(status_code=404, detail=f"Vault {vault_id} not found")
    return await get_allocation_engine().execute(AllocationInput(vault.allocation, amount))
