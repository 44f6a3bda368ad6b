"""
Vault Ledger Service Interface

Defines the contract for vault definitions and balances.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.services.base import BaseService
from app.schemas.vault import (
    AmountRequest,
    CreateVaultRequest,
    UserVaultPosition,
    Vault,
    VaultOperationResult,
    VaultStatusUpdate,
)


@dataclass
class CreateVaultInput:
    """Input for vault creation."""

    creator: str
    request: CreateVaultRequest


class VaultLedgerInterface(BaseService[CreateVaultInput, Vault]):
    """
    Vault Ledger Contract.

    INPUT: CreateVaultInput
        - creator: any identity
        - request: metadata, risk level (1..10), allocation (sum 100)

    OUTPUT: Vault
        - id: next value of the vault counter (only consumed on success)
        - total_assets: 0

    OPERATIONS:
        - deposit:   VaultNotFound, InvalidAmount, VaultFull, InsufficientFunds
        - withdraw:  VaultNotFound, InvalidAmount, PositionNotFound, InsufficientFunds
        - rebalance: creator or admin; NotAuthorized, VaultNotFound
        - set_vault_status: creator or admin

    INVARIANTS:
        - vault.total_assets == sum of its positions' amounts
        - 0 <= position.amount <= vault.total_assets
        - allocation never changes after creation
    """

    @property
    def name(self) -> str:
        return "VaultLedger"

    @abstractmethod
    async def execute(self, input_data: CreateVaultInput) -> Vault:
        """Create a vault."""
        pass

    @abstractmethod
    async def deposit(self, user: str, vault_id: int, request: AmountRequest) -> VaultOperationResult:
        pass

    @abstractmethod
    async def withdraw(self, user: str, vault_id: int, request: AmountRequest) -> VaultOperationResult:
        pass

    @abstractmethod
    async def rebalance(self, caller: str, vault_id: int) -> Vault:
        pass

    @abstractmethod
    async def set_vault_status(self, caller: str, vault_id: int, update: VaultStatusUpdate) -> Vault:
        pass

    @abstractmethod
    async def get_vault(self, vault_id: int) -> Optional[Vault]:
        pass

    @abstractmethod
    async def get_user_position(self, user: str, vault_id: int) -> Optional[UserVaultPosition]:
        pass
