"""
CONTRACT 2: Vaults and Allocation

Input:  CreateVaultRequest / AmountRequest
Output: Vault / VaultOperationResult

A vault's target allocation is fixed at creation and never re-validated
or mutated afterwards.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ALLOCATION
# =============================================================================


class AllocationEntry(BaseModel):
    """One (protocol, percentage) pair of a target allocation."""

    model_config = ConfigDict(frozen=True)

    protocol_id: int
    percentage: int


class AllocationShare(BaseModel):
    """Sub-amount routed to one protocol."""

    protocol_id: int
    percentage: int
    amount: int


class AllocationPlan(BaseModel):
    """
    Output of the allocation engine.

    total_amount is the authoritative vault-side figure; only adapter
    calls see the truncated per-protocol shares.
    """

    total_amount: int
    shares: list[AllocationShare]

    @property
    def allocated(self) -> int:
        return sum(share.amount for share in self.shares)

    @property
    def remainder(self) -> int:
        return self.total_amount - self.allocated


# =============================================================================
# REQUESTS
# =============================================================================


class CreateVaultRequest(BaseModel):
    """Request to create a vault."""

    name: str = Field(..., min_length=1, max_length=64)
    description: str = Field(default="", max_length=256)
    strategy_type: str = Field(default="balanced", max_length=32)
    risk_level: int = Field(..., description="1 (conservative) .. 10 (aggressive)")
    allocation: list[AllocationEntry]
    deposit_cap: Optional[int] = Field(
        default=None,
        description="Max total assets; None for unbounded",
    )


class AmountRequest(BaseModel):
    """Deposit or withdraw request body."""

    amount: int
    strategy: Optional[str] = Field(
        default=None,
        description="Optional strategy parameter stored on the position",
    )


class VaultStatusUpdate(BaseModel):
    active: bool


# =============================================================================
# RECORDS
# =============================================================================


class Vault(BaseModel):
    """Vault definition plus running total."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    creator: str
    name: str
    description: str
    strategy_type: str
    risk_level: int
    allocation: list[AllocationEntry]
    active: bool
    total_assets: int
    deposit_cap: Optional[int] = None
    created_height: int
    created_at: Optional[datetime] = None


class UserVaultPosition(BaseModel):
    """A user's balance in one vault."""

    model_config = ConfigDict(from_attributes=True)

    user: str
    vault_id: int
    amount: int = 0
    entry_height: int = 0
    last_rebalance_height: int = 0
    cumulative_earnings: int = 0
    strategy: Optional[str] = None


class VaultOperationResult(BaseModel):
    """Result of a deposit or withdrawal."""

    vault: Vault
    position: UserVaultPosition
    plan: AllocationPlan
    height: int
