"""
Vault Ledger

CONTRACT:
    Input:  CreateVaultInput / deposit and withdraw requests
    Output: Vault / VaultOperationResult

RESPONSIBILITIES:
    - Create vaults with a fixed target allocation
    - Move settlement currency into and out of custody
    - Keep per-user positions and vault totals consistent
    - Route each deposit/withdrawal across protocols via the allocation engine
    - Publish deposit, withdraw and rebalance events

All-or-nothing: a failed operation leaves balances, totals and
counters exactly as they were.
"""

from app.services.vault.interface import CreateVaultInput, VaultLedgerInterface
from app.services.vault.service import VaultLedgerService, get_vault_service

__all__ = [
    "CreateVaultInput",
    "VaultLedgerInterface",
    "VaultLedgerService",
    "get_vault_service",
]
