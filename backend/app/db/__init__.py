"""
Database module for VaultLedger.

Provides the SQLite-backed ledger store and models.
"""

from app.db.database import (
    LedgerStore,
    Transaction,
    close_store,
    get_store,
    init_store,
)
from app.db.models import (
    Base,
    Counter,
    ProtocolRecord,
    RiskParamsRecord,
    SettlementAccount,
    UserProtocolPositionRecord,
    UserRiskSettingsRecord,
    UserVaultPositionRecord,
    VaultRecord,
)

__all__ = [
    "LedgerStore",
    "Transaction",
    "close_store",
    "get_store",
    "init_store",
    "Base",
    "Counter",
    "ProtocolRecord",
    "RiskParamsRecord",
    "SettlementAccount",
    "UserProtocolPositionRecord",
    "UserRiskSettingsRecord",
    "UserVaultPositionRecord",
    "VaultRecord",
]
