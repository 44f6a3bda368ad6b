"""
Ledger Context

Everything a ledger operation depends on, passed explicitly to each
service instead of living in module globals:
    - store: transactional state (counters, records, balances)
    - settings: admin identity, custody account, limits, defaults
    - adapters / settlement / oracle: external capabilities
"""

from dataclasses import dataclass, field
from typing import Optional

from app.core.config import Settings, settings as app_settings
from app.db.database import LedgerStore
from app.services.adapters import (
    AdapterRegistry,
    FixedLtvOracle,
    LedgerSettlement,
    PositionValuationOracle,
    SettlementGateway,
    TrackedPositionOracle,
)


@dataclass
class LedgerContext:
    store: LedgerStore
    settings: Settings = field(default_factory=lambda: app_settings)
    adapters: AdapterRegistry = field(default_factory=AdapterRegistry)
    settlement: SettlementGateway = field(default_factory=LedgerSettlement)
    oracle: Optional[PositionValuationOracle] = None

    def __post_init__(self):
        if self.oracle is None:
            if self.settings.use_tracked_positions_for_ltv:
                self.oracle = TrackedPositionOracle()
            else:
                self.oracle = FixedLtvOracle(self.settings.placeholder_ltv)

    @property
    def admin(self) -> str:
        return self.settings.contract_owner

    @property
    def custody_account(self) -> str:
        return self.settings.custody_account

    def is_admin(self, caller: str) -> bool:
        return caller == self.settings.contract_owner


_context: Optional[LedgerContext] = None


def configure_context(context: Optional[LedgerContext]) -> None:
    """Install (or clear) the application-wide context."""
    global _context
    _context = context


def get_ledger_context() -> LedgerContext:
    """Get the application-wide context. configure_context() must have run."""
    if _context is None:
        raise RuntimeError("Ledger context not configured")
    return _context
