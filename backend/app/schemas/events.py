"""
CONTRACT 5: Ledger Events

Structured records published for external subscribers once an
operation has committed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from pydantic import BaseModel, Field


class EventType(str, Enum):
    PROTOCOL_REGISTERED = "protocol-registered"
    PROTOCOL_STATUS_UPDATED = "protocol-status-updated"
    RISK_PARAMS_UPDATED = "risk-params-updated"
    VAULT_CREATED = "vault-created"
    VAULT_STATUS_UPDATED = "vault-status-updated"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    REBALANCE = "rebalance"
    LIQUIDATION_ALERT = "liquidation-alert"
    RISK_PREFERENCES_UPDATED = "risk-preferences-updated"
    POSITION_UPDATED = "position-updated"
    BATCH_EXECUTED = "batch-executed"
    SETTLEMENT_CREDITED = "settlement-credited"


class LedgerEvent(BaseModel):
    """A single event record."""

    event_type: EventType
    height: int
    payload: dict[str, Any] = Field(default_factory=dict)
    emitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
