"""
SQLAlchemy models for the VaultLedger store.

Uses SQLite for local persistence of:
- Sequence counters (protocol ids, vault ids, block height)
- Protocol registry and risk parameters
- Vaults and per-user vault positions
- Reported protocol positions and user risk settings
- Settlement currency balances
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Boolean,
    Text,
    ForeignKey,
    Index,
    JSON,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Counter(Base):
    """
    Process-wide monotonic sequences.
    Values are never reused, even after deactivation.
    """
    __tablename__ = "counters"

    name = Column(String(32), primary_key=True)
    value = Column(Integer, nullable=False, default=0)


class ProtocolRecord(Base):
    """Registered external protocol."""
    __tablename__ = "protocols"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(64), nullable=False)
    address = Column(String(128), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    trusted = Column(Boolean, nullable=False, default=True)
    supported_tokens = Column(JSON, nullable=False, default=list)  # ["STX", "USDA", ...]
    category = Column(String(16), nullable=False)  # lending, dex, farm, staking, other
    created_height = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


class RiskParamsRecord(Base):
    """Risk parameters, at most one row per protocol."""
    __tablename__ = "protocol_risk_params"

    protocol_id = Column(Integer, ForeignKey("protocols.id"), primary_key=True)
    liquidation_threshold = Column(Integer, nullable=False)
    max_ltv = Column(Integer, nullable=False)
    liquidation_penalty = Column(Integer, nullable=False)
    oracle = Column(String(128), nullable=False)
    updated_height = Column(Integer, nullable=False)


class VaultRecord(Base):
    """
    Vault definition and running total.
    allocation is immutable after creation.
    """
    __tablename__ = "vaults"

    id = Column(Integer, primary_key=True, autoincrement=False)
    creator = Column(String(128), nullable=False, index=True)
    name = Column(String(64), nullable=False)
    description = Column(Text, default="")
    strategy_type = Column(String(32), default="balanced")
    risk_level = Column(Integer, nullable=False)

    # [{"protocol_id": 1, "percentage": 60}, ...] in target order
    allocation = Column(JSON, nullable=False)

    active = Column(Boolean, nullable=False, default=True)
    total_assets = Column(Integer, nullable=False, default=0)
    deposit_cap = Column(Integer, nullable=True)

    created_height = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


class UserVaultPositionRecord(Base):
    """A user's balance in one vault."""
    __tablename__ = "user_vault_positions"

    user = Column(String(128), primary_key=True)
    vault_id = Column(Integer, ForeignKey("vaults.id"), primary_key=True)
    amount = Column(Integer, nullable=False, default=0)
    entry_height = Column(Integer, nullable=False, default=0)
    last_rebalance_height = Column(Integer, nullable=False, default=0)
    cumulative_earnings = Column(Integer, nullable=False, default=0)
    strategy = Column(String(64), nullable=True)

    __table_args__ = (
        Index("ix_user_vault_positions_vault", "vault_id"),
    )


class UserProtocolPositionRecord(Base):
    """
    Caller-reported holdings of a user inside one protocol.
    Each list holds {"token": ..., "amount": ...} entries.
    """
    __tablename__ = "user_protocol_positions"

    user = Column(String(128), primary_key=True)
    protocol_id = Column(Integer, ForeignKey("protocols.id"), primary_key=True)
    supplied = Column(JSON, nullable=False, default=list)
    borrowed = Column(JSON, nullable=False, default=list)
    liquidity = Column(JSON, nullable=False, default=list)
    staked = Column(JSON, nullable=False, default=list)
    last_updated_height = Column(Integer, nullable=False)


class UserRiskSettingsRecord(Base):
    """User alert preferences (percentages)."""
    __tablename__ = "user_risk_settings"

    user = Column(String(128), primary_key=True)
    liquidation_alert_threshold = Column(Integer, nullable=False)
    rebalance_threshold = Column(Integer, nullable=False)
    max_slippage = Column(Integer, nullable=False)
    notifications = Column(Boolean, nullable=False, default=True)


class SettlementAccount(Base):
    """Settlement currency balance held by an identity."""
    __tablename__ = "settlement_accounts"

    account = Column(String(128), primary_key=True)
    balance = Column(Integer, nullable=False, default=0)
