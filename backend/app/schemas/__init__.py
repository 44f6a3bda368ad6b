"""
VaultLedger Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from app.schemas.protocol import (
    Protocol,
    ProtocolCategory,
    ProtocolStatusUpdate,
    RegisterProtocolRequest,
    RiskParams,
    RiskParamsUpdate,
)
from app.schemas.vault import (
    AllocationEntry,
    AllocationPlan,
    AllocationShare,
    AmountRequest,
    CreateVaultRequest,
    UserVaultPosition,
    Vault,
    VaultOperationResult,
    VaultStatusUpdate,
)
from app.schemas.position import (
    PositionUpdateRequest,
    TokenAmount,
    UserProtocolPosition,
)
from app.schemas.risk import (
    LiquidationRiskResult,
    RiskPreferencesRequest,
    UserRiskSettings,
)
from app.schemas.events import EventType, LedgerEvent
from app.schemas.settlement import AccountBalance, CreditRequest
from app.schemas.batch import (
    BatchAction,
    BatchActionResult,
    BatchActionType,
    BatchRequest,
    BatchResult,
)

__all__ = [
    # Protocol
    "Protocol",
    "ProtocolCategory",
    "ProtocolStatusUpdate",
    "RegisterProtocolRequest",
    "RiskParams",
    "RiskParamsUpdate",
    # Vault
    "AllocationEntry",
    "AllocationPlan",
    "AllocationShare",
    "AmountRequest",
    "CreateVaultRequest",
    "UserVaultPosition",
    "Vault",
    "VaultOperationResult",
    "VaultStatusUpdate",
    # Position
    "PositionUpdateRequest",
    "TokenAmount",
    "UserProtocolPosition",
    # Risk
    "LiquidationRiskResult",
    "RiskPreferencesRequest",
    "UserRiskSettings",
    # Events
    "EventType",
    "LedgerEvent",
    # Batch
    "BatchAction",
    "BatchActionResult",
    "BatchActionType",
    "BatchRequest",
    "BatchResult",
    # Settlement
    "AccountBalance",
    "CreditRequest",
]
