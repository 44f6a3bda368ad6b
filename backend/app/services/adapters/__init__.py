"""
External Capabilities

CONTRACT:
    ProtocolAdapter:          deposit/withdraw an amount at one protocol
    SettlementGateway:        transfer settlement currency between identities
    PositionValuationOracle:  current loan-to-value for (user, protocol)

The ledger invokes these; it never implements real protocol calls.
Mock and in-ledger implementations are provided for development and tests.
"""

from app.services.adapters.dispatch import (
    DEPOSIT,
    WITHDRAW,
    AppliedCall,
    compensate,
    invoke,
)
from app.services.adapters.interface import (
    PositionValuationOracle,
    ProtocolAdapter,
    SettlementGateway,
)
from app.services.adapters.mock_adapter import (
    AdapterCall,
    AdapterRegistry,
    MockProtocolAdapter,
)
from app.services.adapters.oracle import FixedLtvOracle, TrackedPositionOracle
from app.services.adapters.settlement import LedgerSettlement

__all__ = [
    "DEPOSIT",
    "WITHDRAW",
    "AppliedCall",
    "compensate",
    "invoke",
    "PositionValuationOracle",
    "ProtocolAdapter",
    "SettlementGateway",
    "AdapterCall",
    "AdapterRegistry",
    "MockProtocolAdapter",
    "FixedLtvOracle",
    "TrackedPositionOracle",
    "LedgerSettlement",
]
