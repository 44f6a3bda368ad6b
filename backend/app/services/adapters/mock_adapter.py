"""
Mock Protocol Adapters

Stand-ins for real lending/DEX/farm integrations. Every call succeeds
unless the protocol id was marked as failing, and every call is recorded.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from app.schemas.protocol import ProtocolCategory
from app.services.adapters.interface import ProtocolAdapter

logger = logging.getLogger(__name__)


@dataclass
class AdapterCall:
    """A recorded adapter invocation."""

    operation: str  # deposit, withdraw
    protocol_id: int
    amount: int


@dataclass
class MockProtocolAdapter:
    """
    Always-succeeding adapter.

    Protocol ids listed in fail_on are refused, which lets tests exercise
    rollback when an external call fails.
    """

    category: ProtocolCategory = ProtocolCategory.OTHER
    fail_on: set[int] = field(default_factory=set)
    calls: list[AdapterCall] = field(default_factory=list)

    async def deposit(self, protocol_id: int, amount: int) -> bool:
        return self._record("deposit", protocol_id, amount)

    async def withdraw(self, protocol_id: int, amount: int) -> bool:
        return self._record("withdraw", protocol_id, amount)

    def net_position(self, protocol_id: int) -> int:
        """Deposited minus withdrawn for one protocol."""
        total = 0
        for call in self.calls:
            if call.protocol_id != protocol_id:
                continue
            total += call.amount if call.operation == "deposit" else -call.amount
        return total

    def _record(self, operation: str, protocol_id: int, amount: int) -> bool:
        if protocol_id in self.fail_on:
            logger.warning(f"Mock {self.category.value} adapter refused {operation} on protocol {protocol_id}")
            return False
        self.calls.append(AdapterCall(operation, protocol_id, amount))
        return True


class AdapterRegistry:
    """
    Resolves the adapter for a protocol.

    Lookup order: explicit per-protocol adapter, then per-category
    adapter, then the default.
    """

    def __init__(self, default: Optional[ProtocolAdapter] = None):
        self.default = default or MockProtocolAdapter()
        self._by_protocol: dict[int, ProtocolAdapter] = {}
        self._by_category: dict[ProtocolCategory, ProtocolAdapter] = {}

    def register_protocol(self, protocol_id: int, adapter: ProtocolAdapter) -> None:
        self._by_protocol[protocol_id] = adapter

    def register_category(self, category: ProtocolCategory, adapter: ProtocolAdapter) -> None:
        self._by_category[category] = adapter

    def resolve(self, protocol_id: int, category: Optional[ProtocolCategory] = None) -> ProtocolAdapter:
        if protocol_id in self._by_protocol:
            return self._by_protocol[protocol_id]
        if category is not None and category in self._by_category:
            return self._by_category[category]
        return self.default
