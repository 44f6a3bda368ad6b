"""
Event stream module for VaultLedger.

Publishes deposit, withdraw, rebalance and liquidation-alert records
(and the other ledger events) to subscribers after commit.
"""

from app.services.events.redis_client import (
    InMemoryEventBus,
    RedisEventBus,
    get_event_bus,
    init_redis,
    close_redis,
)

__all__ = [
    "InMemoryEventBus",
    "RedisEventBus",
    "get_event_bus",
    "init_redis",
    "close_redis",
]
