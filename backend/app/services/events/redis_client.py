"""
Event stream for ledger events.

Publishes committed ledger events to subscribers. Redis pub/sub carries
them to external consumers; an in-memory history and subscriber queues
serve in-process consumers and stand in when Redis is unavailable.
"""

import asyncio
import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

import redis.asyncio as redis

from app.core.config import settings
from app.schemas.events import EventType, LedgerEvent

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None


async def init_redis() -> Optional[redis.Redis]:
    """
    Initialize Redis connection pool.
    Called on application startup when Redis events are enabled.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    try:
        _redis_pool = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        # Test connection
        await _redis_pool.ping()
        logger.info(f"Redis connected: {settings.redis_url}")
        return _redis_pool
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory event stream.")
        _redis_pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.close()
        _redis_pool = None
        logger.info("Redis connection closed")


class InMemoryEventBus:
    """
    In-process event stream.

    Keeps a bounded history and fans each event out to callbacks and
    per-subscriber queues.
    """

    def __init__(self, history_size: Optional[int] = None):
        self._history: Deque[LedgerEvent] = deque(maxlen=history_size or settings.event_history_size)
        self._callbacks: List[Callable[[LedgerEvent], None]] = []
        self._queues: Dict[str, asyncio.Queue] = {}

    @property
    def history(self) -> List[LedgerEvent]:
        return list(self._history)

    def events_of(self, event_type: EventType) -> List[LedgerEvent]:
        """History filtered to one event type."""
        return [e for e in self._history if e.event_type == event_type]

    def add_callback(self, callback: Callable[[LedgerEvent], None]) -> None:
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[LedgerEvent], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def create_queue(self, subscriber_id: str) -> asyncio.Queue:
        """Create a queue receiving every future event."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=100)
        self._queues[subscriber_id] = queue
        return queue

    def remove_queue(self, subscriber_id: str) -> None:
        self._queues.pop(subscriber_id, None)

    async def publish(self, event: LedgerEvent) -> None:
        self._history.append(event)

        for callback in self._callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event callback failed: {e}")

        for subscriber_id, queue in self._queues.items():
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.debug(f"Event queue full for subscriber {subscriber_id}")


class RedisEventBus(InMemoryEventBus):
    """
    Event stream that also publishes JSON records to a Redis channel.

    Falls back to the in-memory stream when Redis is unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        channel: Optional[str] = None,
        history_size: Optional[int] = None,
    ):
        super().__init__(history_size)
        self._redis = redis_client
        self.channel = channel or settings.event_channel

    @property
    def redis(self) -> Optional[redis.Redis]:
        return self._redis or _redis_pool

    async def publish(self, event: LedgerEvent) -> None:
        if self.redis:
            try:
                await self.redis.publish(self.channel, event.model_dump_json())
            except Exception as e:
                logger.debug(f"Redis publish failed: {e}")

        await super().publish(event)


# Singleton instance
_event_bus: Optional[InMemoryEventBus] = None


def get_event_bus() -> InMemoryEventBus:
    """Get or create the application event bus."""
    global _event_bus
    if _event_bus is None:
        if settings.enable_redis_events:
            _event_bus = RedisEventBus()
        else:
            _event_bus = InMemoryEventBus()
    return _event_bus
