"""
Ledger store: database connection and transaction management.

Uses SQLite with aiosqlite for async support.

Every public ledger operation runs inside exactly one store transaction.
Transactions are serialized by a process-wide lock, so operations commit
in a total order and no reader observes a half-applied operation. Any
exception raised inside a transaction rolls back every mutation it made.
"""

import asyncio
import os
import logging
from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.db.models import Base, Counter
from app.core.config import settings
from app.schemas.events import EventType, LedgerEvent

logger = logging.getLogger(__name__)

# Counter names
PROTOCOL_ID_COUNTER = "next-protocol-id"
VAULT_ID_COUNTER = "next-vault-id"
HEIGHT_COUNTER = "block-height"


def default_database_url() -> str:
    """Resolve the database URL from settings, creating the data directory if needed."""
    if settings.database_url:
        return settings.database_url

    data_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "data")
    os.makedirs(data_dir, exist_ok=True)
    sqlite_path = settings.sqlite_path or os.path.join(data_dir, "vaultledger.db")
    return f"sqlite+aiosqlite:///{sqlite_path}"


async def read_counter(session: AsyncSession, name: str) -> int:
    """Current value of a counter (0 if never advanced)."""
    counter = await session.get(Counter, name)
    return counter.value if counter else 0


async def advance_counter(session: AsyncSession, name: str) -> int:
    """Increment a counter and return the new value."""
    counter = await session.get(Counter, name)
    if counter is None:
        counter = Counter(name=name, value=0)
        session.add(counter)
    counter.value += 1
    await session.flush()
    return counter.value


class Transaction:
    """
    One atomic unit of work.

    Holds the session, the block height the operation runs at, and the
    events it will publish once committed.
    """

    def __init__(self, session: AsyncSession, height: int):
        self.session = session
        self.height = height
        self.events: list[LedgerEvent] = []

    def emit(self, event_type: EventType, **payload) -> LedgerEvent:
        """Queue an event; it is published only if the transaction commits."""
        event = LedgerEvent(event_type=event_type, height=self.height, payload=payload)
        self.events.append(event)
        return event


class LedgerStore:
    """
    Shared, versioned key-value state behind all ledger services.

    Usage:
        store = LedgerStore("sqlite+aiosqlite:///:memory:")
        await store.init()
        async with store.transaction() as tx:
            ...
    """

    def __init__(self, database_url: Optional[str] = None, event_bus=None):
        self.database_url = database_url or default_database_url()
        self.event_bus = event_bus

        # Note: SQLite requires check_same_thread=False for async
        self.engine = create_async_engine(
            self.database_url,
            echo=False,  # Set to True for SQL debugging
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,  # Recommended for SQLite
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        """
        Initialize the database - create all tables.
        Called on application startup.
        """
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info(f"Ledger store initialized at: {self.database_url}")
        except Exception as e:
            logger.error(f"Failed to initialize ledger store: {e}")
            raise

    async def close(self) -> None:
        """
        Close database connections.
        Called on application shutdown.
        """
        await self.engine.dispose()
        logger.info("Ledger store connections closed")

    async def height(self) -> int:
        """Current block height (number of committed write operations)."""
        async with self.transaction(write=False) as tx:
            return tx.height

    @asynccontextmanager
    async def transaction(self, write: bool = True) -> AsyncGenerator[Transaction, None]:
        """
        Run one operation atomically.

        Write transactions advance the block height; read transactions
        observe the current one. Events are published after commit.
        """
        async with self._lock:
            async with self.session_factory() as session:
                try:
                    if write:
                        height = await advance_counter(session, HEIGHT_COUNTER)
                    else:
                        height = await read_counter(session, HEIGHT_COUNTER)
                    tx = Transaction(session, height)
                    yield tx
                    if write:
                        await session.commit()
                    else:
                        await session.rollback()
                except Exception:
                    await session.rollback()
                    raise

            # Still under the lock so subscribers see events in commit order
            if tx.events and self.event_bus is not None:
                for event in tx.events:
                    await self.event_bus.publish(event)


# Application-wide store (created on startup)
_store: Optional[LedgerStore] = None


async def init_store(database_url: Optional[str] = None, event_bus=None) -> LedgerStore:
    """
    Create and initialize the application store.
    Called on application startup.
    """
    global _store
    if _store is None:
        _store = LedgerStore(database_url, event_bus=event_bus)
        await _store.init()
    return _store


async def close_store() -> None:
    """Dispose the application store."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None


def get_store() -> LedgerStore:
    """Get the application store. init_store() must have run."""
    if _store is None:
        raise RuntimeError("Ledger store not initialized")
    return _store
