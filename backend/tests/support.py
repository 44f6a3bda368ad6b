"""
Test support: isolated ledgers and common setup steps.

Each test drives its services inside one asyncio.run(), so a ledger is
opened and closed inside that same loop.
"""

from contextlib import asynccontextmanager

from app.core.config import get_settings
from app.db.database import LedgerStore
from app.schemas.protocol import ProtocolCategory, RegisterProtocolRequest, RiskParamsUpdate
from app.schemas.vault import AllocationEntry, CreateVaultRequest
from app.services.adapters import AdapterRegistry, MockProtocolAdapter
from app.services.context import LedgerContext
from app.services.events import InMemoryEventBus
from app.services.registry import ProtocolRegistryService
from app.services.settlement import SettlementService
from app.services.vault import VaultLedgerService

ADMIN = "admin"
ALICE = "alice"
BOB = "bob"

MEMORY_DB = "sqlite+aiosqlite:///:memory:"


@asynccontextmanager
async def open_ledger(oracle=None, adapter=None, event_bus=None, **overrides):
    """In-memory store, event history and a recording mock adapter."""
    settings = get_settings().model_copy(update={"contract_owner": ADMIN, **overrides})
    store = LedgerStore(MEMORY_DB, event_bus=event_bus or InMemoryEventBus(history_size=500))
    await store.init()
    try:
        yield LedgerContext(
            store=store,
            settings=settings,
            adapters=AdapterRegistry(adapter or MockProtocolAdapter()),
            oracle=oracle,
        )
    finally:
        await store.close()


async def register(context, name="lend", tokens=None, category=ProtocolCategory.LENDING):
    request = RegisterProtocolRequest(
        name=name,
        address=f"SP.{name}",
        supported_tokens=["STX", "USDA"] if tokens is None else tokens,
        category=category,
    )
    return await ProtocolRegistryService(context).register(ADMIN, request)


async def set_params(context, protocol_id, threshold=80, max_ltv=70, penalty=10):
    update = RiskParamsUpdate(
        liquidation_threshold=threshold,
        max_ltv=max_ltv,
        liquidation_penalty=penalty,
        oracle="fixed",
    )
    return await ProtocolRegistryService(context).set_risk_params(ADMIN, protocol_id, update)


async def fund(context, account, amount):
    return await SettlementService(context).credit(ADMIN, account, amount)


async def create_vault(context, allocation, creator=ALICE, risk_level=5, deposit_cap=None):
    request = CreateVaultRequest(
        name="Balanced",
        risk_level=risk_level,
        allocation=[AllocationEntry(protocol_id=p, percentage=pct) for p, pct in allocation],
        deposit_cap=deposit_cap,
    )
    return await VaultLedgerService(context).create(creator, request)


def events(context, event_type=None):
    bus = context.store.event_bus
    return bus.events_of(event_type) if event_type else bus.history
