"""
Tests for the ledger store, settlement accounts and the event stream.
"""

import asyncio

import pytest

from app.schemas.events import EventType, LedgerEvent
from app.schemas.vault import AmountRequest
from app.services.base import ErrorCode, LedgerError
from app.services.events import InMemoryEventBus
from app.services.settlement import CreditInput, SettlementService
from app.services.vault import VaultLedgerService
from support import ADMIN, ALICE, BOB, create_vault, events, fund, open_ledger, register


class SlowBus(InMemoryEventBus):
    """Bus that stalls while publishing alice's deposits."""

    async def publish(self, event):
        if event.event_type == EventType.DEPOSIT and event.payload.get("user") == ALICE:
            await asyncio.sleep(0.05)
        await super().publish(event)


class TestTransactions:

    def test_write_advances_height_read_does_not(self):
        async def scenario():
            async with open_ledger() as ctx:
                assert await ctx.store.height() == 0
                async with ctx.store.transaction() as tx:
                    assert tx.height == 1
                async with ctx.store.transaction(write=False) as tx:
                    assert tx.height == 1
                assert await ctx.store.height() == 1

        asyncio.run(scenario())

    def test_failed_operation_publishes_nothing(self):
        async def scenario():
            async with open_ledger() as ctx:
                with pytest.raises(RuntimeError):
                    async with ctx.store.transaction() as tx:
                        tx.emit(EventType.DEPOSIT, amount=1)
                        raise RuntimeError("boom")
                assert events(ctx) == []
                assert await ctx.store.height() == 0

        asyncio.run(scenario())

    def test_events_published_after_commit_in_order(self):
        async def scenario():
            async with open_ledger() as ctx:
                await register(ctx, "a")
                await register(ctx, "b")
                heights = [e.height for e in events(ctx)]
                assert heights == sorted(heights)
                assert [e.event_type for e in events(ctx)] == [EventType.PROTOCOL_REGISTERED] * 2

        asyncio.run(scenario())

    def test_slow_subscriber_keeps_commit_order(self):
        async def scenario():
            bus = SlowBus(history_size=100)
            async with open_ledger(event_bus=bus) as ctx:
                ledger = VaultLedgerService(ctx)
                protocol = await register(ctx)
                vault = await create_vault(ctx, [(protocol.id, 100)])
                await fund(ctx, ALICE, 100)
                await fund(ctx, BOB, 100)

                await asyncio.gather(
                    ledger.deposit(ALICE, vault.id, AmountRequest(amount=60)),
                    ledger.deposit(BOB, vault.id, AmountRequest(amount=40)),
                )

                heights = [e.height for e in bus.history]
                assert heights == sorted(heights)
                assert [e.payload["user"] for e in bus.events_of(EventType.DEPOSIT)] == [ALICE, BOB]

        asyncio.run(scenario())


class TestSettlement:

    def test_admin_credit(self):
        async def scenario():
            async with open_ledger() as ctx:
                settlement = SettlementService(ctx)
                result = await settlement.execute(CreditInput(ADMIN, ALICE, 250))
                assert result.balance == 250
                await settlement.credit(ADMIN, ALICE, 50)
                assert (await settlement.balance_of(ALICE)).balance == 300
                assert len(events(ctx, EventType.SETTLEMENT_CREDITED)) == 2

        asyncio.run(scenario())

    def test_credit_rejections(self):
        async def scenario():
            async with open_ledger() as ctx:
                settlement = SettlementService(ctx)
                with pytest.raises(LedgerError) as exc:
                    await settlement.credit(ALICE, ALICE, 100)
                assert exc.value.code == ErrorCode.NOT_AUTHORIZED

                with pytest.raises(LedgerError) as exc:
                    await settlement.credit(ADMIN, ALICE, 0)
                assert exc.value.code == ErrorCode.INVALID_AMOUNT
                assert (await settlement.balance_of(ALICE)).balance == 0

        asyncio.run(scenario())


class TestEventBus:

    def test_history_bounded_and_fanned_out(self):
        async def scenario():
            bus = InMemoryEventBus(history_size=2)
            received = []
            bus.add_callback(received.append)
            queue = bus.create_queue("sub")

            for height in (1, 2, 3):
                await bus.publish(LedgerEvent(event_type=EventType.DEPOSIT, height=height))

            assert [e.height for e in bus.history] == [2, 3]
            assert len(received) == 3
            assert queue.qsize() == 3

            bus.remove_queue("sub")
            await bus.publish(LedgerEvent(event_type=EventType.WITHDRAW, height=4))
            assert queue.qsize() == 3
            assert [e.height for e in bus.events_of(EventType.WITHDRAW)] == [4]

        asyncio.run(scenario())

    def test_emitted_at_is_timezone_aware(self):
        event = LedgerEvent(event_type=EventType.DEPOSIT, height=1)
        assert event.emitted_at.utcoffset() is not None
        assert event.emitted_at.utcoffset().total_seconds() == 0
