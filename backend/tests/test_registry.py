"""
Tests for the protocol registry.
"""

import asyncio

import pytest

from app.schemas.events import EventType
from app.schemas.protocol import (
    ProtocolCategory,
    ProtocolStatusUpdate,
    RegisterProtocolRequest,
    RiskParamsUpdate,
)
from app.services.base import ErrorCode, LedgerError
from app.services.registry import ProtocolRegistryService
from support import ADMIN, ALICE, events, open_ledger, register, set_params


def params(threshold=80, max_ltv=70, penalty=10):
    return RiskParamsUpdate(
        liquidation_threshold=threshold,
        max_ltv=max_ltv,
        liquidation_penalty=penalty,
        oracle="fixed",
    )


class TestRegistration:

    def test_ids_are_sequential_from_one(self):
        async def scenario():
            async with open_ledger() as ctx:
                first = await register(ctx, "alex")
                second = await register(ctx, "arkadiko", category=ProtocolCategory.DEX)
                assert (first.id, second.id) == (1, 2)
                assert first.active and first.trusted
                assert second.category == ProtocolCategory.DEX
                assert [e.payload["protocol_id"] for e in events(ctx, EventType.PROTOCOL_REGISTERED)] == [1, 2]

        asyncio.run(scenario())

    def test_non_admin_cannot_register(self):
        async def scenario():
            async with open_ledger() as ctx:
                registry = ProtocolRegistryService(ctx)
                request = RegisterProtocolRequest(name="x", address="SP.x")
                with pytest.raises(LedgerError) as exc:
                    await registry.register(ALICE, request)
                assert exc.value.code == ErrorCode.NOT_AUTHORIZED

                # Failed registration does not consume an id
                protocol = await register(ctx)
                assert protocol.id == 1

        asyncio.run(scenario())

    def test_too_many_supported_tokens(self):
        async def scenario():
            async with open_ledger(max_supported_tokens=2) as ctx:
                with pytest.raises(LedgerError) as exc:
                    await register(ctx, tokens=["A", "B", "C"])
                assert exc.value.code == ErrorCode.INVALID_PARAMETER

        asyncio.run(scenario())


class TestStatus:

    def test_deactivate_and_reactivate(self):
        async def scenario():
            async with open_ledger() as ctx:
                registry = ProtocolRegistryService(ctx)
                protocol = await register(ctx)

                updated = await registry.set_status(ADMIN, protocol.id, ProtocolStatusUpdate(active=False, trusted=False))
                assert not updated.active and not updated.trusted
                assert await registry.list_protocols(active_only=True) == []

                await registry.set_status(ADMIN, protocol.id, ProtocolStatusUpdate(active=True, trusted=True))
                assert len(await registry.list_protocols(active_only=True)) == 1

        asyncio.run(scenario())

    def test_unknown_protocol(self):
        async def scenario():
            async with open_ledger() as ctx:
                registry = ProtocolRegistryService(ctx)
                with pytest.raises(LedgerError) as exc:
                    await registry.set_status(ADMIN, 42, ProtocolStatusUpdate(active=False, trusted=False))
                assert exc.value.code == ErrorCode.PROTOCOL_NOT_REGISTERED

        asyncio.run(scenario())

    def test_non_admin_cannot_update(self):
        async def scenario():
            async with open_ledger() as ctx:
                protocol = await register(ctx)
                with pytest.raises(LedgerError) as exc:
                    await ProtocolRegistryService(ctx).set_status(
                        ALICE, protocol.id, ProtocolStatusUpdate(active=False, trusted=False)
                    )
                assert exc.value.code == ErrorCode.NOT_AUTHORIZED

        asyncio.run(scenario())


class TestRiskParams:

    def test_set_and_overwrite(self):
        async def scenario():
            async with open_ledger() as ctx:
                registry = ProtocolRegistryService(ctx)
                protocol = await register(ctx)
                assert await registry.get_risk_params(protocol.id) is None

                await set_params(ctx, protocol.id, threshold=80, max_ltv=70)
                stored = await set_params(ctx, protocol.id, threshold=85, max_ltv=85)
                assert stored.liquidation_threshold == 85
                assert (await registry.get_risk_params(protocol.id)).max_ltv == 85

        asyncio.run(scenario())

    @pytest.mark.parametrize(
        "update",
        [
            params(threshold=70, max_ltv=75),
            params(threshold=101, max_ltv=50),
            params(penalty=101),
            params(max_ltv=-1),
        ],
    )
    def test_invalid_params_rejected(self, update):
        async def scenario():
            async with open_ledger() as ctx:
                registry = ProtocolRegistryService(ctx)
                protocol = await register(ctx)
                with pytest.raises(LedgerError) as exc:
                    await registry.set_risk_params(ADMIN, protocol.id, update)
                assert exc.value.code == ErrorCode.INVALID_PARAMETER
                assert await registry.get_risk_params(protocol.id) is None

        asyncio.run(scenario())

    def test_unregistered_protocol(self):
        async def scenario():
            async with open_ledger() as ctx:
                with pytest.raises(LedgerError) as exc:
                    await ProtocolRegistryService(ctx).set_risk_params(ADMIN, 3, params())
                assert exc.value.code == ErrorCode.PROTOCOL_NOT_REGISTERED

        asyncio.run(scenario())
