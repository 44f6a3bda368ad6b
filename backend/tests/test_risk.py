"""
Tests for the risk engine.
"""

import asyncio

import pytest

from app.schemas.events import EventType
from app.schemas.position import PositionUpdateRequest, TokenAmount
from app.schemas.risk import RiskPreferencesRequest
from app.services.adapters import FixedLtvOracle, TrackedPositionOracle
from app.services.base import ErrorCode, LedgerError
from app.services.positions import PositionTrackerService
from app.services.risk import LiquidationRiskInput, RiskEngineService
from support import ALICE, BOB, events, open_ledger, register, set_params


def preferences(alert=5, rebalance=10, slippage=3, notifications=True):
    return RiskPreferencesRequest(
        liquidation_alert_threshold=alert,
        rebalance_threshold=rebalance,
        max_slippage=slippage,
        notifications=notifications,
    )


class TestLiquidationCheck:
    """Alert iff ltv >= threshold - buffer."""

    @pytest.mark.parametrize(
        "ltv, expected",
        [
            (74, False),
            (75, True),  # exactly at the alert threshold
            (76, True),
            (0, False),
        ],
    )
    def test_boundary(self, ltv, expected):
        async def scenario():
            async with open_ledger(oracle=FixedLtvOracle(ltv)) as ctx:
                risk = RiskEngineService(ctx)
                protocol = await register(ctx)
                await set_params(ctx, protocol.id, threshold=80, max_ltv=70)

                result = await risk.execute(LiquidationRiskInput(ALICE, protocol.id))
                assert result.alert_threshold == 75
                assert result.alert_buffer == 5
                assert result.at_risk is expected
                assert len(events(ctx, EventType.LIQUIDATION_ALERT)) == (1 if expected else 0)

        asyncio.run(scenario())

    def test_user_buffer_moves_threshold(self):
        async def scenario():
            async with open_ledger(oracle=FixedLtvOracle(65)) as ctx:
                risk = RiskEngineService(ctx)
                protocol = await register(ctx)
                await set_params(ctx, protocol.id, threshold=80, max_ltv=70)

                assert not (await risk.check_liquidation_risk(ALICE, protocol.id)).at_risk
                await risk.set_risk_preferences(ALICE, preferences(alert=15))
                result = await risk.check_liquidation_risk(ALICE, protocol.id)
                assert result.alert_threshold == 65
                assert result.at_risk

        asyncio.run(scenario())

    def test_default_placeholder_ltv_alerts(self):
        async def scenario():
            async with open_ledger() as ctx:
                protocol = await register(ctx)
                await set_params(ctx, protocol.id, threshold=80, max_ltv=70)
                result = await RiskEngineService(ctx).check_liquidation_risk(BOB, protocol.id)
                assert result.current_ltv == 75
                assert result.at_risk

        asyncio.run(scenario())

    def test_alert_carries_notification_flag(self):
        async def scenario():
            async with open_ledger(oracle=FixedLtvOracle(90)) as ctx:
                risk = RiskEngineService(ctx)
                protocol = await register(ctx)
                await set_params(ctx, protocol.id)
                await risk.set_risk_preferences(ALICE, preferences(notifications=False))

                await risk.check_liquidation_risk(ALICE, protocol.id)
                alert = events(ctx, EventType.LIQUIDATION_ALERT)[-1]
                assert alert.payload["notify"] is False
                assert alert.payload["user"] == ALICE

        asyncio.run(scenario())

    def test_missing_risk_params(self):
        async def scenario():
            async with open_ledger() as ctx:
                risk = RiskEngineService(ctx)
                protocol = await register(ctx)
                for protocol_id in (protocol.id, 99):
                    with pytest.raises(LedgerError) as exc:
                        await risk.check_liquidation_risk(ALICE, protocol_id)
                    assert exc.value.code == ErrorCode.PROTOCOL_NOT_REGISTERED

        asyncio.run(scenario())

    def test_check_does_not_advance_height(self):
        async def scenario():
            async with open_ledger() as ctx:
                protocol = await register(ctx)
                await set_params(ctx, protocol.id)
                height = await ctx.store.height()
                await RiskEngineService(ctx).check_liquidation_risk(ALICE, protocol.id)
                assert await ctx.store.height() == height

        asyncio.run(scenario())


class TestTrackedPositionOracle:

    def test_ltv_from_reported_positions(self):
        async def scenario():
            async with open_ledger(oracle=TrackedPositionOracle()) as ctx:
                risk = RiskEngineService(ctx)
                protocol = await register(ctx)
                await set_params(ctx, protocol.id, threshold=80, max_ltv=70)

                assert (await risk.check_liquidation_risk(ALICE, protocol.id)).current_ltv == 0

                await PositionTrackerService(ctx).update(
                    ALICE,
                    protocol.id,
                    PositionUpdateRequest(
                        supplied=[TokenAmount(token="STX", amount=1000)],
                        borrowed=[TokenAmount(token="USDA", amount=760)],
                    ),
                )
                result = await risk.check_liquidation_risk(ALICE, protocol.id)
                assert result.current_ltv == 76
                assert result.at_risk

        asyncio.run(scenario())


class TestPreferences:

    def test_defaults_until_set(self):
        async def scenario():
            async with open_ledger() as ctx:
                risk = RiskEngineService(ctx)
                settings = await risk.get_risk_settings(ALICE)
                assert settings.is_default
                assert settings.liquidation_alert_threshold == 5
                assert settings.max_slippage == 3

                await risk.set_risk_preferences(ALICE, preferences(alert=50, rebalance=0, slippage=7))
                stored = await risk.get_risk_settings(ALICE)
                assert not stored.is_default
                assert (stored.liquidation_alert_threshold, stored.rebalance_threshold, stored.max_slippage) == (50, 0, 7)

        asyncio.run(scenario())

    @pytest.mark.parametrize(
        "request_body",
        [preferences(alert=51), preferences(rebalance=51), preferences(slippage=-1)],
    )
    def test_out_of_range(self, request_body):
        async def scenario():
            async with open_ledger() as ctx:
                risk = RiskEngineService(ctx)
                with pytest.raises(LedgerError) as exc:
                    await risk.set_risk_preferences(ALICE, request_body)
                assert exc.value.code == ErrorCode.INVALID_PARAMETER
                assert (await risk.get_risk_settings(ALICE)).is_default

        asyncio.run(scenario())
