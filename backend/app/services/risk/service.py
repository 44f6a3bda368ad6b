"""
Risk Engine Implementation

Evaluates positions against protocol risk parameters and user alert
settings. PURE threshold logic - valuation is delegated to the oracle.
"""

import logging
from typing import Optional

from app.db.database import Transaction
from app.db.models import UserRiskSettingsRecord
from app.schemas.events import EventType
from app.schemas.risk import LiquidationRiskResult, RiskPreferencesRequest, UserRiskSettings
from app.services.base import ErrorCode
from app.services.context import LedgerContext, get_ledger_context
from app.services.registry import ProtocolRegistryService
from app.services.risk.interface import LiquidationRiskInput, RiskEngineInterface

logger = logging.getLogger(__name__)


class RiskEngineService(RiskEngineInterface):
    """
    Risk Engine.

    Alerts are deterministic: the same LTV, threshold and buffer always
    give the same answer.
    """

    def __init__(self, context: LedgerContext, registry: Optional[ProtocolRegistryService] = None):
        self.context = context
        self.registry = registry or ProtocolRegistryService(context)

    async def execute(self, input_data: LiquidationRiskInput) -> LiquidationRiskResult:
        return await self.check_liquidation_risk(input_data.user, input_data.protocol_id)

    async def check_liquidation_risk(self, user: str, protocol_id: int) -> LiquidationRiskResult:
        async with self.context.store.transaction(write=False) as tx:
            result = await self.evaluate(tx, user, protocol_id)
        return result

    async def evaluate(self, tx: Transaction, user: str, protocol_id: int) -> LiquidationRiskResult:
        """Liquidation check inside the caller's transaction."""
        params = await self.registry.fetch_risk_params(tx, protocol_id)
        user_settings = await self.settings_for(tx, user)

        buffer = user_settings.liquidation_alert_threshold
        alert_threshold = params.liquidation_threshold - buffer
        current_ltv = await self.context.oracle.current_ltv(tx, user, protocol_id)

        result = LiquidationRiskResult(
            user=user,
            protocol_id=protocol_id,
            current_ltv=current_ltv,
            liquidation_threshold=params.liquidation_threshold,
            alert_buffer=buffer,
            alert_threshold=alert_threshold,
            at_risk=current_ltv >= alert_threshold,
        )

        if result.at_risk:
            tx.emit(
                EventType.LIQUIDATION_ALERT,
                user=user,
                protocol_id=protocol_id,
                current_ltv=current_ltv,
                alert_threshold=alert_threshold,
                notify=user_settings.notifications,
            )
            logger.warning(
                f"Liquidation alert: {user} on protocol {protocol_id} "
                f"LTV {current_ltv}% >= {alert_threshold}%"
            )

        return result

    async def set_risk_preferences(self, user: str, request: RiskPreferencesRequest) -> UserRiskSettings:
        cap = self.context.settings.max_user_risk_setting

        async with self.context.store.transaction() as tx:
            values = {
                "liquidation_alert_threshold": request.liquidation_alert_threshold,
                "rebalance_threshold": request.rebalance_threshold,
                "max_slippage": request.max_slippage,
            }
            for field_name, value in values.items():
                if value < 0 or value > cap:
                    self.reject(ErrorCode.INVALID_PARAMETER, f"{field_name} must be within 0..{cap}: {value}")

            record = await tx.session.get(UserRiskSettingsRecord, user)
            if record is None:
                record = UserRiskSettingsRecord(user=user)
                tx.session.add(record)

            record.liquidation_alert_threshold = request.liquidation_alert_threshold
            record.rebalance_threshold = request.rebalance_threshold
            record.max_slippage = request.max_slippage
            record.notifications = request.notifications
            await tx.session.flush()

            tx.emit(EventType.RISK_PREFERENCES_UPDATED, user=user, **values)
            stored = UserRiskSettings.model_validate(record)

        logger.info(f"Risk preferences updated for {user}")
        return stored

    async def get_risk_settings(self, user: str) -> UserRiskSettings:
        async with self.context.store.transaction(write=False) as tx:
            return await self.settings_for(tx, user)

    async def settings_for(self, tx: Transaction, user: str) -> UserRiskSettings:
        """Stored settings, or the configured defaults."""
        record = await tx.session.get(UserRiskSettingsRecord, user)
        if record is not None:
            return UserRiskSettings.model_validate(record)

        defaults = self.context.settings
        return UserRiskSettings(
            user=user,
            liquidation_alert_threshold=defaults.default_liquidation_alert_threshold,
            rebalance_threshold=defaults.default_rebalance_threshold,
            max_slippage=defaults.default_max_slippage,
            notifications=defaults.default_notifications,
            is_default=True,
        )


# Singleton instance
_service_instance: Optional[RiskEngineService] = None


def get_risk_service() -> RiskEngineService:
    """Get or create the risk engine bound to the current context."""
    global _service_instance
    context = get_ledger_context()
    if _service_instance is None or _service_instance.context is not context:
        _service_instance = RiskEngineService(context)
    return _service_instance
