"""
Batch Executor Implementation

Validates a whole batch up front, then replays it against the protocol
adapters in order. Any adapter failure reverses what already ran.
"""

import logging
from typing import Optional

from app.db.database import Transaction
from app.db.models import ProtocolRecord
from app.schemas.batch import BatchAction, BatchActionResult, BatchActionType, BatchResult
from app.schemas.events import EventType
from app.schemas.protocol import ProtocolCategory
from app.schemas.risk import UserRiskSettings
from app.services.adapters import DEPOSIT, WITHDRAW, AppliedCall, compensate, invoke
from app.services.base import ErrorCode, LedgerError
from app.services.batch.interface import BatchExecutorInterface, BatchInput
from app.services.context import LedgerContext, get_ledger_context
from app.services.registry import ProtocolRegistryService
from app.services.risk import RiskEngineService

logger = logging.getLogger(__name__)


class BatchExecutorService(BatchExecutorInterface):
    """Batch Executor."""

    def __init__(
        self,
        context: LedgerContext,
        registry: Optional[ProtocolRegistryService] = None,
        risk: Optional[RiskEngineService] = None,
    ):
        self.context = context
        self.registry = registry or ProtocolRegistryService(context)
        self.risk = risk or RiskEngineService(context, self.registry)

    async def execute(self, input_data: BatchInput) -> BatchResult:
        return await self.run(input_data.user, input_data.actions)

    async def run(self, user: str, actions: list[BatchAction]) -> BatchResult:
        limit = self.context.settings.max_batch_actions
        if not actions:
            self.reject(ErrorCode.INVALID_PARAMETER, "Batch contains no actions")
        if len(actions) > limit:
            self.reject(ErrorCode.INVALID_PARAMETER, f"Batch has {len(actions)} actions; max is {limit}")

        async with self.context.store.transaction() as tx:
            user_settings = await self.risk.settings_for(tx, user)

            protocols: list[ProtocolRecord] = []
            for index, action in enumerate(actions):
                protocol = await self._validate(tx, user, user_settings, index, action)
                protocols.append(protocol)

            applied: list[AppliedCall] = []
            results: list[BatchActionResult] = []
            for index, (action, protocol) in enumerate(zip(actions, protocols)):
                operation = DEPOSIT if action.action.moves_funds_in else WITHDRAW
                adapter = self.context.adapters.resolve(protocol.id, ProtocolCategory(protocol.category))
                try:
                    ok = await invoke(adapter, operation, protocol.id, action.amount)
                except Exception as e:
                    await compensate(applied)
                    raise LedgerError(
                        self.name,
                        ErrorCode.INVALID_PROTOCOL,
                        f"Action {index} ({action.action.value}) failed at protocol {protocol.id}: {e}",
                    ) from e
                if not ok:
                    await compensate(applied)
                    self.reject(
                        ErrorCode.INVALID_PROTOCOL,
                        f"Action {index} ({action.action.value}) refused by protocol {protocol.id}",
                    )

                applied.append(AppliedCall(adapter, operation, protocol.id, action.amount))
                results.append(
                    BatchActionResult(
                        index=index,
                        protocol_id=protocol.id,
                        action=action.action,
                        amount=action.amount,
                    )
                )

            tx.emit(
                EventType.BATCH_EXECUTED,
                user=user,
                actions=[
                    {"protocol_id": r.protocol_id, "action": r.action.value, "amount": r.amount}
                    for r in results
                ],
            )
            result = BatchResult(user=user, results=results, height=tx.height)

        logger.info(f"Batch of {len(results)} actions executed for {user}")
        return result

    async def _validate(
        self,
        tx: Transaction,
        user: str,
        user_settings: UserRiskSettings,
        index: int,
        action: BatchAction,
    ) -> ProtocolRecord:
        protocol = await self.registry.fetch_active(tx, action.protocol_id)

        if action.amount <= 0:
            self.reject(ErrorCode.INVALID_AMOUNT, f"Action {index} amount must be positive: {action.amount}")

        if action.token is not None and action.token not in (protocol.supported_tokens or []):
            self.reject(
                ErrorCode.UNSUPPORTED_TOKEN,
                f"Action {index}: {action.token} not supported by protocol {protocol.id}",
            )

        if action.max_slippage is not None and action.max_slippage > user_settings.max_slippage:
            self.reject(
                ErrorCode.SLIPPAGE_TOO_HIGH,
                f"Action {index}: slippage {action.max_slippage}% above limit {user_settings.max_slippage}%",
            )

        # Protocols without risk parameters have no threshold to check against
        if action.action == BatchActionType.BORROW:
            if await self.registry.lookup_risk_params(tx, protocol.id) is not None:
                check = await self.risk.evaluate(tx, user, protocol.id)
                if check.at_risk:
                    self.reject(
                        ErrorCode.LIQUIDATION_THRESHOLD,
                        f"Action {index}: borrow blocked, LTV {check.current_ltv}% "
                        f">= alert threshold {check.alert_threshold}%",
                    )

        return protocol


# Singleton instance
_service_instance: Optional[BatchExecutorService] = None


def get_batch_service() -> BatchExecutorService:
    """Get or create the batch executor bound to the current context."""
    global _service_instance
    context = get_ledger_context()
    if _service_instance is None or _service_instance.context is not context:
        _service_instance = BatchExecutorService(context)
    return _service_instance
