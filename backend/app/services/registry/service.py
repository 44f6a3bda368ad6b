"""
Protocol Registry Implementation

Authoritative table of known protocols and their risk parameters.
Protocols are never deleted; deactivation is a status update.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select

from app.db.database import PROTOCOL_ID_COUNTER, Transaction, advance_counter
from app.db.models import ProtocolRecord, RiskParamsRecord
from app.schemas.events import EventType
from app.schemas.protocol import (
    Protocol,
    ProtocolStatusUpdate,
    RegisterProtocolRequest,
    RiskParams,
    RiskParamsUpdate,
)
from app.services.base import ErrorCode
from app.services.context import LedgerContext, get_ledger_context
from app.services.registry.interface import ProtocolRegistryInterface, RegisterProtocolInput

logger = logging.getLogger(__name__)


class ProtocolRegistryService(ProtocolRegistryInterface):
    """
    Protocol Registry.

    Other services resolve protocols through fetch() / fetch_active()
    inside their own transactions.
    """

    def __init__(self, context: LedgerContext):
        self.context = context

    async def execute(self, input_data: RegisterProtocolInput) -> Protocol:
        return await self.register(input_data.caller, input_data.request)

    async def register(self, caller: str, request: RegisterProtocolRequest) -> Protocol:
        """Register a protocol as active and trusted under the next id."""
        async with self.context.store.transaction() as tx:
            self._require_admin(caller)

            if len(request.supported_tokens) > self.context.settings.max_supported_tokens:
                self.reject(
                    ErrorCode.INVALID_PARAMETER,
                    f"Too many supported tokens: {len(request.supported_tokens)} > "
                    f"{self.context.settings.max_supported_tokens}",
                )

            protocol_id = await advance_counter(tx.session, PROTOCOL_ID_COUNTER)
            record = ProtocolRecord(
                id=protocol_id,
                name=request.name,
                address=request.address,
                active=True,
                trusted=True,
                supported_tokens=list(request.supported_tokens),
                category=request.category.value,
                created_height=tx.height,
                created_at=datetime.now(timezone.utc),
            )
            tx.session.add(record)
            await tx.session.flush()

            tx.emit(
                EventType.PROTOCOL_REGISTERED,
                protocol_id=protocol_id,
                name=request.name,
                category=request.category.value,
            )
            protocol = Protocol.model_validate(record)

        logger.info(f"Registered protocol {protocol.id} ({protocol.name}, {protocol.category.value})")
        return protocol

    async def set_status(self, caller: str, protocol_id: int, update: ProtocolStatusUpdate) -> Protocol:
        async with self.context.store.transaction() as tx:
            self._require_admin(caller)
            record = await self.fetch(tx, protocol_id)

            record.active = update.active
            record.trusted = update.trusted
            await tx.session.flush()

            tx.emit(
                EventType.PROTOCOL_STATUS_UPDATED,
                protocol_id=protocol_id,
                active=update.active,
                trusted=update.trusted,
            )
            protocol = Protocol.model_validate(record)

        logger.info(f"Protocol {protocol_id} status: active={update.active} trusted={update.trusted}")
        return protocol

    async def set_risk_params(self, caller: str, protocol_id: int, update: RiskParamsUpdate) -> RiskParams:
        async with self.context.store.transaction() as tx:
            self._require_admin(caller)
            await self.fetch(tx, protocol_id)
            self._validate_risk_params(update)

            record = await tx.session.get(RiskParamsRecord, protocol_id)
            if record is None:
                record = RiskParamsRecord(protocol_id=protocol_id)
                tx.session.add(record)

            record.liquidation_threshold = update.liquidation_threshold
            record.max_ltv = update.max_ltv
            record.liquidation_penalty = update.liquidation_penalty
            record.oracle = update.oracle
            record.updated_height = tx.height
            await tx.session.flush()

            tx.emit(
                EventType.RISK_PARAMS_UPDATED,
                protocol_id=protocol_id,
                liquidation_threshold=update.liquidation_threshold,
                max_ltv=update.max_ltv,
                liquidation_penalty=update.liquidation_penalty,
            )
            params = RiskParams.model_validate(record)

        logger.info(
            f"Protocol {protocol_id} risk params: threshold={params.liquidation_threshold}% "
            f"max_ltv={params.max_ltv}% penalty={params.liquidation_penalty}%"
        )
        return params

    # =========================================================================
    # READS
    # =========================================================================

    async def get_protocol(self, protocol_id: int) -> Optional[Protocol]:
        async with self.context.store.transaction(write=False) as tx:
            record = await tx.session.get(ProtocolRecord, protocol_id)
            return Protocol.model_validate(record) if record else None

    async def list_protocols(self, active_only: bool = False) -> list[Protocol]:
        async with self.context.store.transaction(write=False) as tx:
            query = select(ProtocolRecord).order_by(ProtocolRecord.id)
            if active_only:
                query = query.where(ProtocolRecord.active.is_(True))
            result = await tx.session.execute(query)
            return [Protocol.model_validate(r) for r in result.scalars().all()]

    async def get_risk_params(self, protocol_id: int) -> Optional[RiskParams]:
        async with self.context.store.transaction(write=False) as tx:
            record = await tx.session.get(RiskParamsRecord, protocol_id)
            return RiskParams.model_validate(record) if record else None

    # =========================================================================
    # IN-TRANSACTION LOOKUPS (used by other services)
    # =========================================================================

    async def lookup(self, tx: Transaction, protocol_id: int) -> Optional[ProtocolRecord]:
        return await tx.session.get(ProtocolRecord, protocol_id)

    async def fetch(self, tx: Transaction, protocol_id: int) -> ProtocolRecord:
        """Load a protocol or fail with ProtocolNotRegistered."""
        record = await tx.session.get(ProtocolRecord, protocol_id)
        if record is None:
            self.reject(ErrorCode.PROTOCOL_NOT_REGISTERED, f"Protocol {protocol_id} is not registered")
        return record

    async def fetch_active(self, tx: Transaction, protocol_id: int) -> ProtocolRecord:
        """Load a protocol that must be active (InvalidProtocol otherwise)."""
        record = await self.fetch(tx, protocol_id)
        if not record.active:
            self.reject(ErrorCode.INVALID_PROTOCOL, f"Protocol {protocol_id} is not active")
        return record

    async def lookup_risk_params(self, tx: Transaction, protocol_id: int) -> Optional[RiskParamsRecord]:
        return await tx.session.get(RiskParamsRecord, protocol_id)

    async def fetch_risk_params(self, tx: Transaction, protocol_id: int) -> RiskParamsRecord:
        """Load risk params; a protocol without them counts as not registered for risk."""
        await self.fetch(tx, protocol_id)
        record = await tx.session.get(RiskParamsRecord, protocol_id)
        if record is None:
            self.reject(
                ErrorCode.PROTOCOL_NOT_REGISTERED,
                f"Protocol {protocol_id} has no risk parameters",
            )
        return record

    def _require_admin(self, caller: str) -> None:
        if not self.context.is_admin(caller):
            self.reject(ErrorCode.NOT_AUTHORIZED, f"{caller} is not the contract owner")

    def _validate_risk_params(self, update: RiskParamsUpdate) -> None:
        values = (update.liquidation_threshold, update.max_ltv, update.liquidation_penalty)
        if any(v < 0 for v in values):
            self.reject(ErrorCode.INVALID_PARAMETER, "Risk parameters must be non-negative")
        if update.liquidation_threshold > 100:
            self.reject(
                ErrorCode.INVALID_PARAMETER,
                f"Liquidation threshold above 100: {update.liquidation_threshold}",
            )
        if update.max_ltv > update.liquidation_threshold:
            self.reject(
                ErrorCode.INVALID_PARAMETER,
                f"Max LTV exceeds liquidation threshold: {update.max_ltv} > {update.liquidation_threshold}",
            )
        if update.liquidation_penalty > 100:
            self.reject(
                ErrorCode.INVALID_PARAMETER,
                f"Liquidation penalty above 100: {update.liquidation_penalty}",
            )


# Singleton instance
_service_instance: Optional[ProtocolRegistryService] = None


def get_registry_service() -> ProtocolRegistryService:
    """Get or create the registry service bound to the current context."""
    global _service_instance
    context = get_ledger_context()
    if _service_instance is None or _service_instance.context is not context:
        _service_instance = ProtocolRegistryService(context)
    return _service_instance
