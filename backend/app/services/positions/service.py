"""
Position Tracker Implementation

Stores the latest externally observed holdings of a user in a protocol.
"""

import logging
from typing import Optional

from sqlalchemy import select

from app.db.models import UserProtocolPositionRecord
from app.schemas.events import EventType
from app.schemas.position import PositionUpdateRequest, TokenAmount, UserProtocolPosition
from app.services.base import ErrorCode
from app.services.context import LedgerContext, get_ledger_context
from app.services.positions.interface import PositionTrackerInterface, PositionUpdateInput
from app.services.registry import ProtocolRegistryService

logger = logging.getLogger(__name__)

POSITION_LISTS = ("supplied", "borrowed", "liquidity", "staked")


class PositionTrackerService(PositionTrackerInterface):
    """Position Tracker."""

    def __init__(self, context: LedgerContext, registry: Optional[ProtocolRegistryService] = None):
        self.context = context
        self.registry = registry or ProtocolRegistryService(context)

    async def execute(self, input_data: PositionUpdateInput) -> UserProtocolPosition:
        return await self.update(input_data.user, input_data.protocol_id, input_data.request)

    async def update(self, user: str, protocol_id: int, request: PositionUpdateRequest) -> UserProtocolPosition:
        max_entries = self.context.settings.max_position_entries

        async with self.context.store.transaction() as tx:
            await self.registry.fetch_active(tx, protocol_id)

            lists: dict[str, list[dict]] = {}
            for list_name in POSITION_LISTS:
                entries: list[TokenAmount] = getattr(request, list_name)
                if len(entries) > max_entries:
                    self.reject(
                        ErrorCode.INVALID_PARAMETER,
                        f"{list_name} has {len(entries)} entries; max is {max_entries}",
                    )
                if any(entry.amount < 0 for entry in entries):
                    self.reject(ErrorCode.INVALID_PARAMETER, f"{list_name} contains a negative amount")
                lists[list_name] = [entry.model_dump() for entry in entries]

            record = await tx.session.get(UserProtocolPositionRecord, (user, protocol_id))
            if record is None:
                record = UserProtocolPositionRecord(user=user, protocol_id=protocol_id)
                tx.session.add(record)

            # Full replacement
            for list_name, entries in lists.items():
                setattr(record, list_name, entries)
            record.last_updated_height = tx.height
            await tx.session.flush()

            tx.emit(
                EventType.POSITION_UPDATED,
                user=user,
                protocol_id=protocol_id,
                **{name: len(entries) for name, entries in lists.items()},
            )
            position = UserProtocolPosition.model_validate(record)

        logger.info(f"Position updated: {user} on protocol {protocol_id}")
        return position

    async def get_position(self, user: str, protocol_id: int) -> Optional[UserProtocolPosition]:
        async with self.context.store.transaction(write=False) as tx:
            record = await tx.session.get(UserProtocolPositionRecord, (user, protocol_id))
            return UserProtocolPosition.model_validate(record) if record else None

    async def list_positions(self, user: str) -> list[UserProtocolPosition]:
        async with self.context.store.transaction(write=False) as tx:
            result = await tx.session.execute(
                select(UserProtocolPositionRecord)
                .where(UserProtocolPositionRecord.user == user)
                .order_by(UserProtocolPositionRecord.protocol_id)
            )
            return [UserProtocolPosition.model_validate(r) for r in result.scalars().all()]


# Singleton instance
_service_instance: Optional[PositionTrackerService] = None


def get_position_service() -> PositionTrackerService:
    """Get or create the position tracker bound to the current context."""
    global _service_instance
    context = get_ledger_context()
    if _service_instance is None or _service_instance.context is not context:
        _service_instance = PositionTrackerService(context)
    return _service_instance
