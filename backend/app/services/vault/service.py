"""
Vault Ledger Implementation

Owns vault definitions and per-user balances, and orchestrates
deposit, withdraw and rebalance through the allocation engine.

Every operation runs in one store transaction. Order inside each:
validate, then mutate, with external adapter calls compensated if a
later step fails, so an operation either fully applies or leaves no trace.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select

from app.db.database import VAULT_ID_COUNTER, Transaction, advance_counter
from app.db.models import UserVaultPositionRecord, VaultRecord
from app.schemas.events import EventType
from app.schemas.protocol import ProtocolCategory
from app.schemas.vault import (
    AllocationPlan,
    AmountRequest,
    CreateVaultRequest,
    UserVaultPosition,
    Vault,
    VaultOperationResult,
    VaultStatusUpdate,
)
from app.services.adapters import DEPOSIT, WITHDRAW, AppliedCall, ProtocolAdapter, compensate, invoke
from app.services.allocation import AllocationEngine
from app.services.base import ErrorCode, LedgerError
from app.services.context import LedgerContext, get_ledger_context
from app.services.registry import ProtocolRegistryService
from app.services.vault.interface import CreateVaultInput, VaultLedgerInterface

logger = logging.getLogger(__name__)


class VaultLedgerService(VaultLedgerInterface):
    """
    Vault Ledger.

    States per vault: active (accepts deposits) and inactive (terminal for
    new deposits). Vaults are never deleted.
    """

    def __init__(
        self,
        context: LedgerContext,
        registry: Optional[ProtocolRegistryService] = None,
        allocation: Optional[AllocationEngine] = None,
    ):
        self.context = context
        self.registry = registry or ProtocolRegistryService(context)
        self.allocation = allocation or AllocationEngine(context, self.registry)

    async def execute(self, input_data: CreateVaultInput) -> Vault:
        return await self.create(input_data.creator, input_data.request)

    async def create(self, creator: str, request: CreateVaultRequest) -> Vault:
        """Create a vault. The id counter only advances on success."""
        settings = self.context.settings

        async with self.context.store.transaction() as tx:
            if not settings.min_risk_level <= request.risk_level <= settings.max_risk_level:
                self.reject(
                    ErrorCode.INVALID_PARAMETER,
                    f"Risk level {request.risk_level} outside "
                    f"{settings.min_risk_level}..{settings.max_risk_level}",
                )
            if request.deposit_cap is not None and request.deposit_cap <= 0:
                self.reject(ErrorCode.INVALID_PARAMETER, f"Deposit cap must be positive: {request.deposit_cap}")

            self.allocation.validate_percentages(request.allocation)
            await self.allocation.validate_targets(tx, request.allocation)

            vault_id = await advance_counter(tx.session, VAULT_ID_COUNTER)
            record = VaultRecord(
                id=vault_id,
                creator=creator,
                name=request.name,
                description=request.description,
                strategy_type=request.strategy_type,
                risk_level=request.risk_level,
                allocation=[entry.model_dump() for entry in request.allocation],
                active=True,
                total_assets=0,
                deposit_cap=request.deposit_cap,
                created_height=tx.height,
                created_at=datetime.now(timezone.utc),
            )
            tx.session.add(record)
            await tx.session.flush()

            tx.emit(
                EventType.VAULT_CREATED,
                vault_id=vault_id,
                creator=creator,
                allocation=record.allocation,
                risk_level=request.risk_level,
            )
            vault = Vault.model_validate(record)

        logger.info(f"Vault {vault.id} created by {creator} with {len(vault.allocation)} targets")
        return vault

    async def deposit(self, user: str, vault_id: int, request: AmountRequest) -> VaultOperationResult:
        """
        Deposit into an active vault.

        Order: custody transfer, position and vault totals, then one
        adapter deposit per allocation share.
        """
        amount = request.amount

        async with self.context.store.transaction() as tx:
            record = await self._fetch_vault(tx, vault_id)
            if not record.active:
                self.reject(ErrorCode.VAULT_NOT_FOUND, f"Vault {vault_id} is not active")
            if amount <= 0:
                self.reject(ErrorCode.INVALID_AMOUNT, f"Deposit amount must be positive: {amount}")
            self._require_not_custody(user)
            if record.deposit_cap is not None and record.total_assets + amount > record.deposit_cap:
                self.reject(
                    ErrorCode.VAULT_FULL,
                    f"Vault {vault_id} cap {record.deposit_cap} exceeded: "
                    f"{record.total_assets} + {amount}",
                )

            vault = Vault.model_validate(record)
            plan = await self.allocation.plan(tx, vault.allocation, amount)

            moved = await self.context.settlement.transfer(tx, user, self.context.custody_account, amount)
            if not moved:
                self.reject(ErrorCode.INSUFFICIENT_FUNDS, f"{user} cannot fund deposit of {amount}")

            position = await tx.session.get(UserVaultPositionRecord, (user, vault_id))
            if position is None:
                position = UserVaultPositionRecord(
                    user=user,
                    vault_id=vault_id,
                    amount=0,
                    entry_height=tx.height,
                    last_rebalance_height=tx.height,
                    cumulative_earnings=0,
                )
                tx.session.add(position)

            position.amount += amount
            position.last_rebalance_height = tx.height
            if request.strategy is not None:
                position.strategy = request.strategy
            record.total_assets += amount
            await tx.session.flush()

            await self._dispatch(tx, plan, DEPOSIT)

            tx.emit(
                EventType.DEPOSIT,
                user=user,
                vault_id=vault_id,
                amount=amount,
                shares=[share.model_dump() for share in plan.shares],
                total_assets=record.total_assets,
            )
            result = VaultOperationResult(
                vault=Vault.model_validate(record),
                position=UserVaultPosition.model_validate(position),
                plan=plan,
                height=tx.height,
            )

        logger.info(f"Deposit: {user} -> vault {vault_id}: {amount} (total {result.vault.total_assets})")
        return result

    async def withdraw(self, user: str, vault_id: int, request: AmountRequest) -> VaultOperationResult:
        """
        Withdraw from a vault.

        Order: adapter withdrawals per share, position and vault totals,
        custody release last. If the release fails the adapter calls are
        reversed before the operation aborts.
        """
        amount = request.amount

        async with self.context.store.transaction() as tx:
            record = await self._fetch_vault(tx, vault_id)
            if not record.active and not self.context.settings.allow_inactive_withdrawals:
                self.reject(ErrorCode.VAULT_NOT_FOUND, f"Vault {vault_id} is not active")
            if amount <= 0:
                self.reject(ErrorCode.INVALID_AMOUNT, f"Withdraw amount must be positive: {amount}")
            self._require_not_custody(user)

            position = await tx.session.get(UserVaultPositionRecord, (user, vault_id))
            if position is None:
                self.reject(ErrorCode.POSITION_NOT_FOUND, f"{user} has no position in vault {vault_id}")
            if position.amount < amount:
                self.reject(
                    ErrorCode.INSUFFICIENT_FUNDS,
                    f"{user} holds {position.amount} in vault {vault_id}, requested {amount}",
                )

            vault = Vault.model_validate(record)
            plan = await self.allocation.plan(tx, vault.allocation, amount)
            applied = await self._dispatch(tx, plan, WITHDRAW)

            position.amount -= amount
            record.total_assets -= amount
            await tx.session.flush()

            try:
                released = await self.context.settlement.transfer(tx, self.context.custody_account, user, amount)
            except Exception as e:
                await compensate(applied)
                raise LedgerError(
                    self.name,
                    ErrorCode.INSUFFICIENT_FUNDS,
                    f"Custody release of {amount} to {user} failed: {e}",
                ) from e
            if not released:
                await compensate(applied)
                self.reject(ErrorCode.INSUFFICIENT_FUNDS, f"Custody cannot release {amount} to {user}")

            tx.emit(
                EventType.WITHDRAW,
                user=user,
                vault_id=vault_id,
                amount=amount,
                shares=[share.model_dump() for share in plan.shares],
                total_assets=record.total_assets,
            )
            result = VaultOperationResult(
                vault=Vault.model_validate(record),
                position=UserVaultPosition.model_validate(position),
                plan=plan,
                height=tx.height,
            )

        logger.info(f"Withdraw: {user} <- vault {vault_id}: {amount} (total {result.vault.total_assets})")
        return result

    async def rebalance(self, caller: str, vault_id: int) -> Vault:
        """
        Record a rebalance request.

        Moves no funds; subscribers receive the target allocation and the
        current total to act on.
        """
        async with self.context.store.transaction() as tx:
            record = await self._fetch_vault(tx, vault_id)
            self._require_creator_or_admin(caller, record)

            tx.emit(
                EventType.REBALANCE,
                vault_id=vault_id,
                caller=caller,
                allocation=record.allocation,
                total_assets=record.total_assets,
            )
            vault = Vault.model_validate(record)

        logger.info(f"Rebalance requested for vault {vault_id} by {caller}")
        return vault

    async def set_vault_status(self, caller: str, vault_id: int, update: VaultStatusUpdate) -> Vault:
        async with self.context.store.transaction() as tx:
            record = await self._fetch_vault(tx, vault_id)
            self._require_creator_or_admin(caller, record)

            record.active = update.active
            await tx.session.flush()

            tx.emit(EventType.VAULT_STATUS_UPDATED, vault_id=vault_id, active=update.active, caller=caller)
            vault = Vault.model_validate(record)

        logger.info(f"Vault {vault_id} active={update.active} (by {caller})")
        return vault

    # =========================================================================
    # READS
    # =========================================================================

    async def get_vault(self, vault_id: int) -> Optional[Vault]:
        async with self.context.store.transaction(write=False) as tx:
            record = await tx.session.get(VaultRecord, vault_id)
            return Vault.model_validate(record) if record else None

    async def list_vaults(self, creator: Optional[str] = None, active_only: bool = False) -> list[Vault]:
        async with self.context.store.transaction(write=False) as tx:
            query = select(VaultRecord).order_by(VaultRecord.id)
            if creator is not None:
                query = query.where(VaultRecord.creator == creator)
            if active_only:
                query = query.where(VaultRecord.active.is_(True))
            result = await tx.session.execute(query)
            return [Vault.model_validate(r) for r in result.scalars().all()]

    async def get_user_position(self, user: str, vault_id: int) -> Optional[UserVaultPosition]:
        async with self.context.store.transaction(write=False) as tx:
            record = await tx.session.get(UserVaultPositionRecord, (user, vault_id))
            return UserVaultPosition.model_validate(record) if record else None

    async def list_vault_positions(self, vault_id: int) -> list[UserVaultPosition]:
        async with self.context.store.transaction(write=False) as tx:
            result = await tx.session.execute(
                select(UserVaultPositionRecord)
                .where(UserVaultPositionRecord.vault_id == vault_id)
                .order_by(UserVaultPositionRecord.user)
            )
            return [UserVaultPosition.model_validate(r) for r in result.scalars().all()]

    async def positions_total(self, vault_id: int) -> int:
        """Sum of all position amounts in a vault (equals total_assets)."""
        async with self.context.store.transaction(write=False) as tx:
            result = await tx.session.execute(
                select(func.coalesce(func.sum(UserVaultPositionRecord.amount), 0))
                .where(UserVaultPositionRecord.vault_id == vault_id)
            )
            return int(result.scalar_one())

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _fetch_vault(self, tx: Transaction, vault_id: int) -> VaultRecord:
        record = await tx.session.get(VaultRecord, vault_id)
        if record is None:
            self.reject(ErrorCode.VAULT_NOT_FOUND, f"Vault {vault_id} does not exist")
        return record

    def _require_creator_or_admin(self, caller: str, record: VaultRecord) -> None:
        if caller != record.creator and not self.context.is_admin(caller):
            self.reject(ErrorCode.NOT_AUTHORIZED, f"{caller} may not manage vault {record.id}")

    def _require_not_custody(self, user: str) -> None:
        # total_assets must stay backed by funds actually moved into custody
        if user == self.context.custody_account:
            self.reject(ErrorCode.NOT_AUTHORIZED, f"Custody account {user} cannot hold vault positions")

    async def _adapter_for(self, tx: Transaction, protocol_id: int) -> ProtocolAdapter:
        protocol = await self.registry.lookup(tx, protocol_id)
        category = ProtocolCategory(protocol.category) if protocol else None
        return self.context.adapters.resolve(protocol_id, category)

    async def _dispatch(self, tx: Transaction, plan: AllocationPlan, operation: str) -> list[AppliedCall]:
        """
        Invoke the adapter once per non-zero share, in allocation order.

        A refusal or exception reverses the calls already made and aborts
        the operation with InvalidProtocol.
        """
        applied: list[AppliedCall] = []
        for share in plan.shares:
            if share.amount == 0:
                continue
            adapter = await self._adapter_for(tx, share.protocol_id)
            try:
                ok = await invoke(adapter, operation, share.protocol_id, share.amount)
            except Exception as e:
                await compensate(applied)
                raise LedgerError(
                    self.name,
                    ErrorCode.INVALID_PROTOCOL,
                    f"Adapter {operation} failed for protocol {share.protocol_id}: {e}",
                ) from e
            if not ok:
                await compensate(applied)
                self.reject(
                    ErrorCode.INVALID_PROTOCOL,
                    f"Adapter refused {operation} of {share.amount} at protocol {share.protocol_id}",
                )
            applied.append(AppliedCall(adapter, operation, share.protocol_id, share.amount))
        return applied


# Singleton instance
_service_instance: Optional[VaultLedgerService] = None


def get_vault_service() -> VaultLedgerService:
    """Get or create the vault ledger bound to the current context."""
    global _service_instance
    context = get_ledger_context()
    if _service_instance is None or _service_instance.context is not context:
        _service_instance = VaultLedgerService(context)
    return _service_instance
