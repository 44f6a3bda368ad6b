"""
External Capability Interfaces

Defines the contracts the ledger consumes but does not implement:
    - ProtocolAdapter: moves funds into/out of one yield protocol
    - SettlementGateway: moves settlement currency between identities
    - PositionValuationOracle: reports a user's loan-to-value
"""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from app.db.database import Transaction


@runtime_checkable
class ProtocolAdapter(Protocol):
    """
    Per-protocol deposit/withdraw capability.

    Any object with these two coroutines qualifies; lending, dex and farm
    integrations need not share a base class.
    Both return True on success and False if the protocol refused.
    """

    async def deposit(self, protocol_id: int, amount: int) -> bool:
        ...

    async def withdraw(self, protocol_id: int, amount: int) -> bool:
        ...


class SettlementGateway(ABC):
    """Settlement currency transfer primitive."""

    @abstractmethod
    async def transfer(self, tx: Transaction, sender: str, recipient: str, amount: int) -> bool:
        """
        Move amount from sender to recipient.

        Returns False (and moves nothing) if the sender's balance is
        insufficient.
        """
        pass

    @abstractmethod
    async def balance_of(self, tx: Transaction, account: str) -> int:
        pass

    async def credit(self, tx: Transaction, account: str, amount: int) -> int:
        """Mint into an account. Only ledger-held settlement supports this."""
        raise NotImplementedError(f"{type(self).__name__} cannot mint settlement currency")


class PositionValuationOracle(ABC):
    """Source of current loan-to-value for (user, protocol)."""

    @abstractmethod
    async def current_ltv(self, tx: Transaction, user: str, protocol_id: int) -> int:
        """Current LTV in whole percent."""
        pass
