"""
Settlement Service Interface

Defines the contract for funding and inspecting settlement accounts.
"""

from abc import abstractmethod
from dataclasses import dataclass

from app.services.base import BaseService
from app.schemas.settlement import AccountBalance


@dataclass
class CreditInput:
    """Input for an account credit."""

    caller: str
    account: str
    amount: int


class SettlementServiceInterface(BaseService[CreditInput, AccountBalance]):
    """
    Settlement Contract.

    INPUT: CreditInput
        - caller: must be the admin
        - amount: > 0

    OUTPUT: AccountBalance after the credit

    Only meaningful with a gateway that can mint (the in-ledger one).
    """

    @property
    def name(self) -> str:
        return "Settlement"

    @abstractmethod
    async def execute(self, input_data: CreditInput) -> AccountBalance:
        """Credit an account."""
        pass

    @abstractmethod
    async def balance_of(self, account: str) -> AccountBalance:
        pass
