"""
CONTRACT 7: Settlement Accounts

Balances of settlement currency held per identity.
"""

from pydantic import BaseModel


class CreditRequest(BaseModel):
    amount: int


class AccountBalance(BaseModel):
    account: str
    balance: int
