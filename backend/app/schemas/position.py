"""
CONTRACT 3: Protocol Positions

Caller-reported mirror of what a user holds inside each protocol.
Not derived from vault balances.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TokenAmount(BaseModel):
    """Amount held of a token or pool."""

    token: str = Field(..., description="Token symbol or pool identifier")
    amount: int


class PositionUpdateRequest(BaseModel):
    """Full replacement of a user's position in one protocol."""

    supplied: list[TokenAmount] = Field(default_factory=list)
    borrowed: list[TokenAmount] = Field(default_factory=list)
    liquidity: list[TokenAmount] = Field(default_factory=list)
    staked: list[TokenAmount] = Field(default_factory=list)


class UserProtocolPosition(BaseModel):
    """Latest reported position of a user in one protocol."""

    model_config = ConfigDict(from_attributes=True)

    user: str
    protocol_id: int
    supplied: list[TokenAmount] = Field(default_factory=list)
    borrowed: list[TokenAmount] = Field(default_factory=list)
    liquidity: list[TokenAmount] = Field(default_factory=list)
    staked: list[TokenAmount] = Field(default_factory=list)
    last_updated_height: Optional[int] = None
