"""
CONTRACT 1: Protocol Registry

Known external yield protocols and their risk parameters.
Protocols are never deleted - only deactivated.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ProtocolCategory(str, Enum):
    LENDING = "lending"
    DEX = "dex"
    FARM = "farm"
    STAKING = "staking"
    OTHER = "other"


# =============================================================================
# REQUESTS
# =============================================================================


class RegisterProtocolRequest(BaseModel):
    """Admin request to register a protocol."""

    name: str = Field(..., min_length=1, max_length=64)
    address: str = Field(..., min_length=1, description="External address/identity")
    supported_tokens: list[str] = Field(default_factory=list)
    category: ProtocolCategory = ProtocolCategory.OTHER


class ProtocolStatusUpdate(BaseModel):
    """Admin request to flip active/trusted flags."""

    active: bool
    trusted: bool


class RiskParamsUpdate(BaseModel):
    """
    Admin request to set risk parameters.

    Must satisfy: max_ltv <= liquidation_threshold <= 100, penalty <= 100.
    Checked by the registry so callers get InvalidParameter.
    """

    liquidation_threshold: int
    max_ltv: int
    liquidation_penalty: int
    oracle: str = Field(..., description="Oracle reference used for valuation")


# =============================================================================
# RECORDS
# =============================================================================


class Protocol(BaseModel):
    """Registered protocol."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str
    active: bool
    trusted: bool
    supported_tokens: list[str]
    category: ProtocolCategory
    created_height: int
    created_at: Optional[datetime] = None


class RiskParams(BaseModel):
    """Risk parameters of one protocol (all percentages)."""

    model_config = ConfigDict(from_attributes=True)

    protocol_id: int
    liquidation_threshold: int
    max_ltv: int
    liquidation_penalty: int
    oracle: str
    updated_height: int
