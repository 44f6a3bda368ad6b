"""
Protocol Registry Service Interface

Defines the contract for the protocol registry.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.services.base import BaseService
from app.schemas.protocol import (
    Protocol,
    ProtocolStatusUpdate,
    RegisterProtocolRequest,
    RiskParams,
    RiskParamsUpdate,
)


@dataclass
class RegisterProtocolInput:
    """Input for protocol registration."""

    caller: str
    request: RegisterProtocolRequest


class ProtocolRegistryInterface(BaseService[RegisterProtocolInput, Protocol]):
    """
    Protocol Registry Contract.

    INPUT: RegisterProtocolInput
        - caller: must be the contract owner
        - request: name, address, supported tokens, category

    OUTPUT: Protocol
        - id: next value of the protocol counter
        - active / trusted: both True on registration

    ADMIN OPERATIONS (NotAuthorized for anyone else):
        - register
        - set_status (ProtocolNotRegistered if unknown)
        - set_risk_params (ProtocolNotRegistered, InvalidParameter)

    Reads are unrestricted.
    """

    @property
    def name(self) -> str:
        return "ProtocolRegistry"

    @abstractmethod
    async def execute(self, input_data: RegisterProtocolInput) -> Protocol:
        """Register a protocol."""
        pass

    @abstractmethod
    async def set_status(self, caller: str, protocol_id: int, update: ProtocolStatusUpdate) -> Protocol:
        """Update active/trusted flags."""
        pass

    @abstractmethod
    async def set_risk_params(self, caller: str, protocol_id: int, update: RiskParamsUpdate) -> RiskParams:
        """Create or replace a protocol's risk parameters."""
        pass

    @abstractmethod
    async def get_protocol(self, protocol_id: int) -> Optional[Protocol]:
        pass

    @abstractmethod
    async def list_protocols(self, active_only: bool = False) -> list[Protocol]:
        pass

    @abstractmethod
    async def get_risk_params(self, protocol_id: int) -> Optional[RiskParams]:
        pass
