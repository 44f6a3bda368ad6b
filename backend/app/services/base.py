"""
Base Service Interface

All services inherit from this base class.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Generic, NoReturn, TypeVar

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for all services.

    Each service:
    - Has a defined input type
    - Has a defined output type
    - Can validate its inputs
    - Can check its health
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Execute the service's main operation.

        Args:
            input_data: Validated input conforming to InputT schema

        Returns:
            Output conforming to OutputT schema

        Raises:
            LedgerError: If the operation is rejected
        """
        pass

    async def health_check(self) -> bool:
        """Ledger services are pure bookkeeping and always healthy."""
        return True

    def reject(self, code: "ErrorCode", message: str, **details) -> NoReturn:
        """Log and raise a categorical failure."""
        logger.warning(f"[{self.name}] {code.value}: {message}")
        raise LedgerError(self.name, code, message, details)


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ErrorCode(str, Enum):
    """Categorical failure codes returned to callers verbatim."""

    NOT_AUTHORIZED = "NotAuthorized"
    INVALID_PROTOCOL = "InvalidProtocol"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    INVALID_AMOUNT = "InvalidAmount"
    VAULT_NOT_FOUND = "VaultNotFound"
    PROTOCOL_NOT_REGISTERED = "ProtocolNotRegistered"
    INVALID_PARAMETER = "InvalidParameter"
    POSITION_NOT_FOUND = "PositionNotFound"
    LIQUIDATION_THRESHOLD = "LiquidationThreshold"
    VAULT_FULL = "VaultFull"
    SLIPPAGE_TOO_HIGH = "SlippageTooHigh"
    UNSUPPORTED_TOKEN = "UnsupportedToken"


class LedgerError(ServiceError):
    """
    A rejected ledger operation.

    Raising one inside a store transaction discards every mutation made
    by the operation so far.
    """

    def __init__(self, service_name: str, code: ErrorCode, message: str, details: dict = None):
        self.code = code
        super().__init__(service_name, message, details)

