"""
VaultLedger Services

Service layer containing all ledger logic.
Each service has a defined interface (contract) and implementation.
"""

from app.services.base import BaseService, ErrorCode, LedgerError, ServiceError

__all__ = ["BaseService", "ErrorCode", "LedgerError", "ServiceError"]
