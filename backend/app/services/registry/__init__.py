"""
Protocol Registry

CONTRACT:
    Input:  RegisterProtocolInput (admin) / status and risk-param updates
    Output: Protocol / RiskParams

RESPONSIBILITIES:
    - Assign monotonic protocol ids (never reused)
    - Track active/trusted flags
    - Store and validate risk parameters:
        max_ltv <= liquidation_threshold <= 100, penalty <= 100
    - Resolve protocols for the other ledger services

Admin-only writes; unrestricted reads.
"""

from app.services.registry.interface import ProtocolRegistryInterface, RegisterProtocolInput
from app.services.registry.service import ProtocolRegistryService, get_registry_service

__all__ = [
    "ProtocolRegistryInterface",
    "RegisterProtocolInput",
    "ProtocolRegistryService",
    "get_registry_service",
]
