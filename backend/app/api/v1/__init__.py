"""
API v1 Router

All ledger endpoints.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import accounts, batch, events, positions, protocols, risk, vaults

router = APIRouter()

# Include all endpoint routers
router.include_router(protocols.router, prefix="/protocols", tags=["Protocol Registry"])
router.include_router(vaults.router, prefix="/vaults", tags=["Vaults"])
router.include_router(risk.router, prefix="/risk", tags=["Risk"])
router.include_router(positions.router, prefix="/positions", tags=["Positions"])
router.include_router(batch.router, prefix="/batch", tags=["Batch Transactions"])
router.include_router(accounts.router, prefix="/accounts", tags=["Settlement Accounts"])
router.include_router(events.router, prefix="/events", tags=["Events"])
