"""
VaultLedger Backend - FastAPI Application

Main entry point for the backend API.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.api.errors import register_error_handlers
from app.api.v1 import router as api_v1_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    print(f"Starting {settings.app_name} v{settings.app_version}")
    print(f"Environment: {settings.environment}")
    print(f"Contract owner: {settings.contract_owner}")

    # Initialize Redis event channel
    from app.services.events import init_redis, close_redis, get_event_bus
    if settings.enable_redis_events:
        redis_client = await init_redis()
        if redis_client:
            print("Redis event channel connected")
        else:
            print("Redis unavailable - events kept in memory only")
    event_bus = get_event_bus()

    # Initialize ledger store
    from app.db.database import init_store, close_store
    store = await init_store(event_bus=event_bus)
    print("Ledger store initialized")

    from app.services.context import LedgerContext, configure_context
    configure_context(LedgerContext(store=store, settings=settings))

    yield

    # Shutdown
    print("Shutting down...")
    configure_context(None)
    await close_store()
    await close_redis()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    VaultLedger Fund-Allocation API

    ## Architecture
    - **Protocol Registry**: Admin-curated external protocols and risk parameters
    - **Allocation Engine**: Splits amounts across protocols by percentage
    - **Vault Ledger**: Vaults, per-user balances, deposit / withdraw / rebalance
    - **Risk Engine**: Liquidation alerts against user buffers
    - **Position Tracker**: Caller-reported protocol holdings
    - **Batch Executor**: Ordered, all-or-nothing protocol actions

    ## Core Principles
    - Every operation applies fully or not at all
    - Integer amounts, floor rounding, never over-allocate
    - Events published only after commit
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
cors_origins = [settings.frontend_url]
if settings.allowed_origins:
    cors_origins.extend([o for o in settings.allowed_origins if o not in cors_origins])

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    from app.db.database import get_store
    store = get_store()
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "height": await store.height(),
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "VaultLedger Backend API",
        "docs": "/docs",
        "health": "/health",
    }
