"""
Payout Ledger: FastAPI application entry point.

Configures logging, middleware, and registers all API routers. On startup
the well-known platform catalog is seeded once (best effort).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from payout_ledger.api import currencies, platform_settings
from payout_ledger.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from payout_ledger.database import async_session, engine
    from payout_ledger.services.platform_registry import PlatformFeeRegistry

    if settings.SEED_ON_STARTUP:
        async with async_session() as session:
            await PlatformFeeRegistry(session).ensure_well_known_seeded()

    yield

    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Platform fee schedules and multi-currency withdrawal pricing.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(
    platform_settings.router, prefix="/api/v1/platform-settings", tags=["Platform settings"],
)
app.include_router(currencies.router, prefix="/api/v1/currencies", tags=["Currencies"])


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "0.1.0",
    }
