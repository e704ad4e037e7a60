# disruption_engine/main.py
"""
Disruption Propagation & Recovery Engine - Main Application

Simulates delay cascades across an airline network: a delay on one flight
spreads to the aircraft's later legs and breaks passenger connections, and
the engine suggests rebookings for the stranded passengers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .settings import settings
from .db import check_connection, init_db
from .logging import configure_logging, get_logger
from .api import simulate_router, state_router, snapshots_router
from .scheduler import SimulationScheduler
from .service import get_service

# Import simulation router
from simulation.api import router as simulation_router

configure_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Creates tables, starts the scheduler when enabled, and stops it on
    shutdown.
    """
    logger.info("startup", service="disruption-engine")

    if not check_connection():
        logger.warning("database_unavailable", database_url=settings.database_url)
    else:
        init_db()
        logger.info("database_ready")

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = SimulationScheduler(
            get_service(),
            lifecycle_interval=settings.lifecycle_tick_seconds,
            chaos_interval=settings.chaos_interval_seconds,
        )
        scheduler.start()

    yield

    if scheduler is not None:
        scheduler.stop()
    logger.info("shutdown", service="disruption-engine")


# Create FastAPI app
app = FastAPI(
    title="Disruption Propagation & Recovery Engine",
    description="""
    Airline disruption simulator.

    Key features:
    - Recursive delay cascade over aircraft rotations (45 min turnaround)
    - Missed connection detection (30 min connection window)
    - Flight lifecycle: SCHEDULED -> BOARDING -> ACTIVE -> LANDED
    - Named hub scenarios and random chaos
    - Greedy rebooking suggestions
    - Snapshots for replay, and full reset
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# In production, set ALLOWED_ORIGINS to specific domains
allowed_origins = settings.allowed_origins.split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add basic security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Server"] = "Disruption Engine"
        return response


app.add_middleware(SecurityHeadersMiddleware)

# Include API routers
app.include_router(simulate_router)
app.include_router(state_router)
app.include_router(snapshots_router)
app.include_router(simulation_router)


# Health check endpoints
@app.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "ok", "service": "disruption-engine"}


@app.get("/health/db")
async def db_health_check():
    """Database health check."""
    if check_connection():
        return {"status": "ok", "database": "connected"}
    raise HTTPException(status_code=503, detail="Database connection failed")


def run():
    """Run the server (entry point for CLI)."""
    import uvicorn
    uvicorn.run(
        "disruption_engine.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


if __name__ == "__main__":
    run()
