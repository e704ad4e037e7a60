# disruption_engine/api/__init__.py
"""API routes package."""

from .routes_simulate import router as simulate_router
from .routes_state import router as state_router
from .routes_snapshots import router as snapshots_router

__all__ = [
    "simulate_router",
    "state_router",
    "snapshots_router",
]
