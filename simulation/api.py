# simulation/api.py
"""
API endpoints for simulation.

Lists the hub disruption scenarios, applies one to the network, and loads
the demo network.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from disruption_engine.api.errors import http_error
from disruption_engine.clock import to_naive_utc
from disruption_engine.errors import EngineError
from disruption_engine.service import DisruptionService, get_service

from .scenarios import get_scenario, list_scenarios


router = APIRouter(prefix="/simulation", tags=["simulation"])


class SeedNetworkRequest(BaseModel):
    """Request to seed the demo network."""
    base_time: Optional[datetime] = None  # None = now


@router.get("/scenarios")
def get_scenarios() -> Dict[str, Any]:
    """List all available disruption scenarios."""
    scenarios = list_scenarios()
    return {
        "scenarios": scenarios,
        "count": len(scenarios),
    }


@router.get("/scenarios/{scenario_id}")
def get_scenario_detail(scenario_id: str) -> Dict[str, Any]:
    scenario = get_scenario(scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail=f"Scenario not found: {scenario_id}")
    return scenario.to_dict()


@router.post("/run/{scenario_id}")
def run_scenario(
    scenario_id: str,
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    """
    Apply a scenario to the network as one atomic batch.

    Returns per-flight details, disruption events and the new world state.
    """
    try:
        outcome = service.trigger_scenario(scenario_id)
    except EngineError as e:
        raise http_error(e)
    return outcome.to_dict()


@router.post("/seed")
def seed_network(
    request: Optional[SeedNetworkRequest] = None,
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    """Load the demo network. A no-op when a network is already loaded."""
    base_time = request.base_time if request else None
    if base_time is not None:
        base_time = to_naive_utc(base_time)
    try:
        seeded = service.seed_demo_network(base_time)
    except EngineError as e:
        raise http_error(e)
    if seeded is None:
        return {"seeded": False, "message": "Network already seeded"}
    return {"seeded": True, **seeded}
