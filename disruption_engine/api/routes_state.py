# disruption_engine/api/routes_state.py
"""
Read-only network API routes.

World state, recent disruptions, rebooking suggestions and the disruption
cost estimate. Accepting a rebooking is the one write here.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..errors import EngineError
from ..service import DisruptionService, get_service
from .errors import http_error

router = APIRouter(tags=["state"])


class AcceptRebookingRequest(BaseModel):
    """Move a stranded passenger onto an alternative flight."""
    booking_id: int
    flight_id: int


@router.get("/state")
def get_world_state(service: DisruptionService = Depends(get_service)) -> Dict[str, Any]:
    """Flights, airports, broken connections, metrics and recent log."""
    try:
        return service.get_world_state()
    except EngineError as e:
        raise http_error(e)


@router.get("/disruptions")
def list_disruptions(
    limit: int = Query(default=50, ge=1, le=500),
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        entries = service.list_disruptions(limit)
    except EngineError as e:
        raise http_error(e)
    return {"disruptions": entries, "count": len(entries)}


@router.get("/rebookings")
def suggest_rebookings(service: DisruptionService = Depends(get_service)) -> Dict[str, Any]:
    """At most one alternative per stranded passenger."""
    try:
        suggestions = service.suggest_rebookings()
    except EngineError as e:
        raise http_error(e)
    return {"suggestions": suggestions, "count": len(suggestions)}


@router.post("/rebookings/accept")
def accept_rebooking(
    request: AcceptRebookingRequest,
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        outcome = service.accept_rebooking(request.booking_id, request.flight_id)
    except EngineError as e:
        raise http_error(e)
    return outcome.to_dict()


@router.get("/cost-estimate")
def estimate_costs(service: DisruptionService = Depends(get_service)) -> Dict[str, Any]:
    try:
        return service.estimate_costs()
    except EngineError as e:
        raise http_error(e)
