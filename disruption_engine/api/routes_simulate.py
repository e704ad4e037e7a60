# disruption_engine/api/routes_simulate.py
"""
Disruption trigger API routes.

Endpoints that mutate the network: manual or random delays, reset and the
lifecycle tick. Each returns the disruption events produced and the
refreshed world state.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..errors import EngineError
from ..logging import get_api_logger
from ..service import DisruptionService, get_service
from .errors import http_error

router = APIRouter(prefix="/simulate", tags=["simulate"])
logger = get_api_logger()


class TriggerDelayRequest(BaseModel):
    """Manual delay. Leave flight_id or delay_minutes empty for a random delay."""
    flight_id: Optional[int] = None
    delay_minutes: Optional[int] = Field(default=None, ge=0)
    cause: Optional[str] = None


@router.post("/delay")
def trigger_delay(
    request: Optional[TriggerDelayRequest] = None,
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    """
    Delay a flight and cascade the delay through the network.

    Returns:
        Disruption events, auto-snapshot id and world state
    """
    request = request or TriggerDelayRequest()
    try:
        outcome = service.trigger_delay(
            request.flight_id,
            request.delay_minutes,
            request.cause,
        )
    except EngineError as e:
        raise http_error(e)

    logger.info(
        "delay_triggered",
        flight_id=request.flight_id,
        delay_minutes=request.delay_minutes,
        events=len(outcome.events),
    )
    return outcome.to_dict()


@router.post("/reset")
def reset_simulation(service: DisruptionService = Depends(get_service)) -> Dict[str, Any]:
    """Put every flight back on schedule and clear the disruption log."""
    try:
        outcome = service.reset_simulation()
    except EngineError as e:
        raise http_error(e)
    return outcome.to_dict()


@router.post("/update-statuses")
def update_statuses(service: DisruptionService = Depends(get_service)) -> Dict[str, Any]:
    """Run one lifecycle tick now."""
    try:
        outcome = service.advance_lifecycle()
    except EngineError as e:
        raise http_error(e)
    return outcome.to_dict()
