# Lifecycle module - flight status progression over time
from .state_machine import (
    TRANSITIONS,
    FlightLifecycle,
    StatusTransition,
    get_valid_transitions,
    next_status,
)

__all__ = [
    "TRANSITIONS",
    "FlightLifecycle",
    "StatusTransition",
    "get_valid_transitions",
    "next_status",
]
