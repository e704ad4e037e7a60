# disruption_engine/lifecycle/state_machine.py
"""
Flight lifecycle state machine.

States:
SCHEDULED -> BOARDING (within the boarding window before departure)
BOARDING | DELAYED -> ACTIVE (departed, not yet arrived)
ACTIVE -> LANDED (arrived)

DELAYED is set by propagation, never here. LANDED and CANCELLED are
terminal. All checks use effective times, so a delayed flight boards,
departs and lands on its shifted schedule.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from ..logging import get_logger
from ..network.models import Flight, FlightStatus
from ..network.store import NetworkStore

logger = get_logger(__name__)


# Valid lifecycle transitions
TRANSITIONS: Dict[FlightStatus, Set[FlightStatus]] = {
    FlightStatus.SCHEDULED: {FlightStatus.BOARDING},
    FlightStatus.BOARDING: {FlightStatus.ACTIVE},
    FlightStatus.DELAYED: {FlightStatus.ACTIVE},
    FlightStatus.ACTIVE: {FlightStatus.LANDED},
    FlightStatus.LANDED: set(),  # Terminal
    FlightStatus.CANCELLED: set(),  # Terminal
}


def get_valid_transitions(current: FlightStatus) -> Set[FlightStatus]:
    """Get valid lifecycle transitions from `current`."""
    return TRANSITIONS.get(current, set())


def next_status(
    status: FlightStatus,
    effective_dep: datetime,
    effective_arr: datetime,
    now: datetime,
    boarding_window_minutes: int = 30,
) -> Optional[FlightStatus]:
    """
    The status a flight should move to at `now`, or None to stay put.

    Advances at most one step, so repeated ticks walk a flight forward.
    """
    if status == FlightStatus.SCHEDULED:
        if effective_dep - timedelta(minutes=boarding_window_minutes) <= now < effective_dep:
            return FlightStatus.BOARDING
        return None

    if status in (FlightStatus.BOARDING, FlightStatus.DELAYED):
        if effective_dep <= now < effective_arr:
            return FlightStatus.ACTIVE
        return None

    if status == FlightStatus.ACTIVE:
        if now >= effective_arr:
            return FlightStatus.LANDED
        return None

    return None


@dataclass
class StatusTransition:
    """One applied lifecycle step."""
    flight_id: int
    flight_number: str
    from_status: FlightStatus
    to_status: FlightStatus

    def to_dict(self) -> dict:
        return {
            "flight_id": self.flight_id,
            "flight_number": self.flight_number,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
        }


class FlightLifecycle:
    """
    Advances flight statuses against a clock.

    Safe to run on every tick: a second advance at the same `now` finds
    nothing left to move. Only the status column is written.
    """

    def __init__(self, store: NetworkStore, boarding_window_minutes: int = 30):
        self.store = store
        self.boarding_window_minutes = boarding_window_minutes

    def evaluate(self, flight: Flight, now: datetime) -> Optional[FlightStatus]:
        return next_status(
            flight.status,
            flight.effective_dep,
            flight.effective_arr,
            now,
            self.boarding_window_minutes,
        )

    def advance(self, now: datetime) -> List[StatusTransition]:
        """
        Apply one lifecycle step to every flight that is due.

        Args:
            now: Wall-clock time (naive UTC)

        Returns:
            Transitions applied, in flight id order
        """
        movable = [s for s, targets in TRANSITIONS.items() if targets]
        applied: List[StatusTransition] = []

        for flight in self.store.flights_with_status(movable):
            target = self.evaluate(flight, now)
            if target is None:
                continue
            applied.append(StatusTransition(
                flight_id=flight.id,
                flight_number=flight.flight_number,
                from_status=flight.status,
                to_status=target,
            ))
            flight.status = target

        if applied:
            self.store.session.flush()
            logger.info(
                "lifecycle_advanced",
                now=now.isoformat(),
                transitions=len(applied),
            )
        return applied
