# disruption_engine/propagation/engine.py
"""
Delay propagation engine.

A delay applied to one flight spreads two ways:
- Aircraft rotation: the aircraft's next leg cannot leave before the minimum
  turnaround after the delayed arrival, so it inherits a forced delay and the
  cascade recurses onto it. The next leg is the earliest one departing at or
  after the new departure, so a leg the aircraft can no longer reach in time
  is still found.
- Passenger itineraries: a connecting booking whose onward departure is now
  closer than the minimum connection time is marked MISSED_CONNECTION, along
  with the onward booking.

Every step writes one disruption log entry. Recursion depth is an explicit
argument and the cascade stops silently past the configured maximum, which
bounds long rotations and malformed (cyclic) ones.

The engine does not commit. The caller owns the transaction, so a failure
anywhere in the cascade discards the whole blast radius.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from ..clock import minutes_between, utc_now
from ..errors import InvalidDelay
from ..logging import StructuredLogger, get_logger
from ..network.models import (
    BookingStatus,
    DisruptionLogEntry,
    Flight,
    FlightStatus,
)
from ..network.store import NetworkStore
from ..settings import Settings
from .models import CascadeResult, DisruptionEvent

logger = get_logger(__name__)

ROTATION_ANCHORS = ("arrival", "departure")


def turnaround_cause(flight_id: int) -> str:
    """Cause label recorded on a delay forced by the aircraft's previous leg."""
    return f"Aircraft turnaround from flight {flight_id}"


class PropagationEngine:
    """
    Recursive blast-radius computation over a NetworkStore.

    Args:
        store: Store bound to the caller's session
        min_turnaround_minutes: Ground time an aircraft needs between legs
        min_connection_minutes: Time a passenger needs between legs
        max_depth: Deepest recursion level that still applies a delay
        rotation_anchor: Search the next rotation leg from the new "arrival"
            or from the new "departure" (default)
        clock: Source of log timestamps
    """

    def __init__(
        self,
        store: NetworkStore,
        min_turnaround_minutes: int = 45,
        min_connection_minutes: int = 30,
        max_depth: int = 20,
        rotation_anchor: str = "departure",
        clock: Callable[[], datetime] = utc_now,
    ):
        if rotation_anchor not in ROTATION_ANCHORS:
            raise ValueError(
                f"rotation_anchor must be one of {ROTATION_ANCHORS}, got {rotation_anchor!r}"
            )
        self.store = store
        self.min_turnaround_minutes = min_turnaround_minutes
        self.min_connection_minutes = min_connection_minutes
        self.max_depth = max_depth
        self.rotation_anchor = rotation_anchor
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        store: NetworkStore,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> "PropagationEngine":
        return cls(
            store,
            min_turnaround_minutes=settings.min_turnaround_minutes,
            min_connection_minutes=settings.min_connection_minutes,
            max_depth=settings.max_cascade_depth,
            rotation_anchor=settings.rotation_anchor,
            clock=clock,
        )

    def propagate(
        self,
        flight_id: int,
        delay_minutes: int,
        cause: Optional[str] = None,
    ) -> CascadeResult:
        """
        Root entry point: validate, then run the full cascade.

        Raises:
            InvalidDelay: delay_minutes is negative
            NotFound: flight_id is unknown
        """
        if delay_minutes < 0:
            raise InvalidDelay(delay_minutes)
        self.store.get_flight(flight_id)

        result = CascadeResult(
            root_flight_id=flight_id,
            root_delay_minutes=delay_minutes,
            cause=cause,
        )
        self.propagate_delay(flight_id, delay_minutes, cause, result=result)

        logger.info(
            "cascade_complete",
            root_flight_id=flight_id,
            delay_minutes=delay_minutes,
            flights_delayed=len(result.flights_delayed),
            passengers_impacted=result.passengers_impacted,
            depth_limit_hits=result.depth_limit_hits,
        )
        return result

    def propagate_delay(
        self,
        flight_id: int,
        delay_minutes: int,
        cause: Optional[str],
        caused_by_flight_id: Optional[int] = None,
        depth: int = 0,
        result: Optional[CascadeResult] = None,
    ) -> Optional[DisruptionEvent]:
        """
        Apply `delay_minutes` to one flight and cascade from it.

        Returns the event logged for this flight, or None when the depth
        limit stopped the cascade before this step.
        """
        if result is None:
            result = CascadeResult(
                root_flight_id=flight_id,
                root_delay_minutes=delay_minutes,
                cause=cause,
            )

        log = logger.bind(root_flight_id=result.root_flight_id)

        if depth > self.max_depth:
            result.depth_limit_hits += 1
            log.warning(
                "cascade_depth_limit_reached",
                flight_id=flight_id,
                caused_by_flight_id=caused_by_flight_id,
                depth=depth,
                max_depth=self.max_depth,
            )
            return None

        flight = self.store.get_flight(flight_id)
        self._apply_delay(flight, delay_minutes)
        new_dep = flight.actual_dep
        new_arr = flight.actual_arr

        log.debug(
            "delay_applied",
            flight_id=flight.id,
            flight_number=flight.flight_number,
            delay_minutes=delay_minutes,
            cumulative_delay=flight.delay_minutes,
            depth=depth,
        )

        flights_impacted = 0
        if flight.aircraft_id is not None:
            anchor = new_arr if self.rotation_anchor == "arrival" else new_dep
            next_flight = self.store.next_rotation_flight(
                flight.aircraft_id, anchor, flight.id
            )
            if next_flight is not None:
                forced_delay = self.min_turnaround_minutes - minutes_between(
                    next_flight.effective_dep, new_arr
                )
                if forced_delay > 0:
                    flights_impacted += 1
                    self.propagate_delay(
                        next_flight.id,
                        forced_delay,
                        turnaround_cause(flight.id),
                        caused_by_flight_id=flight.id,
                        depth=depth + 1,
                        result=result,
                    )

        passengers_impacted = self._break_connections(flight, new_arr, log)

        entry = self.store.append_log(DisruptionLogEntry(
            flight_id=flight.id,
            delay_minutes=delay_minutes,
            cause=cause,
            cascaded_from_flight_id=caused_by_flight_id,
            passengers_impacted=passengers_impacted,
            flights_impacted=flights_impacted,
            depth=depth,
            created_at=self.clock(),
        ))
        event = DisruptionEvent.from_log(entry, flight)
        result.events.append(event)
        return event

    def _apply_delay(self, flight: Flight, delay_minutes: int) -> None:
        """Shift both endpoints by the delay and flag the flight DELAYED."""
        shift = timedelta(minutes=delay_minutes)
        flight.actual_dep = flight.effective_dep + shift
        flight.actual_arr = flight.effective_arr + shift
        flight.delay_minutes = (flight.delay_minutes or 0) + delay_minutes
        flight.status = FlightStatus.DELAYED
        self.store.session.flush()

    def _break_connections(
        self, flight: Flight, new_arrival: datetime, log: StructuredLogger
    ) -> int:
        """
        Mark connections off this flight that no longer make the minimum
        connection time. Exactly the minimum still connects.

        Returns the number of passengers newly stranded.
        """
        stranded = 0
        for booking in self.store.connecting_bookings(flight.id):
            onward = booking.next_booking
            if onward is None or onward.flight is None:
                continue
            slack = minutes_between(onward.flight.effective_dep, new_arrival)
            if slack < self.min_connection_minutes:
                booking.status = BookingStatus.MISSED_CONNECTION
                onward.status = BookingStatus.MISSED_CONNECTION
                stranded += 1
                log.info(
                    "connection_broken",
                    booking_id=booking.id,
                    next_booking_id=onward.id,
                    passenger_id=booking.passenger_id,
                    flight_id=flight.id,
                    onward_flight_id=onward.flight_id,
                    slack_minutes=slack,
                )
        if stranded:
            self.store.session.flush()
        return stranded
