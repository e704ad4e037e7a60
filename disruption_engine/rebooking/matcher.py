# disruption_engine/rebooking/matcher.py
"""
Rebooking matcher.

Greedy first-fit: for each stranded passenger, look at the next few flights
on the missed leg's exact route and offer the first one with a free seat.
No global optimization, and time_saved_minutes is reported even when the
alternative arrives later than the missed flight would have.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..clock import minutes_between
from ..errors import RebookingRejected
from ..logging import get_logger
from ..network.models import (
    Booking,
    BookingStatus,
    CLOSED_STATUSES,
    Flight,
)
from ..network.store import NetworkStore

logger = get_logger(__name__)


@dataclass
class RebookingSuggestion:
    """One alternative flight for one missed connection."""
    booking_id: int
    passenger_id: int
    passenger_name: str
    missed_flight_id: int
    missed_flight_number: str
    missed_origin: str
    missed_destination: str
    suggested_flight_id: int
    suggested_flight_number: str
    suggested_dep: datetime
    suggested_arr: datetime
    seats_available: int
    time_saved_minutes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "passenger_id": self.passenger_id,
            "passenger_name": self.passenger_name,
            "missed_flight_id": self.missed_flight_id,
            "missed_flight_number": self.missed_flight_number,
            "missed_origin": self.missed_origin,
            "missed_destination": self.missed_destination,
            "suggested_flight_id": self.suggested_flight_id,
            "suggested_flight_number": self.suggested_flight_number,
            "suggested_dep": self.suggested_dep.isoformat(),
            "suggested_arr": self.suggested_arr.isoformat(),
            "seats_available": self.seats_available,
            "time_saved_minutes": self.time_saved_minutes,
        }


class RebookingMatcher:
    """Finds, and on request books, alternatives for missed connections."""

    def __init__(self, store: NetworkStore, max_candidates: int = 3):
        self.store = store
        self.max_candidates = max_candidates

    def seats_available(self, flight: Flight) -> int:
        if flight.aircraft is None:
            return 0
        return flight.aircraft.capacity - self.store.booked_seats(flight.id)

    def suggest(self, now: datetime) -> List[RebookingSuggestion]:
        """
        One suggestion per MISSED_CONNECTION booking that has an onward leg
        and a candidate with capacity. Read-only.
        """
        suggestions: List[RebookingSuggestion] = []

        for booking in self.store.missed_connection_bookings(with_forward_link=True):
            suggestion = self._match(booking, now)
            if suggestion is not None:
                suggestions.append(suggestion)

        logger.debug("rebookings_suggested", count=len(suggestions))
        return suggestions

    def _match(self, booking: Booking, now: datetime) -> Optional[RebookingSuggestion]:
        onward = booking.next_booking
        if onward is None or onward.flight is None:
            return None
        missed = onward.flight

        candidates = self.store.route_candidates(
            missed.origin_code,
            missed.destination_code,
            now,
            missed.id,
            self.max_candidates,
        )
        for candidate in candidates:
            available = self.seats_available(candidate)
            if available <= 0:
                continue
            return RebookingSuggestion(
                booking_id=booking.id,
                passenger_id=booking.passenger_id,
                passenger_name=booking.passenger.full_name,
                missed_flight_id=missed.id,
                missed_flight_number=missed.flight_number,
                missed_origin=missed.origin_code,
                missed_destination=missed.destination_code,
                suggested_flight_id=candidate.id,
                suggested_flight_number=candidate.flight_number,
                suggested_dep=candidate.effective_dep,
                suggested_arr=candidate.effective_arr,
                seats_available=available,
                time_saved_minutes=minutes_between(
                    missed.effective_arr, candidate.effective_arr
                ),
            )
        return None

    def accept(self, booking_id: int, flight_id: int, now: datetime) -> Booking:
        """
        Move a stranded passenger's onward leg onto `flight_id`.

        The inbound booking is re-linked to a new REBOOKED booking on the
        target flight; the missed onward booking is CANCELLED.

        Raises:
            NotFound: unknown booking or flight
            RebookingRejected: booking not stranded, route mismatch, target
                closed or no longer in the future, or no free seat
        """
        booking = self.store.get_booking(booking_id)
        target = self.store.get_flight(flight_id)

        if booking.status != BookingStatus.MISSED_CONNECTION:
            raise RebookingRejected(
                f"Booking {booking_id} is {booking.status.value}, not MISSED_CONNECTION"
            )
        onward = booking.next_booking
        if onward is None or onward.flight is None:
            raise RebookingRejected(f"Booking {booking_id} has no onward leg")

        missed = onward.flight
        if target.id == missed.id:
            raise RebookingRejected("Target is the missed flight")
        if (target.origin_code, target.destination_code) != (
            missed.origin_code,
            missed.destination_code,
        ):
            raise RebookingRejected(
                f"Flight {target.flight_number} does not fly "
                f"{missed.origin_code}->{missed.destination_code}"
            )
        if target.status in CLOSED_STATUSES:
            raise RebookingRejected(
                f"Flight {target.flight_number} is {target.status.value}"
            )
        # Same window suggest() offers: departing strictly after now
        if target.effective_dep <= now:
            raise RebookingRejected(
                f"Flight {target.flight_number} departs at "
                f"{target.effective_dep.isoformat()}, not after {now.isoformat()}"
            )
        if self.seats_available(target) <= 0:
            raise RebookingRejected(f"Flight {target.flight_number} is full")

        replacement = Booking(
            passenger_id=booking.passenger_id,
            flight_id=target.id,
            next_booking_id=onward.next_booking_id,
            status=BookingStatus.REBOOKED,
        )
        self.store.session.add(replacement)
        self.store.session.flush()

        onward.status = BookingStatus.CANCELLED
        booking.next_booking = replacement
        booking.status = BookingStatus.REBOOKED
        self.store.session.flush()

        logger.info(
            "rebooking_accepted",
            booking_id=booking.id,
            passenger_id=booking.passenger_id,
            cancelled_booking_id=onward.id,
            new_booking_id=replacement.id,
            flight_id=target.id,
        )
        return replacement
