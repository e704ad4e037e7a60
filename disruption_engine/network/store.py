# disruption_engine/network/store.py
"""
Network store: keyed lookups and ordered range queries over the network.

The store never opens or commits transactions. It runs in the session it was
given, so every query made during one top-level engine operation sees the
same state, including changes flushed earlier in that operation.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..errors import NotFound
from .models import (
    Aircraft,
    Airport,
    Booking,
    BookingStatus,
    CLOSED_STATUSES,
    DisruptionLogEntry,
    Flight,
    FlightStatus,
    Passenger,
    SEATED_BOOKING_STATUSES,
    SimulationSnapshot,
)


class NetworkStore:
    """
    Query surface of the network model.

    Lookups raise NotFound for unknown keys. Range queries are ordered and
    break ties by id so results are deterministic.
    """

    def __init__(self, session: Session):
        self.session = session

    # ============================================================
    # KEYED LOOKUPS
    # ============================================================

    def _get(self, model, key, kind: str):
        obj = self.session.get(model, key)
        if obj is None:
            raise NotFound(kind, key)
        return obj

    def get_airport(self, code: str) -> Airport:
        return self._get(Airport, code, "Airport")

    def get_aircraft(self, aircraft_id: int) -> Aircraft:
        return self._get(Aircraft, aircraft_id, "Aircraft")

    def get_flight(self, flight_id: int) -> Flight:
        return self._get(Flight, flight_id, "Flight")

    def get_passenger(self, passenger_id: int) -> Passenger:
        return self._get(Passenger, passenger_id, "Passenger")

    def get_booking(self, booking_id: int) -> Booking:
        return self._get(Booking, booking_id, "Booking")

    def get_snapshot(self, snapshot_id: int) -> SimulationSnapshot:
        return self._get(SimulationSnapshot, snapshot_id, "Snapshot")

    # ============================================================
    # FLIGHT QUERIES
    # ============================================================

    def list_flights(self) -> List[Flight]:
        """All flights in schedule order."""
        stmt = select(Flight).order_by(Flight.scheduled_dep, Flight.id)
        return list(self.session.scalars(stmt))

    def list_airports(self) -> List[Airport]:
        return list(self.session.scalars(select(Airport).order_by(Airport.code)))

    def flights_with_status(self, statuses: Iterable[FlightStatus]) -> List[Flight]:
        stmt = (
            select(Flight)
            .where(Flight.status.in_(list(statuses)))
            .order_by(Flight.id)
        )
        return list(self.session.scalars(stmt))

    def flights_departing(
        self,
        airport_code: str,
        statuses: Iterable[FlightStatus],
    ) -> List[Flight]:
        stmt = (
            select(Flight)
            .where(Flight.origin_code == airport_code)
            .where(Flight.status.in_(list(statuses)))
            .order_by(Flight.id)
        )
        return list(self.session.scalars(stmt))

    def flights_arriving(
        self,
        airport_code: str,
        statuses: Iterable[FlightStatus],
    ) -> List[Flight]:
        stmt = (
            select(Flight)
            .where(Flight.destination_code == airport_code)
            .where(Flight.status.in_(list(statuses)))
            .order_by(Flight.id)
        )
        return list(self.session.scalars(stmt))

    def next_rotation_flight(
        self,
        aircraft_id: int,
        not_before: datetime,
        exclude_flight_id: int,
    ) -> Optional[Flight]:
        """
        Earliest open flight on the aircraft departing at or after `not_before`.

        LANDED and CANCELLED legs are skipped.
        """
        stmt = (
            select(Flight)
            .where(Flight.aircraft_id == aircraft_id)
            .where(Flight.id != exclude_flight_id)
            .where(Flight.effective_dep >= not_before)
            .where(Flight.status.not_in(list(CLOSED_STATUSES)))
            .order_by(Flight.effective_dep, Flight.id)
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def route_candidates(
        self,
        origin_code: str,
        destination_code: str,
        departing_after: datetime,
        exclude_flight_id: int,
        limit: int,
    ) -> List[Flight]:
        """
        Open flights on the exact origin/destination pair departing strictly
        after `departing_after`, earliest first. Flights without an aircraft
        have no capacity and are not candidates.
        """
        stmt = (
            select(Flight)
            .join(Aircraft, Flight.aircraft_id == Aircraft.id)
            .where(Flight.origin_code == origin_code)
            .where(Flight.destination_code == destination_code)
            .where(Flight.effective_dep > departing_after)
            .where(Flight.status.not_in(list(CLOSED_STATUSES)))
            .where(Flight.id != exclude_flight_id)
            .order_by(Flight.effective_dep, Flight.id)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    # ============================================================
    # BOOKING QUERIES
    # ============================================================

    def connecting_bookings(self, flight_id: int) -> List[Booking]:
        """CONFIRMED bookings on the flight that continue onto another leg."""
        stmt = (
            select(Booking)
            .where(Booking.flight_id == flight_id)
            .where(Booking.next_booking_id.is_not(None))
            .where(Booking.status == BookingStatus.CONFIRMED)
            .order_by(Booking.id)
        )
        return list(self.session.scalars(stmt))

    def missed_connection_bookings(self, with_forward_link: bool = False) -> List[Booking]:
        stmt = select(Booking).where(Booking.status == BookingStatus.MISSED_CONNECTION)
        if with_forward_link:
            stmt = stmt.where(Booking.next_booking_id.is_not(None))
        return list(self.session.scalars(stmt.order_by(Booking.id)))

    def list_bookings(self) -> List[Booking]:
        return list(self.session.scalars(select(Booking).order_by(Booking.id)))

    def booked_seats(self, flight_id: int) -> int:
        """Seats held on the flight by CONFIRMED or REBOOKED bookings."""
        stmt = (
            select(func.count(Booking.id))
            .where(Booking.flight_id == flight_id)
            .where(Booking.status.in_(list(SEATED_BOOKING_STATUSES)))
        )
        return self.session.scalar(stmt) or 0

    # ============================================================
    # AUDIT LOG
    # ============================================================

    def append_log(self, entry: DisruptionLogEntry) -> DisruptionLogEntry:
        self.session.add(entry)
        self.session.flush()
        return entry

    def recent_log(self, limit: int = 50) -> List[DisruptionLogEntry]:
        stmt = (
            select(DisruptionLogEntry)
            .order_by(DisruptionLogEntry.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    def log_entries(self) -> List[DisruptionLogEntry]:
        stmt = select(DisruptionLogEntry).order_by(DisruptionLogEntry.id)
        return list(self.session.scalars(stmt))
