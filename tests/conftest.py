# tests/conftest.py
"""
Pytest configuration and fixtures.

Every test gets its own in-memory SQLite database, so nothing needs to be
running. Sessions from the service and from the test share one connection
(StaticPool): commit the network before calling the service, and expire the
test session before reading what the service wrote.
"""

import random
from datetime import datetime, timedelta
from typing import Optional

import pytest
from sqlalchemy.orm import Session

from disruption_engine.db import build_engine, init_db, make_session_factory
from disruption_engine.network.models import (
    Aircraft,
    Airport,
    Booking,
    BookingStatus,
    Flight,
    FlightStatus,
    Passenger,
)
from disruption_engine.network.store import NetworkStore
from disruption_engine.service import DisruptionService
from disruption_engine.settings import Settings

# Fixed "now" for every test
BASE_TIME = datetime(2026, 3, 1, 8, 0)


def at(hours: float = 0, minutes: int = 0) -> datetime:
    """BASE_TIME shifted by the given offset."""
    return BASE_TIME + timedelta(hours=hours, minutes=minutes)


class NetworkBuilder:
    """Small helper for building test networks in one session."""

    def __init__(self, session: Session):
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def airport(self, code: str) -> Airport:
        airport = self.session.get(Airport, code)
        if airport is None:
            airport = Airport(
                code=code,
                name=f"{code} International",
                city=code,
                country="Testland",
                lat=0.0,
                lng=0.0,
                timezone="UTC",
            )
            self.session.add(airport)
            self.session.flush()
        return airport

    def aircraft(self, capacity: int = 180, base: str = "JFK") -> Aircraft:
        self.airport(base)
        aircraft = Aircraft(
            tail_number=f"N{self._next():03d}TS",
            model="Airbus A320",
            capacity=capacity,
            current_airport_code=base,
        )
        self.session.add(aircraft)
        self.session.flush()
        return aircraft

    def flight(
        self,
        origin: str,
        destination: str,
        dep: datetime,
        arr: datetime,
        aircraft: Optional[Aircraft] = None,
        status: FlightStatus = FlightStatus.SCHEDULED,
        number: Optional[str] = None,
    ) -> Flight:
        self.airport(origin)
        self.airport(destination)
        flight = Flight(
            flight_number=number or f"TS{self._next():03d}",
            aircraft_id=aircraft.id if aircraft else None,
            origin_code=origin,
            destination_code=destination,
            scheduled_dep=dep,
            scheduled_arr=arr,
            actual_dep=dep,
            actual_arr=arr,
            delay_minutes=0,
            status=status,
        )
        self.session.add(flight)
        self.session.flush()
        return flight

    def passenger(self, first: str = "Pat", last: Optional[str] = None) -> Passenger:
        n = self._next()
        passenger = Passenger(
            first_name=first,
            last_name=last or f"Traveler{n}",
            email=f"pax{n}@example.com",
        )
        self.session.add(passenger)
        self.session.flush()
        return passenger

    def booking(
        self,
        passenger: Passenger,
        flight: Flight,
        status: BookingStatus = BookingStatus.CONFIRMED,
    ) -> Booking:
        booking = Booking(passenger_id=passenger.id, flight_id=flight.id, status=status)
        self.session.add(booking)
        self.session.flush()
        return booking

    def itinerary(self, passenger: Passenger, inbound: Flight, onward: Flight):
        """Two linked bookings: inbound -> onward."""
        second = self.booking(passenger, onward)
        first = self.booking(passenger, inbound)
        first.next_booking_id = second.id
        self.session.flush()
        return first, second

    def fill(self, flight: Flight, seats: int) -> None:
        """Occupy `seats` seats on the flight with CONFIRMED bookings."""
        for _ in range(seats):
            self.booking(self.passenger("Filler"), flight)

    def commit(self) -> None:
        self.session.commit()


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    eng = build_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def session(session_factory) -> Session:
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store(session) -> NetworkStore:
    return NetworkStore(session)


@pytest.fixture
def network(session) -> NetworkBuilder:
    return NetworkBuilder(session)


@pytest.fixture
def clock():
    return lambda: BASE_TIME


@pytest.fixture
def test_settings() -> Settings:
    """Settings pinned to the documented defaults, independent of the environment."""
    return Settings(
        database_url="sqlite://",
        min_turnaround_minutes=45,
        min_connection_minutes=30,
        max_cascade_depth=20,
        rotation_anchor="departure",
        boarding_window_minutes=30,
        rebooking_candidates=3,
        random_delay_min=15,
        random_delay_max=180,
        simulation_seed=None,
        auto_snapshot=True,
        scheduler_enabled=False,
    )


@pytest.fixture
def service(session_factory, test_settings, clock) -> DisruptionService:
    return DisruptionService(
        session_factory=session_factory,
        settings=test_settings,
        rng=random.Random(42),
        clock=clock,
    )
