# disruption_engine/network/models.py
"""
Network model: the airline network the engine mutates.

Core entities:
- Airport: immutable reference data keyed by IATA code
- Aircraft: physical asset; read-only for the engine
- Flight: one scheduled leg, flown by at most one aircraft
- Passenger / Booking: itineraries as forward-linked booking chains
- DisruptionLogEntry: append-only audit trail of every applied delay
- SimulationSnapshot: write-once capture of the network for replay
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..clock import utc_now
from ..db.engine import Base


class FlightStatus(Enum):
    """
    Flight lifecycle states.

    SCHEDULED -> BOARDING -> ACTIVE -> LANDED
    DELAYED is entered from SCHEDULED/BOARDING/ACTIVE by propagation.
    CANCELLED is terminal and set only from outside the engine.
    """
    SCHEDULED = "SCHEDULED"
    BOARDING = "BOARDING"
    ACTIVE = "ACTIVE"
    LANDED = "LANDED"
    DELAYED = "DELAYED"
    CANCELLED = "CANCELLED"


class BookingStatus(Enum):
    """Booking states."""
    CONFIRMED = "CONFIRMED"
    MISSED_CONNECTION = "MISSED_CONNECTION"
    REBOOKED = "REBOOKED"
    CANCELLED = "CANCELLED"


# Flights that still take part in operations
NON_TERMINAL_STATUSES = (
    FlightStatus.SCHEDULED,
    FlightStatus.BOARDING,
    FlightStatus.ACTIVE,
)

# Flights that can no longer be delayed by a rotation or offered for rebooking
CLOSED_STATUSES = (FlightStatus.LANDED, FlightStatus.CANCELLED)

# Bookings that occupy a seat
SEATED_BOOKING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.REBOOKED)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Airport(Base):
    __tablename__ = "airports"

    code = Column(String(3), primary_key=True)
    name = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    timezone = Column(String(50), nullable=False, default="UTC")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "city": self.city,
            "country": self.country,
            "lat": self.lat,
            "lng": self.lng,
            "timezone": self.timezone,
        }


class Aircraft(Base):
    __tablename__ = "aircraft"

    id = Column(Integer, primary_key=True)
    tail_number = Column(String(20), unique=True, nullable=False)
    model = Column(String(50), nullable=False)
    capacity = Column(Integer, nullable=False, default=180)
    current_airport_code = Column(String(3), ForeignKey("airports.code"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tail_number": self.tail_number,
            "model": self.model,
            "capacity": self.capacity,
            "current_airport_code": self.current_airport_code,
        }


class Flight(Base):
    """
    One flight leg.

    Once actual times are initialized, actual_dep = scheduled_dep + delay_minutes
    and the scheduled block time is preserved: a delay shifts both endpoints.
    """
    __tablename__ = "flights"

    id = Column(Integer, primary_key=True)
    flight_number = Column(String(10), nullable=False)
    aircraft_id = Column(Integer, ForeignKey("aircraft.id"), index=True)
    origin_code = Column(String(3), ForeignKey("airports.code"), nullable=False)
    destination_code = Column(String(3), ForeignKey("airports.code"), nullable=False)
    scheduled_dep = Column(DateTime, nullable=False, index=True)
    scheduled_arr = Column(DateTime, nullable=False)
    actual_dep = Column(DateTime)
    actual_arr = Column(DateTime)
    delay_minutes = Column(Integer, nullable=False, default=0)
    status = Column(
        SAEnum(FlightStatus, native_enum=False, length=20),
        nullable=False,
        default=FlightStatus.SCHEDULED,
        index=True,
    )
    created_at = Column(DateTime, nullable=False, default=utc_now)

    aircraft = relationship("Aircraft")

    @hybrid_property
    def effective_dep(self) -> datetime:
        return self.actual_dep if self.actual_dep is not None else self.scheduled_dep

    @effective_dep.expression
    def effective_dep(cls):
        return func.coalesce(cls.actual_dep, cls.scheduled_dep)

    @hybrid_property
    def effective_arr(self) -> datetime:
        return self.actual_arr if self.actual_arr is not None else self.scheduled_arr

    @effective_arr.expression
    def effective_arr(cls):
        return func.coalesce(cls.actual_arr, cls.scheduled_arr)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "flight_number": self.flight_number,
            "aircraft_id": self.aircraft_id,
            "origin_code": self.origin_code,
            "destination_code": self.destination_code,
            "scheduled_dep": _iso(self.scheduled_dep),
            "scheduled_arr": _iso(self.scheduled_arr),
            "actual_dep": _iso(self.actual_dep),
            "actual_arr": _iso(self.actual_arr),
            "delay_minutes": self.delay_minutes,
            "status": self.status.value,
        }


class Passenger(Base):
    __tablename__ = "passengers"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True)
    phone = Column(String(20))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Booking(Base):
    """
    A passenger's seat on one flight.

    next_booking_id links to the onward leg of the same itinerary. Chains are
    acyclic by contract of whoever builds the itineraries.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    passenger_id = Column(Integer, ForeignKey("passengers.id"), nullable=False, index=True)
    flight_id = Column(Integer, ForeignKey("flights.id"), nullable=False, index=True)
    next_booking_id = Column(Integer, ForeignKey("bookings.id"))
    status = Column(
        SAEnum(BookingStatus, native_enum=False, length=20),
        nullable=False,
        default=BookingStatus.CONFIRMED,
        index=True,
    )
    created_at = Column(DateTime, nullable=False, default=utc_now)

    passenger = relationship("Passenger")
    flight = relationship("Flight")
    next_booking = relationship("Booking", remote_side=[id])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "passenger_id": self.passenger_id,
            "flight_id": self.flight_id,
            "next_booking_id": self.next_booking_id,
            "status": self.status.value,
        }


class DisruptionLogEntry(Base):
    """One applied delay. Counts cover this step only, not its sub-cascades."""
    __tablename__ = "disruption_log"

    id = Column(Integer, primary_key=True)
    flight_id = Column(Integer, ForeignKey("flights.id"), nullable=False)
    delay_minutes = Column(Integer, nullable=False)
    cause = Column(String(255))
    cascaded_from_flight_id = Column(Integer, ForeignKey("flights.id"))
    passengers_impacted = Column(Integer, nullable=False, default=0)
    flights_impacted = Column(Integer, nullable=False, default=0)
    depth = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    flight = relationship("Flight", foreign_keys=[flight_id])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "flight_id": self.flight_id,
            "flight_number": self.flight.flight_number if self.flight else None,
            "delay_minutes": self.delay_minutes,
            "cause": self.cause,
            "cascaded_from_flight_id": self.cascaded_from_flight_id,
            "passengers_impacted": self.passengers_impacted,
            "flights_impacted": self.flights_impacted,
            "depth": self.depth,
            "created_at": _iso(self.created_at),
        }


class SimulationSnapshot(Base):
    __tablename__ = "simulation_snapshots"

    id = Column(Integer, primary_key=True)
    label = Column(String(255), nullable=False, default="Auto Snapshot")
    flights_data = Column(JSON, nullable=False)
    missed_connections_data = Column(JSON, nullable=False, default=list)
    metrics = Column(JSON, nullable=False)
    booking_states = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "metrics": self.metrics,
            "created_at": _iso(self.created_at),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary()
        data.update({
            "flights_data": self.flights_data,
            "missed_connections_data": self.missed_connections_data,
            "booking_states": self.booking_states,
        })
        return data
