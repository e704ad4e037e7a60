# Network model - entities and the query store
from .models import (
    Airport,
    Aircraft,
    Flight,
    FlightStatus,
    Passenger,
    Booking,
    BookingStatus,
    DisruptionLogEntry,
    SimulationSnapshot,
    NON_TERMINAL_STATUSES,
    CLOSED_STATUSES,
    SEATED_BOOKING_STATUSES,
)
from .store import NetworkStore

__all__ = [
    "Airport",
    "Aircraft",
    "Flight",
    "FlightStatus",
    "Passenger",
    "Booking",
    "BookingStatus",
    "DisruptionLogEntry",
    "SimulationSnapshot",
    "NON_TERMINAL_STATUSES",
    "CLOSED_STATUSES",
    "SEATED_BOOKING_STATUSES",
    "NetworkStore",
]
