# simulation/seeders.py
"""
Seeders for the demo network.

Creates the reference network used by the dashboard and the integration
tests: 12 hub airports, 8 wide-body aircraft, 15 legs scheduled relative to
a base time, 12 passengers and 22 bookings, 10 of which continue onto a
second leg.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from disruption_engine.clock import utc_now
from disruption_engine.db import session_scope
from disruption_engine.logging import get_logger
from disruption_engine.network.models import (
    Aircraft,
    Airport,
    Booking,
    Flight,
    Passenger,
)
from disruption_engine.snapshots import SnapshotManager
from disruption_engine.network.store import NetworkStore

logger = get_logger(__name__)


# code, name, city, country, lat, lng, timezone
AIRPORTS: List[Tuple[str, str, str, str, float, float, str]] = [
    ("JFK", "John F. Kennedy International", "New York", "USA", 40.6413, -73.7781, "America/New_York"),
    ("LAX", "Los Angeles International", "Los Angeles", "USA", 33.9425, -118.4081, "America/Los_Angeles"),
    ("ORD", "O'Hare International", "Chicago", "USA", 41.9742, -87.9073, "America/Chicago"),
    ("LHR", "Heathrow", "London", "UK", 51.4700, -0.4543, "Europe/London"),
    ("CDG", "Charles de Gaulle", "Paris", "France", 49.0097, 2.5479, "Europe/Paris"),
    ("FRA", "Frankfurt Airport", "Frankfurt", "Germany", 50.0379, 8.5622, "Europe/Berlin"),
    ("DXB", "Dubai International", "Dubai", "UAE", 25.2532, 55.3657, "Asia/Dubai"),
    ("SIN", "Changi Airport", "Singapore", "Singapore", 1.3644, 103.9915, "Asia/Singapore"),
    ("HND", "Haneda Airport", "Tokyo", "Japan", 35.5494, 139.7798, "Asia/Tokyo"),
    ("SYD", "Kingsford Smith", "Sydney", "Australia", -33.9461, 151.1772, "Australia/Sydney"),
    ("DEL", "Indira Gandhi International", "Delhi", "India", 28.5562, 77.1000, "Asia/Kolkata"),
    ("GRU", "Guarulhos International", "São Paulo", "Brazil", -23.4356, -46.4731, "America/Sao_Paulo"),
]

# id, tail number, model, capacity, base airport
AIRCRAFT: List[Tuple[int, str, str, int, str]] = [
    (1, "N101AA", "Boeing 777-300ER", 350, "JFK"),
    (2, "N202UA", "Boeing 787-9", 290, "LAX"),
    (3, "G-XLEA", "Airbus A380", 490, "LHR"),
    (4, "D-AIMA", "Airbus A350-900", 310, "FRA"),
    (5, "A6-EDA", "Airbus A380", 490, "DXB"),
    (6, "9V-SKA", "Airbus A350-900", 310, "SIN"),
    (7, "JA301A", "Boeing 787-9", 290, "HND"),
    (8, "VH-OQA", "Airbus A380", 490, "SYD"),
]

# id, flight number, aircraft, origin, destination, dep offset h, arr offset h
FLIGHTS: List[Tuple[int, str, int, str, str, int, int]] = [
    (1, "AA100", 1, "JFK", "LHR", 1, 8),
    (2, "AA101", 1, "LHR", "FRA", 9, 11),
    (3, "BA205", 3, "LHR", "DXB", 2, 9),
    (4, "BA206", 3, "DXB", "SIN", 10, 17),
    (5, "LH756", 4, "FRA", "DEL", 3, 11),
    (6, "LH757", 4, "DEL", "HND", 12, 20),
    (7, "EK404", 5, "DXB", "SIN", 4, 11),
    (8, "EK405", 5, "SIN", "SYD", 12, 20),
    (9, "UA500", 2, "LAX", "ORD", 2, 6),
    (10, "UA501", 2, "ORD", "CDG", 7, 15),
    (11, "NH801", 7, "HND", "SIN", 1, 8),
    (12, "NH802", 7, "SIN", "SYD", 9, 17),
    (13, "QF001", 8, "SYD", "LHR", 3, 27),
    (14, "AF440", 4, "CDG", "JFK", 16, 24),
    (15, "SQ321", 6, "SIN", "LHR", 5, 18),
]

# id, first name, last name
PASSENGERS: List[Tuple[int, str, str]] = [
    (1, "James", "Wilson"),
    (2, "Maria", "Santos"),
    (3, "Akira", "Tanaka"),
    (4, "Sophie", "Dubois"),
    (5, "Raj", "Patel"),
    (6, "Emily", "Chen"),
    (7, "Hans", "Mueller"),
    (8, "Olivia", "Brown"),
    (9, "Carlos", "Rivera"),
    (10, "Aisha", "Khan"),
    (11, "Yuki", "Sato"),
    (12, "Liam", "OConnor"),
]

# id, passenger, flight
BOOKINGS: List[Tuple[int, int, int]] = [
    (1, 1, 1), (2, 1, 2),
    (3, 2, 1), (4, 2, 3),
    (5, 4, 3), (6, 4, 4),
    (7, 5, 5), (8, 5, 6),
    (9, 6, 7), (10, 6, 8),
    (11, 7, 9), (12, 7, 10),
    (13, 8, 3), (14, 8, 7),
    (15, 3, 11), (16, 3, 12),
    (17, 9, 9),
    (18, 10, 4), (19, 10, 15),
    (20, 11, 11), (21, 11, 15),
    (22, 12, 13),
]

# booking -> onward booking
CONNECTIONS: Dict[int, int] = {
    1: 2,
    3: 4,
    5: 6,
    7: 8,
    9: 10,
    11: 12,
    13: 14,
    15: 16,
    18: 19,
    20: 21,
}


def _build_network(session: Session, base_time: datetime) -> Dict[str, int]:
    session.add_all([
        Airport(code=code, name=name, city=city, country=country, lat=lat, lng=lng, timezone=tz)
        for code, name, city, country, lat, lng, tz in AIRPORTS
    ])
    session.add_all([
        Aircraft(id=aid, tail_number=tail, model=model, capacity=capacity, current_airport_code=base)
        for aid, tail, model, capacity, base in AIRCRAFT
    ])
    session.add_all([
        Passenger(
            id=pid,
            first_name=first,
            last_name=last,
            email=f"{first.lower()}.{last.lower()}@email.com",
        )
        for pid, first, last in PASSENGERS
    ])
    session.flush()

    session.add_all([
        Flight(
            id=fid,
            flight_number=number,
            aircraft_id=aircraft_id,
            origin_code=origin,
            destination_code=dest,
            scheduled_dep=base_time + timedelta(hours=dep_h),
            scheduled_arr=base_time + timedelta(hours=arr_h),
        )
        for fid, number, aircraft_id, origin, dest, dep_h, arr_h in FLIGHTS
    ])
    session.flush()

    # Forward links are set once every booking row exists
    session.add_all([
        Booking(id=bid, passenger_id=pid, flight_id=fid)
        for bid, pid, fid in BOOKINGS
    ])
    session.flush()
    for bid, next_bid in CONNECTIONS.items():
        session.get(Booking, bid).next_booking_id = next_bid
    session.flush()

    return {
        "airports": len(AIRPORTS),
        "aircraft": len(AIRCRAFT),
        "flights": len(FLIGHTS),
        "passengers": len(PASSENGERS),
        "bookings": len(BOOKINGS),
        "connections": len(CONNECTIONS),
    }


def seed_network(
    session: Optional[Session] = None,
    base_time: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """
    Seed the demo network with flights scheduled relative to `base_time`.

    Skips seeding when airports already exist. Without a session, seeds in a
    transaction of its own.

    Returns:
        Counts of created rows, or None if the network was already seeded
    """
    if session is None:
        with session_scope() as owned:
            return seed_network(owned, base_time)

    if session.scalar(select(func.count(Airport.code))):
        logger.info("network_seed_skipped", reason="already_seeded")
        return None

    base = base_time or utc_now().replace(second=0, microsecond=0)
    counts = _build_network(session, base)
    SnapshotManager(NetworkStore(session)).initialize_flight_times()

    logger.info("network_seeded", base_time=base.isoformat(), **counts)
    return {"base_time": base.isoformat(), **counts}
