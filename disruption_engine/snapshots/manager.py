# disruption_engine/snapshots/manager.py
"""
Snapshot and reset management.

Snapshots are write-once captures of the network (flights, broken
connections, aggregate metrics, booking states) used for replay. Reset puts
every flight back on schedule, every booking back to CONFIRMED and empties
the disruption log; it never touches snapshots.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, text

from ..clock import utc_now
from ..logging import get_logger
from ..network.models import (
    Booking,
    BookingStatus,
    Flight,
    FlightStatus,
    SimulationSnapshot,
)
from ..network.store import NetworkStore

logger = get_logger(__name__)

# Unit costs for the disruption cost estimate
HOTEL_VOUCHER = 150
REBOOKING_FEE = 200
CREW_OVERTIME_PER_HOUR = 85
CREW_PER_FLIGHT = 6
DELAY_COST_PER_MINUTE = 75

DEFAULT_SNAPSHOT_LABEL = "Manual Snapshot"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class SnapshotManager:
    """Metrics, world state, snapshots and reset over one store."""

    def __init__(self, store: NetworkStore):
        self.store = store

    @property
    def session(self):
        return self.store.session

    # ============================================================
    # READ MODELS
    # ============================================================

    def compute_metrics(self) -> Dict[str, int]:
        """Aggregate disruption counters."""
        self.session.flush()

        def scalar(sql: str) -> int:
            return int(self.session.execute(text(sql)).scalar() or 0)

        return {
            "delayed_flights": scalar(
                "SELECT COUNT(*) FROM flights WHERE status = 'DELAYED'"
            ),
            "missed_connections": scalar(
                "SELECT COUNT(*) FROM bookings WHERE status = 'MISSED_CONNECTION'"
            ),
            "total_delay_minutes": scalar(
                "SELECT COALESCE(SUM(delay_minutes), 0) FROM flights WHERE status = 'DELAYED'"
            ),
            "impacted_passengers": scalar(
                "SELECT COUNT(DISTINCT passenger_id) FROM bookings "
                "WHERE status = 'MISSED_CONNECTION'"
            ),
            "active_flights": scalar(
                "SELECT COUNT(*) FROM flights WHERE status NOT IN ('LANDED', 'CANCELLED')"
            ),
            "total_flights": scalar("SELECT COUNT(*) FROM flights"),
        }

    def missed_connections(self) -> List[Dict[str, Any]]:
        """Every MISSED_CONNECTION booking with both legs described."""
        rows = []
        for booking in self.store.missed_connection_bookings():
            inbound = booking.flight
            onward = booking.next_booking.flight if booking.next_booking else None
            rows.append({
                "booking_id": booking.id,
                "passenger_id": booking.passenger_id,
                "passenger_name": booking.passenger.full_name,
                "email": booking.passenger.email,
                "from_flight": inbound.flight_number,
                "from_origin": inbound.origin_code,
                "from_dest": inbound.destination_code,
                "arriving_at": _iso(inbound.effective_arr),
                "missed_flight": onward.flight_number if onward else None,
                "missed_origin": onward.origin_code if onward else None,
                "missed_dest": onward.destination_code if onward else None,
                "missed_dep": _iso(onward.effective_dep) if onward else None,
                "connection_airport": inbound.destination_code,
            })
        return rows

    def world_state(self, log_limit: int = 50) -> Dict[str, Any]:
        """Current flights, broken connections, metrics and recent log."""
        return {
            "airports": [a.to_dict() for a in self.store.list_airports()],
            "flights": [f.to_dict() for f in self.store.list_flights()],
            "missed_connections": self.missed_connections(),
            "metrics": self.compute_metrics(),
            "disruption_log": [e.to_dict() for e in self.store.recent_log(log_limit)],
        }

    def estimate_costs(self) -> Dict[str, Any]:
        """Rough financial impact of the current disruptions."""
        metrics = self.compute_metrics()
        stranded = metrics["impacted_passengers"]
        delay_minutes = metrics["total_delay_minutes"]
        delay_hours = delay_minutes / 60

        hotel = stranded * HOTEL_VOUCHER
        rebooking = stranded * REBOOKING_FEE
        crew = round(delay_hours * CREW_PER_FLIGHT * CREW_OVERTIME_PER_HOUR)
        operational = delay_minutes * DELAY_COST_PER_MINUTE

        return {
            "total_cost": hotel + rebooking + crew + operational,
            "breakdown": {
                "hotel_vouchers": {"count": stranded, "unit_cost": HOTEL_VOUCHER, "total": hotel},
                "rebooking_fees": {"count": stranded, "unit_cost": REBOOKING_FEE, "total": rebooking},
                "crew_overtime": {
                    "hours": round(delay_hours, 1),
                    "crew_per_flight": CREW_PER_FLIGHT,
                    "rate": CREW_OVERTIME_PER_HOUR,
                    "total": crew,
                },
                "operational": {
                    "delay_minutes": delay_minutes,
                    "rate_per_min": DELAY_COST_PER_MINUTE,
                    "total": operational,
                },
            },
            "stranded_passengers": stranded,
            "delayed_flights": metrics["delayed_flights"],
        }

    # ============================================================
    # SNAPSHOTS
    # ============================================================

    def save_snapshot(
        self,
        label: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> SimulationSnapshot:
        """Capture the current network under `label`."""
        snapshot = SimulationSnapshot(
            label=label or DEFAULT_SNAPSHOT_LABEL,
            flights_data=[f.to_dict() for f in self.store.list_flights()],
            missed_connections_data=self.missed_connections(),
            metrics=self.compute_metrics(),
            booking_states={
                str(b.id): b.status.value for b in self.store.list_bookings()
            },
            created_at=created_at or utc_now(),
        )
        self.session.add(snapshot)
        self.session.flush()

        logger.info("snapshot_saved", snapshot_id=snapshot.id, label=snapshot.label)
        return snapshot

    def list_snapshots(self, limit: int = 100) -> List[Dict[str, Any]]:
        stmt = (
            select(SimulationSnapshot)
            .order_by(SimulationSnapshot.created_at.desc(), SimulationSnapshot.id.desc())
            .limit(limit)
        )
        return [s.summary() for s in self.session.scalars(stmt)]

    def load_snapshot(self, snapshot_id: int) -> Dict[str, Any]:
        return self.store.get_snapshot(snapshot_id).to_dict()

    def restore_snapshot(self, snapshot_id: int) -> SimulationSnapshot:
        """
        Put flights and bookings back to the captured state.

        Flights or bookings created after the snapshot keep their current
        state; the disruption log is left as is.
        """
        snapshot = self.store.get_snapshot(snapshot_id)

        for data in snapshot.flights_data:
            flight = self.session.get(Flight, data["id"])
            if flight is None:
                logger.warning("snapshot_flight_missing", snapshot_id=snapshot_id, flight_id=data["id"])
                continue
            flight.actual_dep = _parse(data.get("actual_dep"))
            flight.actual_arr = _parse(data.get("actual_arr"))
            flight.delay_minutes = data.get("delay_minutes") or 0
            flight.status = FlightStatus(data["status"])

        for booking_id, status in (snapshot.booking_states or {}).items():
            booking = self.session.get(Booking, int(booking_id))
            if booking is None:
                continue
            booking.status = BookingStatus(status)

        self.session.flush()
        logger.info("snapshot_restored", snapshot_id=snapshot_id, label=snapshot.label)
        return snapshot

    # ============================================================
    # RESET
    # ============================================================

    def initialize_flight_times(self) -> int:
        """Copy scheduled times into actual times where they are unset."""
        self.session.flush()
        result = self.session.execute(text("""
            UPDATE flights
            SET actual_dep = scheduled_dep,
                actual_arr = scheduled_arr
            WHERE actual_dep IS NULL
        """))
        self.session.expire_all()
        return result.rowcount or 0

    def reset(self) -> None:
        """Everything back on schedule; log emptied; snapshots kept."""
        self.session.flush()
        self.session.execute(text("""
            UPDATE flights
            SET actual_dep = scheduled_dep,
                actual_arr = scheduled_arr,
                delay_minutes = 0,
                status = 'SCHEDULED'
        """))
        self.session.execute(text("UPDATE bookings SET status = 'CONFIRMED'"))
        self.session.execute(text("DELETE FROM disruption_log"))
        # ORM objects loaded earlier in this session are now stale
        self.session.expire_all()
        logger.info("simulation_reset")
