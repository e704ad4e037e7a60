# disruption_engine/propagation/models.py
"""
Propagation results.

A DisruptionEvent is the caller-facing view of one disruption log entry;
a CascadeResult collects every event produced by one root trigger.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from ..network.models import DisruptionLogEntry, Flight


@dataclass
class DisruptionEvent:
    """One delay applied to one flight, ready to be published by the caller."""
    log_id: int
    flight_id: int
    flight_number: str
    origin_code: str
    destination_code: str
    delay_minutes: int
    cause: Optional[str]
    cascaded_from_flight_id: Optional[int]
    passengers_impacted: int
    flights_impacted: int
    depth: int
    created_at: datetime

    @property
    def cascaded(self) -> bool:
        return self.cascaded_from_flight_id is not None

    @classmethod
    def from_log(cls, entry: DisruptionLogEntry, flight: Flight) -> "DisruptionEvent":
        return cls(
            log_id=entry.id,
            flight_id=flight.id,
            flight_number=flight.flight_number,
            origin_code=flight.origin_code,
            destination_code=flight.destination_code,
            delay_minutes=entry.delay_minutes,
            cause=entry.cause,
            cascaded_from_flight_id=entry.cascaded_from_flight_id,
            passengers_impacted=entry.passengers_impacted,
            flights_impacted=entry.flights_impacted,
            depth=entry.depth,
            created_at=entry.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.log_id,
            "flight_id": self.flight_id,
            "flight_number": self.flight_number,
            "origin_code": self.origin_code,
            "destination_code": self.destination_code,
            "delay_minutes": self.delay_minutes,
            "cause": self.cause,
            "cascaded": self.cascaded,
            "cascaded_from_flight_id": self.cascaded_from_flight_id,
            "passengers_impacted": self.passengers_impacted,
            "flights_impacted": self.flights_impacted,
            "depth": self.depth,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class CascadeResult:
    """Blast radius of one root delay trigger."""
    root_flight_id: int
    root_delay_minutes: int
    cause: Optional[str]
    events: List[DisruptionEvent] = field(default_factory=list)
    depth_limit_hits: int = 0

    @property
    def flights_delayed(self) -> Set[int]:
        return {e.flight_id for e in self.events}

    @property
    def passengers_impacted(self) -> int:
        return sum(e.passengers_impacted for e in self.events)

    @property
    def max_depth(self) -> int:
        return max((e.depth for e in self.events), default=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root_flight_id": self.root_flight_id,
            "root_delay_minutes": self.root_delay_minutes,
            "cause": self.cause,
            "flights_delayed": sorted(self.flights_delayed),
            "passengers_impacted": self.passengers_impacted,
            "max_depth": self.max_depth,
            "depth_limit_hits": self.depth_limit_hits,
            "events": [e.to_dict() for e in self.events],
        }
