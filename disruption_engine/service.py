# disruption_engine/service.py
"""
Disruption service: the serialized boundary around the engine.

Every public operation takes one re-entrant lock and runs in exactly one
database transaction. A cascade, a scenario loop or a reset is therefore
applied atomically, and readers never see a half-applied cascade. Scheduler
ticks call the same methods, so they queue behind an in-flight trigger.

Mutating operations return a TriggerOutcome carrying the per-flight
disruption events and the refreshed world state; publishing them is up to
the caller.
"""

import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Generator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .clock import utc_now
from .db import get_session_factory
from .errors import StorageFailure
from .lifecycle import FlightLifecycle
from .logging import get_logger
from .network.store import NetworkStore
from .propagation import DisruptionEvent, PropagationEngine
from .rebooking import RebookingMatcher
from .settings import Settings, settings as default_settings
from .snapshots import SnapshotManager

logger = get_logger(__name__)

DEFAULT_CAUSE = "Manual delay trigger"
CHAOS_SNAPSHOT_LABEL = "Auto Chaos (cron)"


@dataclass
class TriggerOutcome:
    """What a mutating operation hands back to its caller."""
    events: List[DisruptionEvent] = field(default_factory=list)
    world_state: Dict[str, Any] = field(default_factory=dict)
    snapshot_id: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def triggered(self) -> bool:
        return bool(self.events)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": True,
            "triggered": self.triggered,
            "events": [e.to_dict() for e in self.events],
            "snapshot_id": self.snapshot_id,
            "world_state": self.world_state,
        }
        data.update(self.extra)
        return data


class DisruptionService:
    """
    Engine entry point used by the HTTP layer and the scheduler.

    Args:
        session_factory: Session factory; defaults to the process-wide one
        settings: Engine settings
        rng: Random source for scenarios and random triggers
        clock: Source of "now" for the lifecycle, rebooking and log timestamps
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or default_settings
        self.session_factory = session_factory or get_session_factory()
        self.rng = rng or random.Random(self.settings.simulation_seed)
        self.clock = clock or utc_now
        self._lock = threading.RLock()

    # ============================================================
    # UNIT OF WORK
    # ============================================================

    @contextmanager
    def _unit_of_work(self, operation: str) -> Generator[Session, None, None]:
        """
        Serialize and wrap one top-level operation in a transaction.

        Persistence errors roll everything back and surface as StorageFailure.
        Engine errors roll back and propagate unchanged.
        """
        with self._lock:
            session = self.session_factory()
            try:
                yield session
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("storage_failure", operation=operation, error=str(e))
                raise StorageFailure(operation, e) from e
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def _propagation(self, store: NetworkStore) -> PropagationEngine:
        return PropagationEngine.from_settings(store, self.settings, clock=self.clock)

    def _runner(self, store: NetworkStore):
        # Imported here: the simulation package depends on this one
        from simulation.runner import ScenarioRunner

        return ScenarioRunner(
            self._propagation(store),
            rng=self.rng,
            random_delay_min=self.settings.random_delay_min,
            random_delay_max=self.settings.random_delay_max,
        )

    def _finish(
        self,
        store: NetworkStore,
        events: List[DisruptionEvent],
        snapshot_label: Optional[str] = None,
        **extra,
    ) -> TriggerOutcome:
        manager = SnapshotManager(store)
        snapshot_id = None
        if snapshot_label and self.settings.auto_snapshot:
            snapshot_id = manager.save_snapshot(snapshot_label, created_at=self.clock()).id
        return TriggerOutcome(
            events=events,
            world_state=manager.world_state(),
            snapshot_id=snapshot_id,
            extra=extra,
        )

    # ============================================================
    # TRIGGERS
    # ============================================================

    def trigger_delay(
        self,
        flight_id: Optional[int] = None,
        delay_minutes: Optional[int] = None,
        cause: Optional[str] = None,
    ) -> TriggerOutcome:
        """
        Delay one flight and cascade. Without both a flight and a delay, a
        random open flight is delayed instead.

        Raises:
            NotFound: flight_id is unknown
            InvalidDelay: delay_minutes is negative
            StorageFailure: persistence failed; nothing was applied
        """
        if flight_id is None or delay_minutes is None:
            return self.trigger_random(snapshot_label=f"Manual Delay: {cause or 'Random'}")

        cause = cause or DEFAULT_CAUSE
        with self._unit_of_work("trigger_delay") as session:
            store = NetworkStore(session)
            result = self._propagation(store).propagate(flight_id, delay_minutes, cause)
            return self._finish(
                store,
                result.events,
                snapshot_label=f"Manual Delay: {cause}",
                cascade=result.to_dict(),
            )

    def trigger_random(self, snapshot_label: str = CHAOS_SNAPSHOT_LABEL) -> TriggerOutcome:
        """Delay one random open flight. No-op when nothing is open."""
        with self._unit_of_work("trigger_random") as session:
            store = NetworkStore(session)
            result = self._runner(store).trigger_random()
            if result is None:
                return self._finish(store, [], mode="random")
            return self._finish(
                store,
                result.events,
                snapshot_label=snapshot_label,
                mode="random",
                cascade=result.to_dict(),
            )

    def trigger_scenario(self, scenario_id: str) -> TriggerOutcome:
        """
        Apply a named hub scenario as one atomic batch.

        Raises:
            InvalidScenario: scenario_id is not in the catalog
            StorageFailure: persistence failed; nothing was applied
        """
        with self._unit_of_work("trigger_scenario") as session:
            store = NetworkStore(session)
            run = self._runner(store).apply_scenario(scenario_id)
            return self._finish(
                store,
                run.events,
                snapshot_label=f"Scenario: {run.scenario.label}",
                **run.to_dict(),
            )

    def reset_simulation(self) -> TriggerOutcome:
        with self._unit_of_work("reset_simulation") as session:
            store = NetworkStore(session)
            SnapshotManager(store).reset()
            return self._finish(store, [])

    def advance_lifecycle(self) -> TriggerOutcome:
        """Move every flight whose time has come one status forward."""
        with self._unit_of_work("advance_lifecycle") as session:
            store = NetworkStore(session)
            lifecycle = FlightLifecycle(store, self.settings.boarding_window_minutes)
            transitions = lifecycle.advance(self.clock())
            return self._finish(
                store,
                [],
                transitions=[t.to_dict() for t in transitions],
            )

    # ============================================================
    # READS
    # ============================================================

    def get_world_state(self) -> Dict[str, Any]:
        with self._unit_of_work("get_world_state") as session:
            return SnapshotManager(NetworkStore(session)).world_state()

    def list_disruptions(self, limit: int = 50) -> List[Dict[str, Any]]:
        with self._unit_of_work("list_disruptions") as session:
            return [e.to_dict() for e in NetworkStore(session).recent_log(limit)]

    def suggest_rebookings(self) -> List[Dict[str, Any]]:
        with self._unit_of_work("suggest_rebookings") as session:
            matcher = RebookingMatcher(
                NetworkStore(session),
                max_candidates=self.settings.rebooking_candidates,
            )
            return [s.to_dict() for s in matcher.suggest(self.clock())]

    def estimate_costs(self) -> Dict[str, Any]:
        with self._unit_of_work("estimate_costs") as session:
            return SnapshotManager(NetworkStore(session)).estimate_costs()

    # ============================================================
    # SNAPSHOTS
    # ============================================================

    def save_snapshot(self, label: Optional[str] = None) -> Dict[str, Any]:
        with self._unit_of_work("save_snapshot") as session:
            snapshot = SnapshotManager(NetworkStore(session)).save_snapshot(
                label, created_at=self.clock()
            )
            return snapshot.summary()

    def list_snapshots(self, limit: int = 100) -> List[Dict[str, Any]]:
        with self._unit_of_work("list_snapshots") as session:
            return SnapshotManager(NetworkStore(session)).list_snapshots(limit)

    def load_snapshot(self, snapshot_id: int) -> Dict[str, Any]:
        with self._unit_of_work("load_snapshot") as session:
            return SnapshotManager(NetworkStore(session)).load_snapshot(snapshot_id)

    def restore_snapshot(self, snapshot_id: int) -> TriggerOutcome:
        with self._unit_of_work("restore_snapshot") as session:
            store = NetworkStore(session)
            snapshot = SnapshotManager(store).restore_snapshot(snapshot_id)
            return self._finish(store, [], restored=snapshot.summary())

    # ============================================================
    # REBOOKING / SEED
    # ============================================================

    def accept_rebooking(self, booking_id: int, flight_id: int) -> TriggerOutcome:
        with self._unit_of_work("accept_rebooking") as session:
            store = NetworkStore(session)
            matcher = RebookingMatcher(store, max_candidates=self.settings.rebooking_candidates)
            booking = matcher.accept(booking_id, flight_id, self.clock())
            return self._finish(store, [], booking=booking.to_dict())

    def seed_demo_network(self, base_time: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """Load the demo network; None when one is already present."""
        from simulation.seeders import seed_network

        with self._unit_of_work("seed_demo_network") as session:
            return seed_network(session, base_time or self.clock())


_service: Optional[DisruptionService] = None
_service_lock = threading.Lock()


def get_service() -> DisruptionService:
    """Process-wide service; used as a FastAPI dependency."""
    global _service
    with _service_lock:
        if _service is None:
            _service = DisruptionService()
        return _service
