"""
Scenario orchestrator.

Applies a named hub scenario, or one random disruption, by calling the
propagation engine once per affected flight. The runner does not own a
transaction: the caller wraps a whole scenario in one unit of work so the
batch is applied atomically.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from disruption_engine.errors import InvalidScenario
from disruption_engine.logging import get_logger
from disruption_engine.network.models import NON_TERMINAL_STATUSES
from disruption_engine.propagation import CascadeResult, DisruptionEvent, PropagationEngine

from .scenarios import RANDOM_CAUSES, Scenario, get_scenario

logger = get_logger(__name__)


@dataclass
class ScenarioRunResult:
    """Every cascade started by one scenario application."""
    scenario: Scenario
    departure_cascades: List[CascadeResult] = field(default_factory=list)
    arrival_cascades: List[CascadeResult] = field(default_factory=list)

    @property
    def cascades(self) -> List[CascadeResult]:
        return self.departure_cascades + self.arrival_cascades

    @property
    def events(self) -> List[DisruptionEvent]:
        return [e for c in self.cascades for e in c.events]

    @property
    def flights_affected(self) -> int:
        return len(self.cascades)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario": self.scenario.to_dict(),
            "flights_affected": self.flights_affected,
            "details": [
                {
                    "flight_id": c.root_flight_id,
                    "delay": c.root_delay_minutes,
                    "cause": c.cause,
                    "cascade_size": len(c.events),
                }
                for c in self.cascades
            ],
        }


class ScenarioRunner:
    """
    Batch caller of the propagation engine.

    Args:
        engine: Propagation engine bound to the caller's session
        rng: Random source; pass a seeded random.Random for reproducible runs
        random_delay_min: Smallest delay of the random trigger (minutes)
        random_delay_max: Largest delay of the random trigger (minutes)
    """

    def __init__(
        self,
        engine: PropagationEngine,
        rng: Optional[random.Random] = None,
        random_delay_min: int = 15,
        random_delay_max: int = 180,
    ):
        self.engine = engine
        self.store = engine.store
        self.rng = rng or random.Random()
        self.random_delay_min = random_delay_min
        self.random_delay_max = random_delay_max

    def apply_scenario(self, scenario_id: str) -> ScenarioRunResult:
        """
        Delay every open departure from the scenario airport, then hold every
        open arrival into it.

        Raises:
            InvalidScenario: scenario_id is not in the catalog
        """
        scenario = get_scenario(scenario_id)
        if scenario is None:
            raise InvalidScenario(scenario_id)

        result = ScenarioRunResult(scenario=scenario)

        departures = self.store.flights_departing(scenario.airport, NON_TERMINAL_STATUSES)
        for flight in departures:
            delay = self.rng.choice(scenario.delays)
            result.departure_cascades.append(
                self.engine.propagate(flight.id, delay, scenario.cause)
            )

        # Queried after the departures so flights already delayed are skipped
        arrivals = self.store.flights_arriving(scenario.airport, NON_TERMINAL_STATUSES)
        for flight in arrivals:
            result.arrival_cascades.append(
                self.engine.propagate(
                    flight.id,
                    scenario.arrival_hold_minutes,
                    scenario.arrival_hold_cause,
                )
            )

        logger.info(
            "scenario_applied",
            scenario_id=scenario.id,
            airport=scenario.airport,
            departures=len(result.departure_cascades),
            arrivals=len(result.arrival_cascades),
            events=len(result.events),
        )
        return result

    def trigger_random(self) -> Optional[CascadeResult]:
        """
        Delay one open flight picked uniformly across the network.

        Returns None when no flight is open.
        """
        candidates = self.store.flights_with_status(NON_TERMINAL_STATUSES)
        if not candidates:
            logger.info("random_trigger_skipped", reason="no_open_flights")
            return None

        flight = self.rng.choice(candidates)
        delay = self.rng.randint(self.random_delay_min, self.random_delay_max)
        cause = self.rng.choice(RANDOM_CAUSES)

        logger.info(
            "random_trigger",
            flight_id=flight.id,
            flight_number=flight.flight_number,
            delay_minutes=delay,
            cause=cause,
        )
        return self.engine.propagate(flight.id, delay, cause)
