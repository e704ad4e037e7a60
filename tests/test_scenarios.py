# tests/test_scenarios.py
"""
Test the scenario orchestrator.

Verifies the hub scenarios, the random trigger, and that a seeded random
source makes both reproducible.
"""

import random

import pytest

from disruption_engine.errors import InvalidScenario
from disruption_engine.network.models import FlightStatus
from disruption_engine.propagation import PropagationEngine
from simulation.runner import ScenarioRunner
from simulation.scenarios import (
    ARRIVAL_HOLD_SUFFIX,
    RANDOM_CAUSES,
    SCENARIOS,
    get_scenario,
    list_scenarios,
)

from conftest import at


def _runner(store, clock, seed: int = 7) -> ScenarioRunner:
    return ScenarioRunner(PropagationEngine(store, clock=clock), rng=random.Random(seed))


def _jfk_hub(network):
    """Three departures from JFK and two arrivals into it, each on its own aircraft."""
    departures = [
        network.flight("JFK", "LHR", at(1), at(8), aircraft=network.aircraft()),
        network.flight("JFK", "CDG", at(2), at(9), aircraft=network.aircraft()),
        network.flight("JFK", "LAX", at(3), at(9), aircraft=network.aircraft()),
    ]
    arrivals = [
        network.flight("ORD", "JFK", at(1), at(3), aircraft=network.aircraft()),
        network.flight("LHR", "JFK", at(2), at(9), aircraft=network.aircraft()),
    ]
    return departures, arrivals


class TestScenarioCatalog:
    """Tests for the scenario definitions."""

    def test_five_scenarios(self):
        assert set(SCENARIOS) == {
            "snowstorm_jfk",
            "crew_strike_lhr",
            "fog_cdg",
            "atc_failure_fra",
            "typhoon_hnd",
        }
        assert len(list_scenarios()) == 5

    def test_each_scenario_has_three_delays(self):
        for scenario in SCENARIOS.values():
            assert len(scenario.delays) == 3
            assert scenario.arrival_hold_minutes == scenario.delays[0] // 2

    def test_snowstorm_definition(self):
        scenario = get_scenario("snowstorm_jfk")

        assert scenario.airport == "JFK"
        assert scenario.delays == (120, 180, 240)
        assert scenario.arrival_hold_minutes == 60
        assert scenario.arrival_hold_cause.endswith(ARRIVAL_HOLD_SUFFIX)

    def test_unknown_scenario_lookup(self):
        assert get_scenario("volcano_kef") is None


class TestApplyScenario:
    """Tests for applying a hub scenario."""

    def test_snowstorm_delays_departures_and_holds_arrivals(self, network, store, clock):
        departures, arrivals = _jfk_hub(network)

        result = _runner(store, clock).apply_scenario("snowstorm_jfk")

        for flight in departures:
            assert flight.status == FlightStatus.DELAYED
            assert flight.delay_minutes in {120, 180, 240}
        for flight in arrivals:
            assert flight.status == FlightStatus.DELAYED
            assert flight.delay_minutes == 60

        hold_entries = [e for e in store.log_entries() if e.flight_id in {f.id for f in arrivals}]
        assert len(hold_entries) == 2
        assert all(e.cause.endswith("(arrival hold)") for e in hold_entries)
        assert result.flights_affected == 5

    def test_departure_delays_follow_the_seed(self, network, store, clock):
        departures, _ = _jfk_hub(network)
        expected_rng = random.Random(3)
        expected = [expected_rng.choice((120, 180, 240)) for _ in departures]

        _runner(store, clock, seed=3).apply_scenario("snowstorm_jfk")

        assert [f.delay_minutes for f in departures] == expected

    def test_closed_flights_untouched(self, network, store, clock):
        landed = network.flight("JFK", "LHR", at(-8), at(-1), status=FlightStatus.LANDED)
        cancelled = network.flight("ORD", "JFK", at(1), at(3), status=FlightStatus.CANCELLED)

        result = _runner(store, clock).apply_scenario("snowstorm_jfk")

        assert landed.delay_minutes == 0
        assert cancelled.delay_minutes == 0
        assert result.flights_affected == 0

    def test_delayed_departure_not_held_again(self, network, store, clock):
        """Arrivals are queried after departures, so a JFK->JFK leg is delayed once."""
        loop = network.flight("JFK", "JFK", at(1), at(2), aircraft=network.aircraft())

        _runner(store, clock).apply_scenario("snowstorm_jfk")

        assert loop.delay_minutes in {120, 180, 240}
        assert len(store.log_entries()) == 1

    def test_unknown_scenario_rejected_before_mutation(self, network, store, clock):
        departures, _ = _jfk_hub(network)

        with pytest.raises(InvalidScenario):
            _runner(store, clock).apply_scenario("volcano_kef")

        assert all(f.delay_minutes == 0 for f in departures)
        assert store.log_entries() == []

    def test_result_payload(self, network, store, clock):
        _jfk_hub(network)

        data = _runner(store, clock).apply_scenario("snowstorm_jfk").to_dict()

        assert data["scenario"]["id"] == "snowstorm_jfk"
        assert data["flights_affected"] == 5
        assert len(data["details"]) == 5


class TestRandomTrigger:
    """Tests for the random (non-scenario) trigger."""

    def test_seeded_choice(self, network, store, clock):
        flights = [
            network.flight("JFK", "LHR", at(h), at(h + 7), aircraft=network.aircraft())
            for h in range(1, 5)
        ]
        expected_rng = random.Random(5)
        expected_flight = expected_rng.choice(flights)
        expected_delay = expected_rng.randint(15, 180)
        expected_cause = expected_rng.choice(RANDOM_CAUSES)

        result = _runner(store, clock, seed=5).trigger_random()

        assert result.root_flight_id == expected_flight.id
        assert result.root_delay_minutes == expected_delay
        assert result.cause == expected_cause
        assert 15 <= result.root_delay_minutes <= 180

    def test_only_open_flights_are_candidates(self, network, store, clock):
        network.flight("JFK", "LHR", at(-8), at(-1), status=FlightStatus.LANDED)
        network.flight("JFK", "CDG", at(1), at(8), status=FlightStatus.DELAYED)
        network.flight("JFK", "FRA", at(1), at(8), status=FlightStatus.CANCELLED)
        open_flight = network.flight("JFK", "ORD", at(1), at(3))

        for seed in range(5):
            result = _runner(store, clock, seed=seed).trigger_random()
            assert result.root_flight_id == open_flight.id
            # The flight is DELAYED now; reopen it for the next draw
            open_flight.status = FlightStatus.SCHEDULED
            store.session.flush()

    def test_no_open_flights_is_a_no_op(self, network, store, clock):
        network.flight("JFK", "LHR", at(-8), at(-1), status=FlightStatus.LANDED)

        assert _runner(store, clock).trigger_random() is None
        assert store.log_entries() == []


class TestScenarioService:
    """Tests for scenarios through the service boundary."""

    def test_scenario_takes_snapshot(self, network, service):
        _jfk_hub(network)
        network.commit()

        outcome = service.trigger_scenario("snowstorm_jfk")

        assert len(outcome.events) == 5
        assert outcome.snapshot_id is not None
        snapshot = service.load_snapshot(outcome.snapshot_id)
        assert snapshot["label"] == "Scenario: Snowstorm at JFK"
        assert outcome.world_state["metrics"]["delayed_flights"] == 5

    def test_invalid_scenario_through_service(self, service):
        with pytest.raises(InvalidScenario):
            service.trigger_scenario("volcano_kef")
        assert service.list_snapshots() == []
