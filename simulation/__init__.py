# simulation/__init__.py
"""
Simulation module for the Disruption Propagation & Recovery Engine.

Two parts:

1. DISRUPTION SCENARIOS (scenarios/, runner.py)
   - Named hub disruptions (snowstorm, crew strike, fog, ATC failure, typhoon)
   - Random chaos: one open flight, random delay and cause
   - Randomness comes from an injected random.Random so runs are repeatable

2. DEMO NETWORK (seeders.py)
   - 12 hub airports, 8 aircraft, 15 legs, 12 passengers, 22 bookings
   - Schedules are relative to a base time

Usage:
    from simulation import ScenarioRunner
    runner = ScenarioRunner(engine, rng=random.Random(7))
    result = runner.apply_scenario("snowstorm_jfk")

    from simulation import seed_network
    seed_network(session)
"""

from .runner import ScenarioRunner, ScenarioRunResult
from .scenarios import SCENARIOS, RANDOM_CAUSES, Scenario, get_scenario, list_scenarios
from .seeders import seed_network

__all__ = [
    "ScenarioRunner",
    "ScenarioRunResult",
    "SCENARIOS",
    "RANDOM_CAUSES",
    "Scenario",
    "get_scenario",
    "list_scenarios",
    "seed_network",
]
