"""
Named disruption scenarios.

Each scenario hits one hub airport: every open departure is delayed by one
of three magnitudes picked at random, and every open arrival is held for
half of the smallest magnitude.

Scenarios:
- snowstorm_jfk: winter ground stop at New York JFK
- crew_strike_lhr: cabin crew industrial action at London Heathrow
- fog_cdg: low visibility operations at Paris CDG
- atc_failure_fra: radar outage at Frankfurt
- typhoon_hnd: typhoon approach at Tokyo Haneda
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

ARRIVAL_HOLD_SUFFIX = "(arrival hold)"


@dataclass(frozen=True)
class Scenario:
    """
    A hub disruption pattern.

    `delays` are the candidate departure delays in minutes; the first one
    also sets the arrival hold.
    """
    id: str
    label: str
    airport: str
    delays: Tuple[int, ...]
    cause: str

    @property
    def arrival_hold_minutes(self) -> int:
        return self.delays[0] // 2

    @property
    def arrival_hold_cause(self) -> str:
        return f"{self.cause} {ARRIVAL_HOLD_SUFFIX}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "airport": self.airport,
            "delays": list(self.delays),
            "cause": self.cause,
            "arrival_hold_minutes": self.arrival_hold_minutes,
        }


# =============================================================================
# SCENARIO CATALOG
# =============================================================================
# Delay triples are minutes. Departures draw uniformly from the triple.

SNOWSTORM_JFK = Scenario(
    id="snowstorm_jfk",
    label="Snowstorm at JFK",
    airport="JFK",
    delays=(120, 180, 240),
    cause="Heavy snowstorm - JFK ground stop",
)

CREW_STRIKE_LHR = Scenario(
    id="crew_strike_lhr",
    label="Crew Strike at LHR",
    airport="LHR",
    delays=(90, 150, 200),
    cause="Cabin crew industrial action - LHR",
)

FOG_CDG = Scenario(
    id="fog_cdg",
    label="Dense Fog at CDG",
    airport="CDG",
    delays=(60, 90, 120),
    cause="Dense fog - CDG low visibility operations",
)

ATC_FAILURE_FRA = Scenario(
    id="atc_failure_fra",
    label="ATC System Failure at FRA",
    airport="FRA",
    delays=(100, 140, 180),
    cause="ATC radar system failure - FRA ground stop",
)

TYPHOON_HND = Scenario(
    id="typhoon_hnd",
    label="Typhoon near HND",
    airport="HND",
    delays=(180, 240, 300),
    cause="Typhoon approach - HND departures suspended",
)


SCENARIOS: Dict[str, Scenario] = {
    s.id: s
    for s in (SNOWSTORM_JFK, CREW_STRIKE_LHR, FOG_CDG, ATC_FAILURE_FRA, TYPHOON_HND)
}


# Operational causes used by the random (non-scenario) trigger
RANDOM_CAUSES: Tuple[str, ...] = (
    "Weather delay",
    "ATC congestion",
    "Mechanical issue",
    "Crew availability",
    "Late incoming aircraft",
    "Security screening delay",
    "Gate conflict",
    "Baggage handling delay",
)


def get_scenario(scenario_id: str) -> Optional[Scenario]:
    """Get a scenario by ID."""
    return SCENARIOS.get(scenario_id)


def list_scenarios() -> List[Dict[str, Any]]:
    """List all available scenarios with metadata."""
    return [s.to_dict() for s in SCENARIOS.values()]
