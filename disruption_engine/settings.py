# disruption_engine/settings.py
"""
Engine settings.
"""

import os
from dataclasses import dataclass
from typing import Optional

# Load .env file
from dotenv import load_dotenv
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


@dataclass
class Settings:
    """Engine configuration."""

    # Database
    database_url: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./var/disruption_engine.db"
    )

    # Propagation rules
    min_turnaround_minutes: int = int(os.getenv("MIN_TURNAROUND_MINUTES", "45"))
    min_connection_minutes: int = int(os.getenv("MIN_CONNECTION_MINUTES", "30"))
    max_cascade_depth: int = int(os.getenv("MAX_CASCADE_DEPTH", "20"))
    # "arrival" searches the next rotation leg from the new arrival,
    # "departure" from the new departure.
    rotation_anchor: str = os.getenv("ROTATION_ANCHOR", "departure")

    # Lifecycle
    boarding_window_minutes: int = int(os.getenv("BOARDING_WINDOW_MINUTES", "30"))

    # Rebooking
    rebooking_candidates: int = int(os.getenv("REBOOKING_CANDIDATES", "3"))

    # Random chaos
    random_delay_min: int = int(os.getenv("RANDOM_DELAY_MIN", "15"))
    random_delay_max: int = int(os.getenv("RANDOM_DELAY_MAX", "180"))
    simulation_seed: Optional[int] = _env_optional_int("SIMULATION_SEED")

    # Snapshots
    auto_snapshot: bool = _env_bool("AUTO_SNAPSHOT", "true")

    # Scheduler
    scheduler_enabled: bool = _env_bool("SCHEDULER_ENABLED", "false")
    lifecycle_tick_seconds: float = float(os.getenv("LIFECYCLE_TICK_SECONDS", "10"))
    chaos_interval_seconds: float = float(os.getenv("CHAOS_INTERVAL_SECONDS", "60"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API settings
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    allowed_origins: str = os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:8000"
    )


# Global settings instance
settings = Settings()
