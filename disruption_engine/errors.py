# disruption_engine/errors.py
"""
Engine error hierarchy.

NotFound, InvalidScenario and InvalidDelay are raised before any mutation.
StorageFailure wraps a persistence error after the unit of work has been
rolled back. A cascade hitting the depth limit is not an error.
"""

from typing import Any


class EngineError(Exception):
    """Base exception for disruption engine errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(EngineError):
    """Raised when a flight, aircraft, booking, passenger or snapshot id is unknown."""

    def __init__(self, kind: str, key: Any):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class InvalidScenario(EngineError):
    """Raised when a scenario id is not in the catalog."""

    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(f"Unknown scenario: {scenario_id}")


class InvalidDelay(EngineError):
    """Raised for a negative delay."""

    def __init__(self, delay_minutes: int):
        self.delay_minutes = delay_minutes
        super().__init__(f"Delay must be non-negative, got {delay_minutes}")


class RebookingRejected(EngineError):
    """Raised when a rebooking cannot be accepted."""
    pass


class StorageFailure(EngineError):
    """Raised when the store fails during an operation; nothing was committed."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage failure during {operation}: {cause}")
