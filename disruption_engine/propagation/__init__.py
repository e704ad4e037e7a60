# Propagation module - recursive delay cascade
from .engine import PropagationEngine, turnaround_cause
from .models import CascadeResult, DisruptionEvent

__all__ = [
    "PropagationEngine",
    "turnaround_cause",
    "CascadeResult",
    "DisruptionEvent",
]
