# Rebooking module - alternatives for missed connections
from .matcher import RebookingMatcher, RebookingSuggestion

__all__ = ["RebookingMatcher", "RebookingSuggestion"]
