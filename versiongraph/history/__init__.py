"""
History Layer
=============

Append-only rubric history and the filtered views derived from it.

Modules:
- store: Append-only entry storage (source of truth for lineage)
- filter: Search term + action filtering
"""

from .store import HistoryStore
from .filter import FilterEngine, FilterCriteria, ALL_ACTIONS, parse_action_filter

__all__ = [
    'HistoryStore',
    'FilterEngine',
    'FilterCriteria',
    'ALL_ACTIONS',
    'parse_action_filter',
]
