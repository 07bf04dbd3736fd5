"""
Filter Engine
=============

Derives a filtered view of the history without touching the store.

INVARIANTS:
- Pure: same entries + same criteria -> same output
- Order-preserving
- Idempotent: apply(apply(e, f), f) == apply(e, f)
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple, Union

from ..contracts.history import HistoryAction, HistoryEntry


ALL_ACTIONS = "all"

ActionFilter = Union[str, HistoryAction]


def parse_action_filter(value: Optional[ActionFilter]) -> ActionFilter:
    """
    Normalize an action filter to ALL_ACTIONS or a HistoryAction.

    Raises ValueError for anything else.
    """
    if value is None or value == ALL_ACTIONS:
        return ALL_ACTIONS
    if isinstance(value, HistoryAction):
        return value
    try:
        return HistoryAction(value)
    except ValueError:
        valid = ", ".join([ALL_ACTIONS] + [a.value for a in HistoryAction])
        raise ValueError(f"Unknown action filter {value!r} (expected one of: {valid})")


@dataclass(frozen=True)
class FilterCriteria:
    """Search term plus action filter."""
    search_term: str = ""
    action_filter: ActionFilter = ALL_ACTIONS

    def __post_init__(self):
        object.__setattr__(self, 'action_filter', parse_action_filter(self.action_filter))
        object.__setattr__(self, 'search_term', self.search_term or "")

    @property
    def is_active(self) -> bool:
        return bool(self.search_term) or self.action_filter != ALL_ACTIONS

    @property
    def action_value(self) -> str:
        if isinstance(self.action_filter, HistoryAction):
            return self.action_filter.value
        return ALL_ACTIONS

    def with_search(self, term: str) -> FilterCriteria:
        return replace(self, search_term=term)

    def with_action(self, action: ActionFilter) -> FilterCriteria:
        return replace(self, action_filter=action)

    @staticmethod
    def cleared() -> FilterCriteria:
        return FilterCriteria()


class FilterEngine:
    """
    Substring search + action filter over history entries.

    Recomputed from scratch on every change; no incremental diffing.
    """

    def apply(
        self,
        entries: Iterable[HistoryEntry],
        criteria: FilterCriteria
    ) -> Tuple[HistoryEntry, ...]:
        term = criteria.search_term.lower()
        return tuple(
            e for e in entries
            if self._matches_search(e, term) and self._matches_action(e, criteria.action_filter)
        )

    @staticmethod
    def _matches_search(entry: HistoryEntry, term: str) -> bool:
        if not term:
            return True
        # Only modifier, field and comment are searchable
        for text in (entry.modifier, entry.field, entry.comment):
            if text and term in text.lower():
                return True
        return False

    @staticmethod
    def _matches_action(entry: HistoryEntry, action_filter: ActionFilter) -> bool:
        return action_filter == ALL_ACTIONS or entry.action == action_filter
