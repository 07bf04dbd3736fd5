"""
Shared Test Fixtures

Factories for history inputs and small, hand-checkable stores.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence, Tuple

from versiongraph.contracts.history import HistoryAction, HistoryEntryInput
from versiongraph.history.store import HistoryStore

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def make_input(
    entry_id: str,
    parent_id: Optional[str] = None,
    action: HistoryAction = HistoryAction.MODIFIED,
    minutes: int = 0,
    modifier: str = "Tester",
    field: Optional[str] = None,
    comment: Optional[str] = None,
    version: Optional[str] = None,
) -> HistoryEntryInput:
    """Factory for test history inputs."""
    return HistoryEntryInput(
        id=entry_id,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        modifier=modifier,
        action=action,
        field=field,
        comment=comment,
        version=version,
        parent_id=parent_id,
    )


def build_store(specs: Sequence[Tuple[str, Optional[str]]]) -> HistoryStore:
    """Store from (id, parent_id) pairs, appended in order."""
    store = HistoryStore()
    for minutes, (entry_id, parent_id) in enumerate(specs):
        action = HistoryAction.CREATED if parent_id is None else HistoryAction.MODIFIED
        store.append(make_input(entry_id, parent_id, action=action, minutes=minutes))
    return store


def abc_store() -> HistoryStore:
    """A (root) with two children B and C, appended in that order."""
    return build_store([("A", None), ("B", "A"), ("C", "A")])
