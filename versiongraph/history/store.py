"""
History Store
=============

Append-only storage of rubric history entries.

INVARIANTS:
- No updates or deletes - append only
- Entry ids are unique for the lifetime of the store
- The current-state id belongs to the synthetic graph node, never to an entry
- parent_id must reference an entry that is already stored
- Declared lineage therefore forms a forest (by induction over appends)

This is the SOURCE OF TRUTH for lineage.
Graphs are DERIVED from this store, never stored separately.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..contracts.base import (
    Error, ErrorCode, LineageInvariantError, generate_entry_id,
)
from ..contracts.graph import CURRENT_STATE_ID
from ..contracts.history import HistoryEntry, HistoryEntryInput


class HistoryStore:
    """
    Append-only history log.

    GUARANTEES:
    ===========
    1. NO updates - entries are immutable once written
    2. NO deletes - the store only grows
    3. NO forward references - a parent is always appended first
    4. Insertion order is preserved and is what latest() reports

    EXPLICIT FAILURE STATES:
    - LineageInvariantError on duplicate id or unknown parent
    """

    def __init__(self, entries: Optional[Iterable[HistoryEntryInput]] = None):
        # Internal storage (append-only list)
        self._entries: List[HistoryEntry] = []

        # Indices (derived, not authoritative)
        self._index: Dict[str, HistoryEntry] = {}
        self._children: Dict[str, List[str]] = {}

        if entries:
            self.extend(entries)

    def append(self, entry: HistoryEntryInput) -> HistoryEntry:
        """
        Append an entry.

        This is the ONLY write operation.
        Returns the stored entry (with assigned id and timestamp).
        """
        timestamp = entry.timestamp or datetime.now(timezone.utc)
        entry_id = entry.id or self._generate_id(entry, timestamp)

        if entry_id == CURRENT_STATE_ID:
            raise LineageInvariantError(
                f"History entry id {entry_id!r} is reserved for the current-state node",
                entry_id=entry_id,
            )
        if entry_id in self._index:
            raise LineageInvariantError(
                f"History entry id {entry_id!r} already exists",
                entry_id=entry_id,
            )
        if entry.parent_id is not None and entry.parent_id not in self._index:
            raise LineageInvariantError(
                f"History entry {entry_id!r} references unknown parent {entry.parent_id!r}",
                entry_id=entry_id,
                parent_id=entry.parent_id,
            )

        stored = entry.to_entry(entry_id, timestamp)

        # Append (this is the only mutation)
        self._entries.append(stored)
        self._index[stored.id] = stored
        if stored.parent_id is not None:
            self._children.setdefault(stored.parent_id, []).append(stored.id)

        return stored

    def extend(self, entries: Iterable[HistoryEntryInput]) -> Tuple[HistoryEntry, ...]:
        """Append several entries in order. Stops at the first violation."""
        return tuple(self.append(e) for e in entries)

    def _generate_id(self, entry: HistoryEntryInput, timestamp: datetime) -> str:
        # Sequence position keeps ids unique even for identical content.
        return generate_entry_id(
            "entry",
            len(self._entries) + 1,
            timestamp.isoformat(),
            entry.modifier,
            entry.action.value,
        )

    def all(self) -> Tuple[HistoryEntry, ...]:
        """Entries in insertion order (immutable snapshot)."""
        return tuple(self._entries)

    def latest(self) -> Optional[HistoryEntry]:
        """Most recently appended entry, regardless of lineage depth."""
        if not self._entries:
            return None
        return self._entries[-1]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        return self._index.get(entry_id)

    def children_of(self, entry_id: str) -> Tuple[HistoryEntry, ...]:
        return tuple(self._index[cid] for cid in self._children.get(entry_id, ()))

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._index

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def verify_lineage(self) -> Tuple[bool, Optional[Error]]:
        """
        Walk every parent chain back to its root.

        Returns (is_valid, error) tuple.
        Holds by construction; this is for audits of externally seeded data.
        """
        for entry in self._entries:
            seen = {entry.id}
            current = entry
            while current.parent_id is not None:
                parent = self._index.get(current.parent_id)
                if parent is None:
                    return (False, Error(
                        code=ErrorCode.STRUCTURAL_INCONSISTENCY,
                        message=f"Dangling parent reference from {current.id}",
                        context=(("parent_id", current.parent_id),),
                    ))
                if parent.id in seen:
                    return (False, Error(
                        code=ErrorCode.STRUCTURAL_INCONSISTENCY,
                        message=f"Lineage cycle through {parent.id}",
                        context=(("entry_id", entry.id),),
                    ))
                seen.add(parent.id)
                current = parent

        return (True, None)
