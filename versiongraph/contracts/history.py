"""
History Contracts
=================

One recorded change to the evaluation rubric.

INVARIANTS:
- Entries are immutable once constructed
- parent_id declares single-parent lineage only
- Multi-parent (merge) lineage is never stored, it is reconstructed
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .base import utc


class HistoryAction(Enum):
    """Closed set of recorded rubric actions."""
    CREATED = "created"
    MODIFIED = "modified"
    MERGED = "merged"
    STAR = "star"
    UNSTARED = "unstared"


class ChangeType(Enum):
    """What part of the rubric an entry touched. Display-only."""
    CRITERIA_NAME = "criteria_name"
    CRITERIA_DESCRIPTION = "criteria_description"
    ADD_CRITERIA = "add_criteria"
    DELETE_CRITERIA = "delete_criteria"
    CHANGE_CATEGORY = "change_category"
    ADD_CATEGORY = "add_category"
    MERGE_VERSIONS = "merge_versions"


@dataclass(frozen=True)
class HistoryEntry:
    """
    A stored history entry.

    Only HistoryStore creates these; everything downstream reads them.
    """
    id: str
    timestamp: datetime
    modifier: str
    action: HistoryAction
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    comment: Optional[str] = None
    version: Optional[str] = None
    change_type: Optional[ChangeType] = None
    parent_id: Optional[str] = None
    summary: Optional[str] = None
    difference_summary: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("HistoryEntry id must be a non-empty string")
        if self.parent_id == self.id:
            raise ValueError(f"HistoryEntry {self.id} cannot be its own parent")
        object.__setattr__(self, 'timestamp', utc(self.timestamp))

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True)
class HistoryEntryInput:
    """
    What the rubric editor records.

    id and timestamp are optional; the store fills them in.
    """
    modifier: str
    action: HistoryAction
    id: Optional[str] = None
    timestamp: Optional[datetime] = None
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    comment: Optional[str] = None
    version: Optional[str] = None
    change_type: Optional[ChangeType] = None
    parent_id: Optional[str] = None
    summary: Optional[str] = None
    difference_summary: Optional[str] = None

    def to_entry(self, entry_id: str, timestamp: datetime) -> HistoryEntry:
        """Materialize with the assigned id and timestamp."""
        return HistoryEntry(
            id=entry_id,
            timestamp=timestamp,
            modifier=self.modifier,
            action=self.action,
            field=self.field,
            old_value=self.old_value,
            new_value=self.new_value,
            comment=self.comment,
            version=self.version,
            change_type=self.change_type,
            parent_id=self.parent_id,
            summary=self.summary,
            difference_summary=self.difference_summary,
        )



@dataclass(frozen=True)
class VersionData:
    """
    Payload handed to the rubric editor when a version is loaded.
    """
    version_id: str
    version: str
    timestamp: datetime
    modifier: str
    action: str
    field: Optional[str] = None
    comment: Optional[str] = None

    @staticmethod
    def from_entry(entry: HistoryEntry) -> VersionData:
        return VersionData(
            version_id=entry.id,
            version=entry.version or entry.id,
            timestamp=entry.timestamp,
            modifier=entry.modifier,
            action=entry.action.value,
            field=entry.field,
            comment=entry.comment,
        )
