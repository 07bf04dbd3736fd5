"""
Merge Operation
===============

Turns a multi-selection into a new `merged` history entry.

GUARANTEES:
- All-or-nothing: a failed validation appends nothing
- The merge entry has no parent_id and becomes a new root; its incoming
  edges are reconstructed by the graph builder, never stored
- Validation failures are returned as Error values, not raised
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
import re
from typing import Iterable, List, Optional, Sequence

from ..contracts.base import Error, ErrorCode, Result, generate_entry_id
from ..contracts.history import ChangeType, HistoryAction, HistoryEntry, HistoryEntryInput
from ..history.store import HistoryStore


MIN_MERGE_CANDIDATES = 2

_MAJOR_VERSION = re.compile(r'^\s*[vV]?(\d+)')


@dataclass
class MergeConfig:
    """Who merges, and how missing version labels are counted."""
    modifier: str = "User"
    default_major_version: int = 1


def major_version(label: Optional[str], default: int = 1) -> int:
    """
    Leading integer of a version label: 'v1.3' -> 1, 'v12' -> 12.
    Missing or unparseable labels count as `default`.
    """
    if not label:
        return default
    match = _MAJOR_VERSION.match(label)
    if not match:
        return default
    return int(match.group(1))


def next_merge_version(entries: Sequence[HistoryEntry], default: int = 1) -> str:
    """One major version above the highest among `entries`."""
    highest = max(major_version(e.version, default) for e in entries)
    return f"v{highest + 1}.0"


class MergeOperation:
    """
    Validates merge candidates and appends the merge entry.
    """

    def __init__(self, store: HistoryStore, config: Optional[MergeConfig] = None):
        self._store = store
        self._config = config or MergeConfig()

    def validate(self, candidate_ids: Iterable[str]) -> Result:
        """
        Resolve candidates to stored entries.

        Returns Result with the tuple of entries, or the validation Error.
        """
        unique: List[str] = list(dict.fromkeys(candidate_ids))

        if len(unique) < MIN_MERGE_CANDIDATES:
            return Result.failure(Error(
                code=ErrorCode.MERGE_REQUIRES_TWO_VERSIONS,
                message="At least two versions are required to merge",
                context=(("selected", str(len(unique))),),
            ))

        missing = [cid for cid in unique if cid not in self._store]
        if missing:
            return Result.failure(Error(
                code=ErrorCode.UNKNOWN_VERSION,
                message=f"Cannot merge unknown versions: {', '.join(missing)}",
                context=tuple(("missing", cid) for cid in missing),
            ))

        return Result.success(tuple(self._store.get(cid) for cid in unique))

    def confirm(self, candidate_ids: Iterable[str]) -> Result:
        """
        Validate and append.

        Returns Result with the new HistoryEntry, or the validation Error.
        """
        validation = self.validate(candidate_ids)
        if validation.is_failure:
            return validation

        selected = validation.value
        merge_input = self._compose(selected)
        return Result.success(self._store.append(merge_input))

    def _compose(self, selected: Sequence[HistoryEntry]) -> HistoryEntryInput:
        count = len(selected)
        labels = ", ".join(e.version or "unknown" for e in selected)
        timestamp = datetime.now(timezone.utc)

        return HistoryEntryInput(
            id=generate_entry_id(
                "merge",
                len(self._store) + 1,
                timestamp.isoformat(),
                *(e.id for e in selected)
            ),
            timestamp=timestamp,
            modifier=self._config.modifier,
            action=HistoryAction.MERGED,
            field="Version Merge",
            old_value=f"Selected {count} versions",
            new_value=f"Merged {count} versions into new version",
            comment=f"{self._config.modifier} merged {count} selected versions: {labels}",
            version=next_merge_version(selected, self._config.default_major_version),
            change_type=ChangeType.MERGE_VERSIONS,
            # No parent_id: the merge entry is a new root
            summary=(
                f"Merged version combining {count} selected versions "
                f"into a unified evaluation framework"
            ),
            difference_summary=(
                f"Combined features and criteria from {count} different versions "
                f"into a comprehensive evaluation system"
            ),
        )
