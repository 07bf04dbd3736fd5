"""
Shared Contract Types

Error values, the success/failure Result wrapper, the lineage
exception and UTC time helpers used by every layer of the engine.

RULES:
======
- Everything here is a frozen dataclass or a pure function
- A rejected user action is an Error value inside a Result
- A broken lineage invariant is a LineageInvariantError, raised
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Optional, Tuple
import hashlib


# =============================================================================
# ERRORS
# =============================================================================

class ErrorCode(Enum):
    """Codes for failures the user can see and recover from."""
    MERGE_REQUIRES_TWO_VERSIONS = auto()
    UNKNOWN_VERSION = auto()
    STRUCTURAL_INCONSISTENCY = auto()


@dataclass(frozen=True)
class Error:
    """
    A failure carried as data.

    context holds (key, value) pairs such as the offending ids.
    """
    code: ErrorCode
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: Tuple[Tuple[str, str], ...] = ()


# A failed merge confirmation is reported as a ValidationError value.
ValidationError = Error


@dataclass(frozen=True)
class Result:
    """Holds exactly one of value or error."""
    value: Optional[object] = None
    error: Optional[Error] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @staticmethod
    def success(value: object) -> Result:
        return Result(value=value)

    @staticmethod
    def failure(error: Error) -> Result:
        return Result(error=error)


class LineageInvariantError(ValueError):
    """
    Raised when a caller breaks the history lineage invariants
    (duplicate id, forward or dangling parent reference).

    This is a bug in entry construction, never user input.
    """

    def __init__(self, message: str, entry_id: Optional[str] = None,
                 parent_id: Optional[str] = None):
        super().__init__(message)
        self.entry_id = entry_id
        self.parent_id = parent_id


# =============================================================================
# TIME
# =============================================================================

def utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware datetimes are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Timestamp:
    """UTC instant used by audit entries and metric points."""
    value: datetime

    def __post_init__(self):
        object.__setattr__(self, 'value', utc(self.value))

    @staticmethod
    def now() -> Timestamp:
        return Timestamp(datetime.now(timezone.utc))

    def to_iso(self) -> str:
        return self.value.isoformat()


@dataclass(frozen=True)
class TimeRange:
    """Closed interval [start, end] for log and metric queries."""
    start: Timestamp
    end: Timestamp

    def __post_init__(self):
        if self.end.value < self.start.value:
            raise ValueError("TimeRange end precedes start")

    def contains(self, timestamp: Timestamp) -> bool:
        return self.start.value <= timestamp.value <= self.end.value


# =============================================================================
# IDENTITY
# =============================================================================

def generate_entry_id(prefix: str, *parts: object) -> str:
    """Deterministic id from seed parts: '<prefix>_<12 hex>'."""
    seed = "|".join(str(p) for p in parts)
    digest = hashlib.sha256(seed.encode('utf-8')).hexdigest()[:12]
    return f"{prefix}_{digest}"
