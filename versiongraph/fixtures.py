"""
Seed Rubric History
===================

Sample history for the overall evaluation framework: a root, two
branches off it, and a system merge. Used by the demo server, the CLI
and the tests.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import List

from .contracts.history import ChangeType, HistoryAction, HistoryEntryInput


def _at(year: int, month: int, day: int, hour: int, minute: int) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def rubric_history_seed() -> List[HistoryEntryInput]:
    """Branching history of the overall evaluation criteria."""
    return [
        HistoryEntryInput(
            id="v1.0-created",
            timestamp=_at(2024, 1, 15, 10, 30),
            modifier="Dr. Sarah Johnson",
            action=HistoryAction.CREATED,
            field="Evaluation Framework",
            new_value="Initial child development evaluation framework with 18 criteria",
            comment="Created comprehensive evaluation framework for child development AI responses",
            version="v1.0",
            change_type=ChangeType.ADD_CRITERIA,
            difference_summary="+18 Evaluation criteria",
        ),
        HistoryEntryInput(
            id="v1.1-safety",
            timestamp=_at(2024, 1, 20, 14, 15),
            modifier="Prof. Michael Chen",
            action=HistoryAction.MODIFIED,
            field="Safety Guidelines",
            old_value="Basic safety protocols",
            new_value="Enhanced safety protocols with emergency procedures and risk assessment",
            comment="Updated safety guidelines to include comprehensive emergency response procedures",
            version="v1.1",
            change_type=ChangeType.CRITERIA_DESCRIPTION,
            parent_id="v1.0-created",
            difference_summary="Modified Safety description",
        ),
        HistoryEntryInput(
            id="v1.2-communication",
            timestamp=_at(2024, 2, 1, 9, 45),
            modifier="Dr. Emily Rodriguez",
            action=HistoryAction.MODIFIED,
            field="Communication Standards",
            old_value="Standard communication protocols",
            new_value="Multilingual communication protocols with cultural sensitivity and accessibility",
            comment="Enhanced communication standards to support diverse populations",
            version="v1.2",
            change_type=ChangeType.CRITERIA_DESCRIPTION,
            parent_id="v1.0-created",
            difference_summary="+1 Communication criteria",
        ),
        HistoryEntryInput(
            id="v1.3-merge",
            timestamp=_at(2024, 2, 10, 16, 20),
            modifier="System",
            action=HistoryAction.MERGED,
            field="Version Merge",
            old_value="Separate safety and communication branches",
            new_value="Merged safety and communication features into main branch",
            comment="Merged safety and communication branches into unified framework",
            version="v1.3",
            change_type=ChangeType.MERGE_VERSIONS,
            # Primary predecessor only; the communication branch is reconstructed
            parent_id="v1.1-safety",
            difference_summary="Merged Safety + Communication branches",
        ),
    ]


def individual_criteria_seed() -> List[HistoryEntryInput]:
    """Unlinked history of a single criterion: every entry is its own root."""
    return [
        HistoryEntryInput(
            id="criteria-1-created",
            timestamp=_at(2024, 1, 15, 10, 30),
            modifier="Dr. Sarah Johnson",
            action=HistoryAction.CREATED,
            field="Theory Application",
            new_value="Theoretical Accuracy & Application",
            comment="Created new criteria for theoretical application assessment",
            version="v1.0",
            difference_summary="+1 Theory Application criteria",
        ),
        HistoryEntryInput(
            id="criteria-1-modified",
            timestamp=_at(2024, 1, 20, 14, 15),
            modifier="Prof. Michael Chen",
            action=HistoryAction.MODIFIED,
            field="Description",
            old_value="Basic theoretical application",
            new_value="Comprehensive theoretical application with practical examples",
            comment="Enhanced description to include practical application examples",
            version="v1.1",
            difference_summary="Modified Theory Application description",
        ),
        HistoryEntryInput(
            id="criteria-1-category-change",
            timestamp=_at(2024, 2, 1, 9, 45),
            modifier="Dr. Emily Rodriguez",
            action=HistoryAction.MODIFIED,
            field="Category",
            old_value="Theory Application",
            new_value="Practical Application",
            comment="Moved criteria to practical application category for better alignment",
            version="v1.2",
            difference_summary="Changed Theory → Practical Application category",
        ),
    ]
