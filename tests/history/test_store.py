"""
History Store Tests
===================

INVARIANTS TESTED:
1. Append-only: entries never change, the store only grows
2. parent_id must reference an already stored entry
3. latest() is the last appended entry, not the deepest one
4. Generated ids are unique even for identical content
"""

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from versiongraph.contracts.base import LineageInvariantError
from versiongraph.contracts.history import HistoryAction, HistoryEntryInput
from versiongraph.history.store import HistoryStore

from tests.fixtures import abc_store, build_store, make_input


class TestAppend:

    def test_append_preserves_insertion_order(self):
        store = abc_store()
        assert [e.id for e in store.all()] == ["A", "B", "C"]
        assert len(store) == 3

    def test_unknown_parent_is_rejected(self):
        """A dangling parent reference never reaches the store."""
        store = abc_store()

        with pytest.raises(LineageInvariantError) as exc:
            store.append(make_input("X", parent_id="missing"))

        assert exc.value.entry_id == "X"
        assert exc.value.parent_id == "missing"
        assert len(store) == 3
        assert "X" not in store

    def test_lineage_error_is_a_value_error(self):
        store = HistoryStore()
        with pytest.raises(ValueError):
            store.append(make_input("X", parent_id="nope"))

    def test_duplicate_id_is_rejected(self):
        store = abc_store()
        with pytest.raises(LineageInvariantError):
            store.append(make_input("B", parent_id="A"))
        assert len(store) == 3

    def test_current_state_id_is_reserved(self):
        """The synthetic current-state id can never name a stored entry."""
        store = abc_store()

        with pytest.raises(LineageInvariantError) as exc:
            store.append(make_input("current-state", parent_id="C"))

        assert exc.value.entry_id == "current-state"
        assert len(store) == 3
        assert "current-state" not in store

    def test_forward_reference_is_rejected(self):
        """A parent appended later cannot be referenced earlier."""
        store = HistoryStore()
        with pytest.raises(LineageInvariantError):
            store.append(make_input("child", parent_id="parent"))
        store.append(make_input("parent"))
        assert [e.id for e in store.all()] == ["parent"]

    def test_generated_ids_are_unique_for_identical_content(self):
        store = HistoryStore()
        stamp = datetime(2024, 3, 1, tzinfo=timezone.utc)
        first = store.append(HistoryEntryInput(
            modifier="Ann", action=HistoryAction.MODIFIED, timestamp=stamp
        ))
        second = store.append(HistoryEntryInput(
            modifier="Ann", action=HistoryAction.MODIFIED, timestamp=stamp
        ))

        assert first.id != second.id
        assert first.id.startswith("entry_")

    def test_missing_timestamp_is_assigned(self):
        store = HistoryStore()
        before = datetime.now(timezone.utc)
        entry = store.append(HistoryEntryInput(modifier="Ann", action=HistoryAction.CREATED))

        assert entry.timestamp >= before
        assert entry.timestamp.tzinfo is not None

    def test_naive_timestamp_is_treated_as_utc(self):
        store = HistoryStore()
        entry = store.append(HistoryEntryInput(
            modifier="Ann", action=HistoryAction.CREATED,
            timestamp=datetime(2024, 1, 1, 12, 0),
        ))
        assert entry.timestamp.utcoffset() == timedelta(0)

    def test_extend_stops_at_first_violation(self):
        store = HistoryStore()
        with pytest.raises(LineageInvariantError):
            store.extend([
                make_input("A"),
                make_input("B", parent_id="Z"),
                make_input("C", parent_id="A"),
            ])
        assert [e.id for e in store.all()] == ["A"]


class TestImmutability:

    def test_entries_are_frozen(self):
        entry = abc_store().get("A")
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.comment = "changed"

    def test_all_is_a_snapshot(self):
        """A tuple handed out earlier does not see later appends."""
        store = abc_store()
        before = store.all()
        store.append(make_input("D", parent_id="C"))

        assert len(before) == 3
        assert len(store.all()) == 4

    def test_entry_cannot_be_its_own_parent(self):
        with pytest.raises(ValueError):
            make_input("A", parent_id="A").to_entry("A", datetime.now(timezone.utc))


class TestQueries:

    def test_latest_is_last_appended_not_deepest(self):
        store = build_store([("A", None), ("B", "A"), ("D", "B"), ("C", "A")])
        assert store.latest().id == "C"

    def test_latest_of_empty_store(self):
        assert HistoryStore().latest() is None

    def test_children_of_keeps_append_order(self):
        store = abc_store()
        assert [e.id for e in store.children_of("A")] == ["B", "C"]
        assert store.children_of("B") == ()

    def test_get_unknown_returns_none(self):
        assert abc_store().get("nope") is None

    def test_verify_lineage(self):
        valid, error = abc_store().verify_lineage()
        assert valid is True
        assert error is None
