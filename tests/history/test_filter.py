"""
Filter Engine Tests

The filter derives a view and never touches the store.
"""

from dataclasses import replace

import pytest

from versiongraph.contracts.history import HistoryAction
from versiongraph.history.filter import (
    ALL_ACTIONS, FilterCriteria, FilterEngine, parse_action_filter,
)
from versiongraph.history.store import HistoryStore

from tests.fixtures import make_input


@pytest.fixture
def entries():
    store = HistoryStore()
    store.append(make_input("a", action=HistoryAction.CREATED, modifier="Dr. Sarah Johnson",
                            field="Evaluation Framework", comment="Initial framework"))
    store.append(make_input("b", parent_id="a", modifier="Prof. Michael Chen",
                            field="Safety Guidelines", comment="Emergency procedures"))
    store.append(make_input("c", parent_id="a", modifier="Dr. Emily Rodriguez",
                            field="Communication", comment="Diverse populations"))
    store.append(make_input("d", action=HistoryAction.STAR, modifier="Reviewer",
                            field=None, comment=None))
    return store.all()


class TestFilterEngine:

    def test_empty_criteria_returns_everything(self, entries):
        assert FilterEngine().apply(entries, FilterCriteria()) == entries

    def test_search_is_case_insensitive_substring(self, entries):
        result = FilterEngine().apply(entries, FilterCriteria(search_term="SAFETY"))
        assert [e.id for e in result] == ["b"]

    def test_search_covers_modifier_field_and_comment(self, entries):
        engine = FilterEngine()
        assert [e.id for e in engine.apply(entries, FilterCriteria(search_term="emily"))] == ["c"]
        assert [e.id for e in engine.apply(entries, FilterCriteria(search_term="framework"))] == ["a"]
        assert [e.id for e in engine.apply(entries, FilterCriteria(search_term="populations"))] == ["c"]

    def test_values_are_not_searched(self):
        store = HistoryStore()
        store.append(make_input("x", modifier="Ann", field="Scope"))
        entry_with_value = replace(store.get("x"), new_value="hidden text")

        result = FilterEngine().apply([entry_with_value], FilterCriteria(search_term="hidden"))
        assert result == ()

    def test_action_filter(self, entries):
        result = FilterEngine().apply(entries, FilterCriteria(action_filter="modified"))
        assert [e.id for e in result] == ["b", "c"]

    def test_search_and_action_are_combined(self, entries):
        criteria = FilterCriteria(search_term="dr.", action_filter=HistoryAction.MODIFIED)
        result = FilterEngine().apply(entries, criteria)
        assert [e.id for e in result] == ["c"]

    def test_missing_fields_do_not_match(self, entries):
        result = FilterEngine().apply(entries, FilterCriteria(search_term="reviewer"))
        assert [e.id for e in result] == ["d"]

    def test_order_is_preserved(self, entries):
        result = FilterEngine().apply(entries, FilterCriteria(search_term="r"))
        positions = [entries.index(e) for e in result]
        assert positions == sorted(positions)

    def test_idempotent(self, entries):
        engine = FilterEngine()
        criteria = FilterCriteria(search_term="o", action_filter="modified")
        once = engine.apply(entries, criteria)
        assert engine.apply(once, criteria) == once


class TestFilterCriteria:

    def test_string_action_is_normalized(self):
        assert FilterCriteria(action_filter="merged").action_filter == HistoryAction.MERGED
        assert FilterCriteria(action_filter="merged").action_value == "merged"

    def test_unknown_action_raises(self):
        with pytest.raises(ValueError):
            FilterCriteria(action_filter="deleted")
        with pytest.raises(ValueError):
            parse_action_filter("bogus")

    def test_none_means_all(self):
        assert parse_action_filter(None) == ALL_ACTIONS
        assert FilterCriteria(search_term=None).search_term == ""

    def test_is_active(self):
        assert not FilterCriteria().is_active
        assert FilterCriteria(search_term="x").is_active
        assert FilterCriteria(action_filter="star").is_active
        assert not FilterCriteria(search_term="x").cleared().is_active

    def test_with_helpers_return_new_criteria(self):
        base = FilterCriteria()
        changed = base.with_search("abc").with_action("created")
        assert base.search_term == ""
        assert changed.search_term == "abc"
        assert changed.action_filter == HistoryAction.CREATED
