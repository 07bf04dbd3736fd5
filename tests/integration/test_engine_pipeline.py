"""
Engine Pipeline Tests
=====================

End-to-end behavior of the engine facade: every inbound operation
rebuilds store -> filter -> build -> highlight and publishes a new
snapshot.

AXIOM UNDER TEST:
=================
Published snapshots are replaced, never patched. Failed operations
change nothing.
"""

import pytest

from versiongraph.contracts.base import ErrorCode, LineageInvariantError
from versiongraph.contracts.events import (
    AuditEventType, GraphRebuilt, VersionLoadRequested, VersionsMerged,
)
from versiongraph.contracts.graph import CURRENT_STATE_ID, EdgeKind
from versiongraph.contracts.history import HistoryAction
from versiongraph.engine import EngineConfig, VersionGraphEngine, build_view
from versiongraph.fixtures import rubric_history_seed
from versiongraph.graph.builder import DisplayConfig
from versiongraph.history.filter import FilterCriteria
from versiongraph.interaction.bus import MessageBus
from versiongraph.interaction.selection import SelectionMode, SelectionState

from tests.fixtures import make_input


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture
def engine(bus):
    return VersionGraphEngine(bus=bus, history=rubric_history_seed())


def collect(bus, message_type):
    received = []
    bus.subscribe(message_type, received.append)
    return received


def edge_pairs(snapshot, kind):
    return {(e.source_id, e.target_id) for e in snapshot.edges_of_kind(kind)}


class TestInitialState:

    def test_seeded_snapshot(self, engine):
        snapshot = engine.snapshot
        assert len(snapshot.nodes) == 5
        assert snapshot.entry_count == 4
        assert edge_pairs(snapshot, EdgeKind.CURRENT) == {("v1.3-merge", CURRENT_STATE_ID)}

    def test_empty_engine(self):
        engine = VersionGraphEngine()
        assert [n.node_id for n in engine.snapshot.nodes] == [CURRENT_STATE_ID]
        assert engine.selection == SelectionState()

    def test_display_config_flows_through(self):
        config = EngineConfig(display=DisplayConfig(criteria_name="Tutor Rubric"))
        engine = VersionGraphEngine(config, history=rubric_history_seed())
        assert "Tutor Rubric" in engine.snapshot.current_node.display.new_value


class TestRecordEvent:

    def test_append_rebuilds(self, engine, bus):
        rebuilt = collect(bus, GraphRebuilt)
        before = engine.snapshot

        entry = engine.record_event(make_input("v1.4", parent_id="v1.3-merge", minutes=60))

        assert engine.history[-1] == entry
        assert engine.snapshot is not before
        assert len(before.nodes) == 5
        assert len(engine.snapshot.nodes) == 6
        assert engine.snapshot.node("v1.4").level == 3
        assert edge_pairs(engine.snapshot, EdgeKind.CURRENT) == {("v1.4", CURRENT_STATE_ID)}
        assert [m.reason for m in rebuilt] == ["record_event"]

    def test_invariant_violation_changes_nothing(self, engine):
        before = engine.snapshot

        with pytest.raises(LineageInvariantError):
            engine.record_event(make_input("orphan", parent_id="nowhere"))

        assert len(engine.history) == 4
        assert engine.snapshot is before
        errors = engine.observability.get_layer_log("history", AuditEventType.ERROR)
        assert len(errors) == 1
        assert errors[0].entity_id == "orphan"

    def test_current_state_id_cannot_be_recorded(self, engine):
        with pytest.raises(LineageInvariantError):
            engine.record_event(make_input(CURRENT_STATE_ID, parent_id="v1.3-merge"))

        ids = [n.node_id for n in engine.snapshot.nodes]
        assert len(ids) == len(set(ids))
        assert engine.topology().report().is_dag


class TestFiltering:

    def test_search(self, engine):
        snapshot = engine.set_filter(search_term="safety")

        ids = [n.node_id for n in snapshot.nodes if not n.is_synthetic]
        assert ids == ["v1.1-safety", "v1.3-merge"]
        assert snapshot.node("v1.1-safety").level == 0
        assert edge_pairs(snapshot, EdgeKind.LINEAGE) == {("v1.1-safety", "v1.3-merge")}
        assert edge_pairs(snapshot, EdgeKind.MERGE) == set()
        assert len(engine.history) == 4

    def test_latest_hidden_by_filter(self, engine):
        snapshot = engine.set_filter(action_filter="created")
        assert edge_pairs(snapshot, EdgeKind.CURRENT) == {("v1.0-created", CURRENT_STATE_ID)}

    def test_filter_matching_nothing(self, engine):
        snapshot = engine.set_filter(search_term="no such text")
        assert [n.node_id for n in snapshot.nodes] == [CURRENT_STATE_ID]
        assert snapshot.edges == ()

    def test_partial_updates(self, engine):
        engine.set_filter(search_term="dr.")
        engine.set_filter(action_filter="modified")
        assert engine.criteria == FilterCriteria(search_term="dr.", action_filter="modified")
        assert [e.id for e in engine.visible_history] == ["v1.2-communication"]

        engine.clear_search()
        assert engine.criteria.search_term == ""
        assert engine.criteria.action_value == "modified"

        engine.clear_filters()
        assert not engine.criteria.is_active
        assert len(engine.snapshot.nodes) == 5

    def test_invalid_action_keeps_criteria(self, engine):
        engine.set_filter(search_term="safety")
        with pytest.raises(ValueError):
            engine.set_filter(action_filter="deleted")
        assert engine.criteria.search_term == "safety"


class TestSelection:

    def test_focus_is_highlighted(self, engine):
        engine.select_node("v1.1-safety")
        assert engine.snapshot.node("v1.1-safety").is_focused
        assert engine.focused_entry().id == "v1.1-safety"

    def test_unknown_node(self, engine):
        with pytest.raises(KeyError):
            engine.select_node("nope")

    def test_current_state_click_clears_focus(self, engine):
        engine.select_node("v1.1-safety")
        engine.select_node(CURRENT_STATE_ID)
        assert engine.focused_entry() is None

    def test_selection_survives_filter(self, engine):
        engine.select_node("v1.2-communication", modifier_held=True)
        engine.set_filter(search_term="safety")
        assert engine.selection.multi_selected == ("v1.2-communication",)


class TestMerge:

    def test_merge_flow(self, engine, bus):
        merged = collect(bus, VersionsMerged)

        engine.toggle_merge_mode()
        engine.select_node("v1.2-communication")
        engine.select_node("v1.3-merge")
        assert engine.snapshot.node("v1.3-merge").is_merge_candidate
        assert [e.id for e in engine.merge_candidates()] == ["v1.2-communication", "v1.3-merge"]

        result = engine.confirm_merge()

        assert result.is_success
        entry = result.value
        assert entry.version == "v2.0"
        assert entry.action == HistoryAction.MERGED
        assert len(engine.history) == 5
        assert engine.selection.mode == SelectionMode.BROWSING
        assert engine.selection.merge_candidates == ()
        assert edge_pairs(engine.snapshot, EdgeKind.MERGE) == {
            ("v1.2-communication", "v1.3-merge"),
            ("v1.2-communication", entry.id),
            ("v1.3-merge", entry.id),
        }
        assert edge_pairs(engine.snapshot, EdgeKind.CURRENT) == {(entry.id, CURRENT_STATE_ID)}

        assert len(merged) == 1
        assert merged[0].merge_entry == entry
        assert [e.id for e in merged[0].merged_entries] == ["v1.2-communication", "v1.3-merge"]

    def test_rejected_merge_keeps_mode_and_candidates(self, engine, bus):
        merged = collect(bus, VersionsMerged)
        engine.toggle_merge_mode()
        engine.select_node("v1.2-communication")
        before = engine.snapshot

        result = engine.confirm_merge()

        assert result.is_failure
        assert result.error.code == ErrorCode.MERGE_REQUIRES_TWO_VERSIONS
        assert len(engine.history) == 4
        assert engine.selection.mode == SelectionMode.MERGE_SELECTING
        assert engine.selection.merge_candidates == ("v1.2-communication",)
        assert engine.snapshot is before
        assert merged == []

    def test_request_merge_outside_merge_mode(self, engine):
        result = engine.request_merge(["v1.0-created", "v1.2-communication"])
        assert result.is_success
        assert engine.selection.mode == SelectionMode.BROWSING

    def test_cancel_merge(self, engine):
        engine.toggle_merge_mode()
        engine.select_node("v1.2-communication")
        engine.cancel_merge()

        assert engine.selection == SelectionState()
        assert not any(n.is_merge_mode for n in engine.snapshot.nodes)

    def test_metrics(self, engine):
        engine.request_merge(["v1.2-communication"])
        engine.request_merge(["v1.2-communication", "v1.3-merge"])
        metrics = engine.observability.get_metrics()

        assert metrics.total("merges_total") == 1
        assert metrics.total("merge_validation_failures_total") == 1


class TestLoadVersion:

    def test_publishes_request(self, engine, bus):
        requests = collect(bus, VersionLoadRequested)
        version = engine.load_version("v1.1-safety")

        assert version.version == "v1.1"
        assert version.modifier == "Prof. Michael Chen"
        assert requests == [VersionLoadRequested(version=version)]
        assert len(engine.history) == 4

    def test_unknown_version(self, engine):
        with pytest.raises(KeyError):
            engine.load_version(CURRENT_STATE_ID)


class TestPurePipeline:

    def test_build_view_matches_engine(self, engine):
        engine.set_filter(search_term="dr.")
        engine.select_node("v1.0-created")

        expected = build_view(
            engine.history,
            engine.criteria,
            engine.selection,
            latest_id=engine.history[-1].id,
        )
        assert expected == engine.snapshot

    def test_reset_layout_republishes_equal_snapshot(self, engine, bus):
        rebuilt = collect(bus, GraphRebuilt)
        before = engine.snapshot
        after = engine.reset_layout()

        assert after == before
        assert after is not before
        assert rebuilt[-1].reason == "reset_layout"

    def test_topology(self, engine):
        report = engine.topology().report()
        assert report.is_dag
        assert report.lineage_is_forest
