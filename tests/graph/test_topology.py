"""
Lineage Topology Tests

Structural queries over built snapshots. Ancestry follows declared
lineage only; reconstructed merge edges are never walked.
"""

import pytest

from versiongraph.contracts.graph import CURRENT_STATE_ID
from versiongraph.contracts.history import HistoryAction
from versiongraph.fixtures import individual_criteria_seed, rubric_history_seed
from versiongraph.graph.builder import GraphBuilder
from versiongraph.graph.topology import LineageTopology
from versiongraph.history.store import HistoryStore

from tests.fixtures import abc_store, make_input


@pytest.fixture
def topology():
    store = HistoryStore(rubric_history_seed())
    return LineageTopology(GraphBuilder().build(store.all(), store.latest().id))


class TestLineageTopology:

    def test_report(self, topology):
        report = topology.report()

        assert report.node_count == 5
        assert report.edge_count == 5
        assert report.is_dag is True
        assert report.lineage_is_forest is True
        assert report.root_count == 1
        assert report.component_count == 1

    def test_roots(self, topology):
        assert topology.roots() == ["v1.0-created"]

    def test_ancestors_ignore_merge_edges(self, topology):
        assert topology.ancestors("v1.3-merge") == {"v1.0-created", "v1.1-safety"}

    def test_descendants(self, topology):
        assert topology.descendants("v1.1-safety") == {"v1.3-merge"}
        assert topology.descendants("v1.2-communication") == set()

    def test_lineage_path(self, topology):
        assert topology.lineage_path("v1.3-merge") == ["v1.0-created", "v1.1-safety", "v1.3-merge"]
        assert topology.lineage_path("unknown") is None

    def test_merge_sources(self, topology):
        assert topology.merge_sources("v1.3-merge") == ["v1.2-communication"]
        assert topology.merge_sources("v1.1-safety") == []

    def test_current_state_is_last_in_topological_order(self, topology):
        assert topology.topological_order()[-1] == CURRENT_STATE_ID

    def test_unlinked_history_is_many_roots(self):
        store = HistoryStore(individual_criteria_seed())
        topology = LineageTopology(GraphBuilder().build(store.all()))

        assert len(topology.roots()) == 3
        assert topology.lineage_is_forest()
        # Only the last entry is joined to the current-state node
        assert topology.report().component_count == 3

    def test_merge_root_is_its_own_lineage_root(self):
        store = abc_store()
        store.append(make_input("M", action=HistoryAction.MERGED, minutes=5))
        topology = LineageTopology(GraphBuilder().build(store.all()))

        assert set(topology.roots()) == {"A", "M"}
        assert topology.ancestors("M") == set()
        assert sorted(topology.merge_sources("M")) == ["B", "C"]
        assert topology.is_dag()

    def test_empty_snapshot(self):
        topology = LineageTopology(GraphBuilder().build([]))
        assert topology.lineage_is_forest()
        assert topology.roots() == []
        assert topology.report().node_count == 1
