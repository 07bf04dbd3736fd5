"""
Engine Orchestration Module

Single entry point for the host UI. Coordinates the layers while keeping
them independent.

DESIGN PRINCIPLES:
==================
1. The history store is the only durable state; the filter criteria and
   the selection controller hold view state
2. Every change rebuilds top to bottom: store -> filter -> build -> highlight
3. Published snapshots are never patched; a new one replaces the old
4. All operations are traceable through observability
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
import time

from .contracts.base import LineageInvariantError, Result
from .contracts.events import (
    AuditEventType, GraphRebuilt, VersionLoadRequested, VersionsMerged,
)
from .contracts.graph import CURRENT_STATE_ID, GraphSnapshot
from .contracts.history import HistoryEntry, HistoryEntryInput, VersionData
from .graph.builder import DisplayConfig, GraphBuilder
from .graph.layout import LayoutConfig
from .graph.topology import LineageTopology
from .history.filter import ActionFilter, FilterCriteria, FilterEngine
from .history.store import HistoryStore
from .interaction.bus import MessageBus
from .interaction.merge import MergeConfig, MergeOperation
from .interaction.selection import SelectionController, SelectionState, highlight
from .observability import ObservabilityConfig, ObservabilityEngine


@dataclass
class EngineConfig:
    """Unified configuration for the version graph engine."""
    layout: LayoutConfig = None
    display: DisplayConfig = None
    merge: MergeConfig = None
    observability: ObservabilityConfig = None

    def __post_init__(self):
        self.layout = self.layout or LayoutConfig()
        self.display = self.display or DisplayConfig()
        self.merge = self.merge or MergeConfig()
        self.observability = self.observability or ObservabilityConfig()


def build_view(
    entries: Iterable[HistoryEntry],
    criteria: FilterCriteria,
    selection: SelectionState,
    latest_id: Optional[str] = None,
    config: Optional[EngineConfig] = None
) -> GraphSnapshot:
    """
    Pure pipeline: filter -> build -> highlight.

    Same inputs -> equal snapshot.
    """
    config = config or EngineConfig()
    visible = FilterEngine().apply(entries, criteria)
    snapshot = GraphBuilder(config.layout, config.display).build(visible, latest_id)
    return highlight(snapshot, selection)


class VersionGraphEngine:
    """
    Version Graph Engine.

    INBOUND (host UI -> engine):
      record_event, request_merge, confirm_merge, set_filter, clear_search,
      clear_filters, select_node, toggle_merge_mode, cancel_merge,
      load_version, reset_layout

    OUTBOUND (engine -> rendering surface):
      snapshot, selection; plus GraphRebuilt / VersionsMerged /
      VersionLoadRequested on the message bus
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        bus: Optional[MessageBus] = None,
        history: Optional[Iterable[HistoryEntryInput]] = None
    ):
        self._config = config or EngineConfig()
        self._bus = bus or MessageBus()
        self._observability = ObservabilityEngine(self._config.observability)

        self._store = HistoryStore()
        self._filter = FilterEngine()
        self._selection = SelectionController()
        self._merge = MergeOperation(self._store, self._config.merge)
        self._criteria = FilterCriteria()

        if history:
            for entry_input in history:
                self._append(entry_input)

        self._snapshot = self._rebuild("init")

    # =========================================================================
    # OUTBOUND
    # =========================================================================

    @property
    def snapshot(self) -> GraphSnapshot:
        """Latest published snapshot."""
        return self._snapshot

    @property
    def selection(self) -> SelectionState:
        return self._selection.state

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return self._store.all()

    @property
    def visible_history(self) -> Tuple[HistoryEntry, ...]:
        return self._filter.apply(self._store.all(), self._criteria)

    @property
    def store(self) -> HistoryStore:
        return self._store

    @property
    def bus(self) -> MessageBus:
        return self._bus

    @property
    def observability(self) -> ObservabilityEngine:
        return self._observability

    def topology(self) -> LineageTopology:
        return LineageTopology(self._snapshot)

    def focused_entry(self) -> Optional[HistoryEntry]:
        """Entry shown in the detail panel, if any."""
        focused = self._selection.state.focused_node_id
        return self._store.get(focused) if focused else None

    # =========================================================================
    # INBOUND: HISTORY
    # =========================================================================

    def record_event(self, entry_input: HistoryEntryInput) -> HistoryEntry:
        """
        Append an entry recorded by the rubric editor.

        Raises LineageInvariantError for duplicate ids or unknown parents.
        """
        entry = self._append(entry_input)
        self._rebuild("record_event")
        return entry

    def _append(self, entry_input: HistoryEntryInput) -> HistoryEntry:
        try:
            entry = self._store.append(entry_input)
        except LineageInvariantError as e:
            self._observability.log_audit(
                "append", layer="history", event_type=AuditEventType.ERROR,
                entity_id=e.entry_id, outcome="invariant_violation", details=str(e),
            )
            raise

        self._observability.log_audit(
            "append", layer="history", event_type=AuditEventType.HISTORY,
            entity_id=entry.id, action_type=entry.action.value,
            parent_id=entry.parent_id or "",
        )
        self._observability.collect_metric(
            "history_entries_total", 1.0, {"action": entry.action.value}
        )
        return entry

    # =========================================================================
    # INBOUND: FILTER
    # =========================================================================

    def set_filter(
        self,
        search_term: Optional[str] = None,
        action_filter: Optional[ActionFilter] = None
    ) -> GraphSnapshot:
        """
        Update search term and/or action filter. None leaves a part unchanged.

        Raises ValueError for an unknown action filter.
        """
        criteria = self._criteria
        if search_term is not None:
            criteria = criteria.with_search(search_term)
        if action_filter is not None:
            criteria = criteria.with_action(action_filter)
        return self._apply_criteria(criteria, "set_filter")

    def clear_search(self) -> GraphSnapshot:
        return self._apply_criteria(self._criteria.with_search(""), "clear_search")

    def clear_filters(self) -> GraphSnapshot:
        return self._apply_criteria(FilterCriteria.cleared(), "clear_filters")

    def _apply_criteria(self, criteria: FilterCriteria, reason: str) -> GraphSnapshot:
        self._criteria = criteria
        self._observability.log_audit(
            reason, layer="filter", event_type=AuditEventType.FILTER,
            search_term=criteria.search_term, action_filter=criteria.action_value,
        )
        return self._rebuild(reason)

    # =========================================================================
    # INBOUND: SELECTION
    # =========================================================================

    def select_node(self, node_id: str, modifier_held: bool = False) -> SelectionState:
        """
        Handle a node click from the rendering surface.

        Raises KeyError for ids that are neither stored nor the
        current-state node.
        """
        is_current = node_id == CURRENT_STATE_ID
        if not is_current and node_id not in self._store:
            raise KeyError(node_id)

        state = self._selection.select(node_id, modifier_held, selectable=not is_current)
        self._record_selection("select_node", node_id)
        self._rebuild("select_node")
        return state

    def toggle_merge_mode(self) -> SelectionState:
        state = self._selection.toggle_merge_mode()
        self._record_selection("toggle_merge_mode")
        self._rebuild("toggle_merge_mode")
        return state

    def cancel_merge(self) -> SelectionState:
        state = self._selection.cancel_merge()
        self._record_selection("cancel_merge")
        self._rebuild("cancel_merge")
        return state

    def _record_selection(self, action: str, node_id: Optional[str] = None):
        mode = self._selection.mode.value
        self._observability.log_audit(
            action, layer="interaction", event_type=AuditEventType.SELECTION,
            entity_id=node_id, mode=mode,
        )
        self._observability.collect_metric("selection_events_total", 1.0, {"mode": mode})

    # =========================================================================
    # INBOUND: MERGE
    # =========================================================================

    def confirm_merge(self) -> Result:
        """Merge the current merge candidates."""
        return self.request_merge(self._selection.state.merge_candidates)

    def request_merge(self, ids: Iterable[str]) -> Result:
        """
        Validate and append a merge entry for `ids`.

        On failure nothing changes (store, selection mode, snapshot) and the
        Error is returned for display. On success the controller leaves
        merge mode, the graph is rebuilt and VersionsMerged is published.
        """
        ids = tuple(ids)
        result = self._merge.confirm(ids)

        if result.is_failure:
            self._observability.log_audit(
                "merge", layer="interaction", event_type=AuditEventType.MERGE,
                outcome="rejected", details=result.error.message,
                error_code=result.error.code.name,
            )
            self._observability.collect_metric(
                "merge_validation_failures_total", 1.0,
                {"error_code": result.error.code.name}
            )
            return result

        merge_entry: HistoryEntry = result.value
        merged = tuple(self._store.get(i) for i in dict.fromkeys(ids))

        self._observability.log_audit(
            "merge", layer="interaction", event_type=AuditEventType.MERGE,
            entity_id=merge_entry.id, merged=",".join(e.id for e in merged),
        )
        self._observability.collect_metric("merges_total", 1.0)

        if self._selection.state.is_merge_mode:
            self._selection.complete_merge()
        self._rebuild("merge")
        self._bus.publish(VersionsMerged(merge_entry=merge_entry, merged_entries=merged))
        return result

    # =========================================================================
    # INBOUND: VIEW
    # =========================================================================

    def load_version(self, entry_id: str) -> VersionData:
        """
        Ask the host to load a stored version into the rubric editor.

        Raises KeyError for unknown ids (the current-state node included).
        """
        entry = self._store.get(entry_id)
        if entry is None:
            raise KeyError(entry_id)

        version = VersionData.from_entry(entry)
        self._observability.log_audit(
            "load_version", layer="interaction", event_type=AuditEventType.SELECTION,
            entity_id=entry_id,
        )
        self._bus.publish(VersionLoadRequested(version=version))
        return version

    def reset_layout(self) -> GraphSnapshot:
        """Discard surface-side drags by republishing a fresh layout."""
        return self._rebuild("reset_layout")

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def _rebuild(self, reason: str) -> GraphSnapshot:
        started = time.perf_counter()

        latest = self._store.latest()
        snapshot = build_view(
            self._store.all(),
            self._criteria,
            self._selection.state,
            latest_id=latest.id if latest else None,
            config=self._config,
        )

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._snapshot = snapshot

        self._observability.log_audit(
            "rebuild", layer="graph", event_type=AuditEventType.BUILD,
            entity_id=snapshot.snapshot_id, reason=reason,
            nodes=str(len(snapshot.nodes)), edges=str(len(snapshot.edges)),
        )
        self._observability.collect_metric("graph_rebuilds_total", 1.0, {"reason": reason})
        self._observability.collect_metric("graph_build_duration_ms", elapsed_ms)
        self._observability.collect_metric("graph_nodes", float(len(snapshot.nodes)))
        self._observability.collect_metric("graph_edges", float(len(snapshot.edges)))

        self._bus.publish(GraphRebuilt(snapshot=snapshot, reason=reason))
        return snapshot

    def merge_candidates(self) -> List[HistoryEntry]:
        return [self._store.get(i) for i in self._selection.state.merge_candidates]
