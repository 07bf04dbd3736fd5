"""
Selection Controller
====================

State machine over how the user is pointing at the graph.

STATES:
- BROWSING (initial): plain click focuses one node and clears the
  multi-selection; modifier click toggles multi-selection membership
- MERGE_SELECTING: every click toggles merge candidacy, focus is
  suppressed

TRANSITIONS:
- BROWSING -> MERGE_SELECTING on toggle_merge_mode()
- MERGE_SELECTING -> BROWSING on cancel_merge() (or a second toggle)
  and on complete_merge() after a successful merge

No terminal state; the controller lives as long as the host view.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from ..contracts.graph import GraphSnapshot


class SelectionMode(Enum):
    BROWSING = "browsing"
    MERGE_SELECTING = "merge_selecting"


@dataclass(frozen=True)
class SelectionState:
    """Immutable view of the controller, safe to hand to a renderer."""
    mode: SelectionMode = SelectionMode.BROWSING
    focused_node_id: Optional[str] = None
    multi_selected: Tuple[str, ...] = ()
    merge_candidates: Tuple[str, ...] = ()

    @property
    def is_merge_mode(self) -> bool:
        return self.mode == SelectionMode.MERGE_SELECTING

    @property
    def can_confirm_merge(self) -> bool:
        return self.is_merge_mode and len(self.merge_candidates) >= 2


def _toggle(items: List[str], node_id: str) -> None:
    if node_id in items:
        items.remove(node_id)
    else:
        items.append(node_id)


class SelectionController:
    """
    Tracks focus, multi-selection and merge candidates.

    Membership lists keep click order so merge comments list
    versions in the order the user picked them.
    """

    def __init__(self):
        self._mode = SelectionMode.BROWSING
        self._focused: Optional[str] = None
        self._multi: List[str] = []
        self._candidates: List[str] = []

    @property
    def mode(self) -> SelectionMode:
        return self._mode

    @property
    def state(self) -> SelectionState:
        return SelectionState(
            mode=self._mode,
            focused_node_id=self._focused,
            multi_selected=tuple(self._multi),
            merge_candidates=tuple(self._candidates),
        )

    def select(self, node_id: str, modifier_held: bool = False, selectable: bool = True) -> SelectionState:
        """
        Handle a node click.

        selectable=False marks a synthetic node: it has no detail panel
        and cannot be merged.
        """
        if self._mode == SelectionMode.MERGE_SELECTING:
            if selectable:
                _toggle(self._candidates, node_id)
            self._focused = None
        elif modifier_held:
            if selectable:
                _toggle(self._multi, node_id)
        else:
            self._focused = node_id if selectable else None
            self._multi.clear()

        return self.state

    def toggle_merge_mode(self) -> SelectionState:
        if self._mode == SelectionMode.MERGE_SELECTING:
            return self.cancel_merge()

        self._mode = SelectionMode.MERGE_SELECTING
        self._focused = None
        return self.state

    def cancel_merge(self) -> SelectionState:
        """Leave merge mode without touching history."""
        self._candidates.clear()
        self._mode = SelectionMode.BROWSING
        return self.state

    def complete_merge(self) -> SelectionState:
        """Leave merge mode after the merge entry was appended."""
        self._candidates.clear()
        self._focused = None
        self._mode = SelectionMode.BROWSING
        return self.state


def highlight(snapshot: GraphSnapshot, state: SelectionState) -> GraphSnapshot:
    """
    Return a copy of `snapshot` with selection flags applied.

    The input snapshot is left untouched.
    """
    multi = set(state.multi_selected)
    candidates = set(state.merge_candidates)

    nodes = tuple(
        replace(
            node,
            is_focused=node.node_id == state.focused_node_id,
            is_multi_selected=node.node_id in multi,
            is_merge_candidate=node.node_id in candidates,
            is_merge_mode=state.is_merge_mode and not node.is_synthetic,
        )
        for node in snapshot.nodes
    )
    return replace(snapshot, nodes=nodes)
