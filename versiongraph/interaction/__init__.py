"""
Interaction Layer
=================

User intent against the graph: selection, merge mode, merge confirmation,
and the message bus that tells the host about it.

Modules:
- selection: focus / multi-select / merge-candidate state machine
- merge: merge validation and entry synthesis
- bus: typed publish/subscribe
"""

from .selection import SelectionController, SelectionMode, SelectionState, highlight
from .merge import MergeOperation, MergeConfig, major_version, next_merge_version
from .bus import MessageBus

__all__ = [
    'SelectionController',
    'SelectionMode',
    'SelectionState',
    'highlight',
    'MergeOperation',
    'MergeConfig',
    'major_version',
    'next_merge_version',
    'MessageBus',
]
