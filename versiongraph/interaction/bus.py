"""
Message Bus
===========

Typed publish/subscribe object handed to the engine at construction.
Replaces process-wide event dispatch: only code holding the bus can
listen or publish.

Handlers run synchronously, in subscription order. Exceptions raised
by a handler propagate to the publisher.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Type, TypeVar

M = TypeVar('M')
Handler = Callable[[M], None]


class MessageBus:
    """Dispatch by exact message type."""

    def __init__(self):
        self._handlers: Dict[type, List[Callable]] = {}
        self._published: int = 0

    def subscribe(self, message_type: Type[M], handler: Handler) -> Callable[[], None]:
        """
        Register handler for message_type.

        Returns a callable that removes the subscription.
        """
        self._handlers.setdefault(message_type, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(message_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, message: object) -> int:
        """Deliver message; returns how many handlers received it."""
        self._published += 1
        handlers = list(self._handlers.get(type(message), ()))
        for handler in handlers:
            handler(message)
        return len(handlers)

    def handler_count(self, message_type: type) -> int:
        return len(self._handlers.get(message_type, ()))

    @property
    def published_count(self) -> int:
        return self._published
