from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from ..layout.tree import LayoutTree
from .tracker import InteractionDelta


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class UIEvent:
    name: str
    element_id: str
    item_indices: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("event name must be non-empty")
        if not self.element_id.strip():
            raise ValueError("event element_id must be non-empty")


class EventSink(Protocol):
    def send(self, event: UIEvent) -> None:
        ...


EventHandler = Callable[[UIEvent], object | None]


class CallbackEventSink:
    """Routes events to host callables by event name."""

    def __init__(self, handlers: dict[str, EventHandler] | None = None, *, strict: bool = True) -> None:
        self._handlers: dict[str, EventHandler] = dict(handlers or {})
        self._strict = strict

    def register_handler(self, name: str, handler: EventHandler) -> None:
        self._handlers[name] = handler

    def send(self, event: UIEvent) -> None:
        handler = self._handlers.get(event.name)
        if handler is None:
            if self._strict:
                raise RuntimeError(f"missing handler for event: {event.name}")
            LOGGER.warning("no handler for event %s from %s", event.name, event.element_id)
            return
        handler(event)


class EventEmitter:
    def emit(self, layout: LayoutTree, delta: InteractionDelta, sink: EventSink) -> tuple[UIEvent, ...]:
        """Send one event per element whose click started this frame.

        Sink exceptions propagate to the caller; events already sent stay sent.
        """

        started = set(delta.click_started)
        sent: list[UIEvent] = []
        for node in layout.nodes:
            if node.element_id is None or node.element_id not in started or not node.click_event:
                continue
            started.discard(node.element_id)
            event = UIEvent(name=node.click_event, element_id=node.element_id, item_indices=node.item_indices)
            sent.append(event)
            sink.send(event)
        return tuple(sent)
