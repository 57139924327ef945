"""Pointer interaction state and event dispatch for Trellis UI."""

from .events import CallbackEventSink, EventEmitter, EventHandler, EventSink, UIEvent
from .pointer import OFFSCREEN, PRIMARY_BUTTON, PointerState, parse_pointer_payload
from .tracker import ElementInteraction, InteractionDelta, InteractionSnapshot, InteractionTracker

__all__ = [
    "CallbackEventSink",
    "ElementInteraction",
    "EventEmitter",
    "EventHandler",
    "EventSink",
    "InteractionDelta",
    "InteractionSnapshot",
    "InteractionTracker",
    "OFFSCREEN",
    "PRIMARY_BUTTON",
    "PointerState",
    "UIEvent",
    "parse_pointer_payload",
]
