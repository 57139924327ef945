"""Declarative markup-to-layout engine for Trellis."""

from .binding import BindingContext, BindingScope, Diagnostic, MappingBindingContext
from .controls.events import CallbackEventSink, EventEmitter, EventHandler, EventSink, UIEvent
from .controls.pointer import PRIMARY_BUTTON, PointerState, parse_pointer_payload
from .controls.tracker import ElementInteraction, InteractionDelta, InteractionSnapshot, InteractionTracker
from .errors import (
    BindingError,
    CompileError,
    CyclicReuse,
    MalformedMarkup,
    TrellisError,
    UnboundKey,
    UnboundLocal,
    UnknownReusable,
    WrongKind,
)
from .layout.solver import solve
from .layout.tree import BorderPaint, LayoutNode, LayoutTree, PaintState, Rect, TextPaint, Viewport
from .style.color import parse_color
from .template.compiler import compile_markup
from .template.nodes import CompiledTemplate, PageDef, ReusableDef
from .text.measure import FontStyle, MonospaceTextMeasurer, TextLayoutMetrics, TextMeasurer, TextMeasureRequest

__all__ = [
    "BindingContext",
    "BindingError",
    "BindingScope",
    "BorderPaint",
    "CallbackEventSink",
    "CompileError",
    "CompiledTemplate",
    "CyclicReuse",
    "Diagnostic",
    "ElementInteraction",
    "EventEmitter",
    "EventHandler",
    "EventSink",
    "FontStyle",
    "InteractionDelta",
    "InteractionSnapshot",
    "InteractionTracker",
    "LayoutNode",
    "LayoutTree",
    "MalformedMarkup",
    "MappingBindingContext",
    "MonospaceTextMeasurer",
    "PRIMARY_BUTTON",
    "PageDef",
    "PaintState",
    "PointerState",
    "Rect",
    "ReusableDef",
    "TextLayoutMetrics",
    "TextMeasureRequest",
    "TextMeasurer",
    "TextPaint",
    "TrellisError",
    "UIEvent",
    "UnboundKey",
    "UnboundLocal",
    "UnknownReusable",
    "Viewport",
    "WrongKind",
    "compile_markup",
    "parse_color",
    "parse_pointer_payload",
    "solve",
]
