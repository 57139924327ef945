from .solver import solve
from .tree import BorderPaint, LayoutNode, LayoutTree, PaintState, Rect, TextPaint, Viewport

__all__ = [
    "BorderPaint",
    "LayoutNode",
    "LayoutTree",
    "PaintState",
    "Rect",
    "TextPaint",
    "Viewport",
    "solve",
]
