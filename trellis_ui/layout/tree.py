from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from ..binding import Diagnostic
from ..style.color import RGBA, to_hex
from ..text.measure import FontStyle


NodeKind = Literal["element", "text"]


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    def __post_init__(self) -> None:
        if math.isnan(self.width) or math.isnan(self.height):
            raise ValueError("viewport width/height must be numbers")
        if self.width < 0 or self.height < 0:
            raise ValueError("viewport width/height must be >= 0")


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("rect width/height must be >= 0")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def intersect(self, other: "Rect") -> "Rect":
        x0 = max(self.x, other.x)
        y0 = max(self.y, other.y)
        x1 = min(self.right, other.right)
        y1 = min(self.bottom, other.bottom)
        return Rect(x0, y0, max(0.0, x1 - x0), max(0.0, y1 - y0))

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class BorderPaint:
    color: RGBA
    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0
    between_children: float = 0.0

    @property
    def visible(self) -> bool:
        widths = (self.left, self.right, self.top, self.bottom, self.between_children)
        return self.color[3] > 0 and max(widths) > 0


@dataclass(frozen=True)
class PaintState:
    """Paint attributes of an element after interaction overrides are applied."""

    color: RGBA | None = None
    border: BorderPaint | None = None
    radius: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    image: str | None = None


@dataclass(frozen=True)
class TextPaint:
    text: str
    font: FontStyle
    color: RGBA
    align: Literal["left", "center", "right"] = "left"


@dataclass(frozen=True)
class LayoutNode:
    kind: NodeKind
    rect: Rect
    depth: int
    element_id: str | None = None
    paint: PaintState | None = None
    text: TextPaint | None = None
    clip: Rect | None = None
    click_event: str | None = None
    item_indices: tuple[int, ...] = ()
    floating: bool = False
    pointer_target: bool = True
    dividers: tuple[Rect, ...] = ()

    def hit(self, x: float, y: float) -> bool:
        if not self.rect.contains(x, y):
            return False
        return self.clip is None or self.clip.contains(x, y)


@dataclass(frozen=True)
class LayoutTree:
    """Immutable per-frame layout result; `nodes` are stored in draw order."""

    page: str
    viewport: Viewport
    nodes: tuple[LayoutNode, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def ordered_nodes_for_draw(self) -> list[LayoutNode]:
        return list(self.nodes)

    def ordered_nodes_for_hit_test(self) -> list[LayoutNode]:
        hits = [n for n in self.nodes if n.kind == "element" and n.pointer_target]
        hits.reverse()
        return hits

    def hit_test(self, x: float, y: float) -> LayoutNode | None:
        for node in self.ordered_nodes_for_hit_test():
            if node.hit(x, y):
                return node
        return None

    @property
    def element_ids(self) -> tuple[str, ...]:
        return tuple(n.element_id for n in self.nodes if n.element_id is not None)

    def find(self, element_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.element_id == element_id:
                return node
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "page": self.page,
            "viewport": {"width": self.viewport.width, "height": self.viewport.height},
            "nodes": [_node_to_dict(node) for node in self.nodes],
            "diagnostics": [
                {"code": d.code, "message": d.message, "key": d.key} for d in self.diagnostics
            ],
        }


def _node_to_dict(node: LayoutNode) -> dict[str, object]:
    out: dict[str, object] = {
        "kind": node.kind,
        "rect": node.rect.to_dict(),
        "depth": node.depth,
    }
    if node.element_id is not None:
        out["id"] = node.element_id
    if node.item_indices:
        out["item_indices"] = list(node.item_indices)
    if node.click_event is not None:
        out["click_event"] = node.click_event
    if node.floating:
        out["floating"] = True
    if node.clip is not None:
        out["clip"] = node.clip.to_dict()
    if node.paint is not None and node.paint.color is not None:
        out["color"] = to_hex(node.paint.color)
    if node.text is not None:
        out["text"] = node.text.text
    return out
