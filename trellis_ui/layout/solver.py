from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping

from ..binding import BindingContext, BindingScope
from ..style.color import WHITE
from ..template.nodes import (
    CompiledTemplate,
    ComponentUse,
    ConditionalNode,
    ElementNode,
    ListNode,
    Node,
    Sizing,
    TextNode,
)
from ..text.measure import FontStyle, MonospaceTextMeasurer, TextMeasurer, TextMeasureRequest
from .tree import BorderPaint, LayoutNode, LayoutTree, PaintState, Rect, TextPaint, Viewport

if TYPE_CHECKING:
    from ..controls.tracker import ElementInteraction


LOGGER = logging.getLogger(__name__)

_EPS = 1e-9


@dataclass
class _Axis:
    mode: str = "fit"
    value: float = 0.0
    min: float = 0.0
    max: float = math.inf

    def clamp(self, size: float) -> float:
        return min(max(size, self.min), self.max)


@dataclass
class _Float:
    attach_parent: str = "top-left"
    attach_element: str = "top-left"
    attach_to: str = "parent"
    target: str | None = None
    offset_x: float = 0.0
    offset_y: float = 0.0
    expand_width: float = 0.0
    expand_height: float = 0.0
    z_index: int = 0
    capture_pointer: bool = True


@dataclass(eq=False)
class _Box:
    kind: str
    order: int
    depth: int
    parent: "_Box | None" = None
    element_id: str | None = None
    declared_id: str | None = None
    item_indices: tuple[int, ...] = ()
    width: _Axis = field(default_factory=_Axis)
    height: _Axis = field(default_factory=_Axis)
    padding: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    gap: float = 0.0
    direction: str = "ltr"
    align_x: str = "left"
    align_y: str = "top"
    scroll_x: bool = False
    scroll_y: bool = False
    paint: PaintState | None = None
    text: TextPaint | None = None
    click_event: str | None = None
    floating: _Float | None = None
    children: list["_Box"] = field(default_factory=list)
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    clip: Rect | None = None
    dividers: list[Rect] = field(default_factory=list)

    def flow(self) -> list["_Box"]:
        return [c for c in self.children if c.floating is None]

    def floats(self) -> list["_Box"]:
        return [c for c in self.children if c.floating is not None]

    def axis(self, horizontal: bool) -> _Axis:
        return self.width if horizontal else self.height

    def size(self, horizontal: bool) -> float:
        return self.w if horizontal else self.h

    def set_size(self, horizontal: bool, value: float) -> None:
        if horizontal:
            self.w = max(0.0, value)
        else:
            self.h = max(0.0, value)

    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)


def solve(
    template: CompiledTemplate,
    bindings: BindingContext,
    viewport: Viewport | tuple[float, float],
    interaction: Mapping[str, "ElementInteraction"] | None = None,
    *,
    page: str | None = None,
    measurer: TextMeasurer | None = None,
    scroll_offsets: Mapping[str, tuple[float, float]] | None = None,
) -> LayoutTree:
    """Resolve one page of `template` into a fresh `LayoutTree`.

    The solver is a pure function of its arguments: it never mutates
    `interaction`, never retains `bindings`, and recovers binding failures as
    diagnostics on the returned tree.
    """

    if not isinstance(viewport, Viewport):
        width, height = viewport
        viewport = Viewport(_non_negative(width), _non_negative(height))
    page_def = template.page(page)
    solver = _Solver(
        page=page_def.name,
        viewport=viewport,
        interaction=interaction or {},
        measurer=measurer or MonospaceTextMeasurer(),
        scroll_offsets=scroll_offsets or {},
        scope=BindingScope(bindings),
    )
    return solver.run(page_def.children)


def _non_negative(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


class _Solver:
    def __init__(
        self,
        *,
        page: str,
        viewport: Viewport,
        interaction: Mapping[str, "ElementInteraction"],
        measurer: TextMeasurer,
        scroll_offsets: Mapping[str, tuple[float, float]],
        scope: BindingScope,
    ) -> None:
        self._page = page
        self._viewport = viewport
        self._interaction = interaction
        self._measurer = measurer
        self._scroll_offsets = scroll_offsets
        self._scope = scope
        self._order = 0
        self._seen_ids: dict[str, int] = {}
        self._boxes_by_id: dict[str, _Box] = {}

    def run(self, children: tuple[Node, ...]) -> LayoutTree:
        root = _Box(
            kind="root",
            order=self._next_order(),
            depth=0,
            width=_Axis("fixed", self._viewport.width),
            height=_Axis("fixed", self._viewport.height),
            direction="ttb",
        )
        self._build(children, root, self._scope, (), 1)
        self._intrinsic(root)
        root.w = self._viewport.width
        root.h = self._viewport.height
        self._distribute(root)
        self._place(root, None)
        floats = sorted(self._collect_floats(root), key=lambda b: b.order)
        placed: set[int] = set()
        for box in floats:
            self._place_float(box, placed, set())

        nodes: list[LayoutNode] = []
        self._emit_flow(root, nodes)
        for box in sorted(floats, key=lambda b: (b.floating.z_index, b.order)):  # type: ignore[union-attr]
            nodes.append(self._to_node(box))
            self._emit_flow(box, nodes)
        diagnostics = tuple(dict.fromkeys(self._scope.diagnostics))
        LOGGER.debug("solved page %s: %d nodes, %d diagnostics", self._page, len(nodes), len(diagnostics))
        return LayoutTree(page=self._page, viewport=self._viewport, nodes=tuple(nodes), diagnostics=diagnostics)

    def _next_order(self) -> int:
        self._order += 1
        return self._order

    # build: conditionals, lists, element ids and interaction variants

    def _build(
        self,
        nodes: tuple[Node, ...],
        parent: _Box,
        scope: BindingScope,
        indices: tuple[int, ...],
        depth: int,
    ) -> None:
        for node in nodes:
            if isinstance(node, ConditionalNode):
                if scope.boolean(node.predicate) != node.negate:
                    self._build((node.body,), parent, scope, indices, depth)
            elif isinstance(node, ListNode):
                for index, item in enumerate(scope.items(node.source_key)):
                    item_scope = scope.child(item, node.item_bindings)
                    self._build(node.body, parent, item_scope, indices + (index,), depth)
            elif isinstance(node, ElementNode):
                box = self._element(node, parent, scope, indices, depth)
                parent.children.append(box)
                self._build(node.children, box, scope, indices, depth + 1)
            elif isinstance(node, TextNode):
                parent.children.append(self._text(node, parent, scope, indices, depth))
            elif isinstance(node, ComponentUse):
                raise TypeError(f"unexpanded reusable `{node.reusable_name}` in compiled template")

    def _element_id(self, node: ElementNode, scope: BindingScope, indices: tuple[int, ...]) -> tuple[str, str | None]:
        declared = node.element_id
        id_ref = node.style.props.get("id")
        if id_ref is not None:
            declared = scope.text(id_ref) or declared  # type: ignore[arg-type]
        base = declared or f"{self._page}/{'.'.join(str(p) for p in node.path)}"
        element_id = base + "".join(f"[{i}]" for i in indices)
        count = self._seen_ids.get(element_id, 0) + 1
        self._seen_ids[element_id] = count
        if count > 1:
            self._scope.report("duplicate-id", f"duplicate element id `{element_id}`", element_id)
            element_id = f"{element_id}#{count}"
        return element_id, declared

    def _element(
        self,
        node: ElementNode,
        parent: _Box,
        scope: BindingScope,
        indices: tuple[int, ...],
        depth: int,
    ) -> _Box:
        element_id, declared = self._element_id(node, scope, indices)
        state = self._interaction.get(element_id)
        props = node.style.variant(
            hovered=bool(state is not None and state.hovered),
            clicked=bool(state is not None and state.clicked),
        )

        def num(key: str, default: float = 0.0) -> float:
            return self._number(props.get(key), scope, key, default)

        box = _Box(
            kind="element",
            order=self._next_order(),
            depth=depth,
            parent=parent,
            element_id=element_id,
            declared_id=declared,
            item_indices=indices,
            width=self._axis(props.get("width"), scope),
            height=self._axis(props.get("height"), scope),
            padding=(num("padding_left"), num("padding_right"), num("padding_top"), num("padding_bottom")),
            gap=num("child_gap"),
            direction=str(props.get("direction", "ltr")),
            align_x=str(props.get("align_x", "left")),
            align_y=str(props.get("align_y", "top")),
            scroll_x=bool(props.get("scroll_horizontal", False)),
            scroll_y=bool(props.get("scroll_vertical", False)),
            click_event=scope.event(node.style.clicked_emit),
        )

        color_ref = props.get("color")
        border_ref = props.get("border_color")
        image_ref = props.get("image")
        border = None
        if border_ref is not None:
            border = BorderPaint(
                color=scope.color(border_ref),  # type: ignore[arg-type]
                left=num("border_left"),
                right=num("border_right"),
                top=num("border_top"),
                bottom=num("border_bottom"),
                between_children=num("border_between_children"),
            )
        box.paint = PaintState(
            color=None if color_ref is None else scope.color(color_ref),  # type: ignore[arg-type]
            border=border,
            radius=(
                num("radius_top_left"),
                num("radius_top_right"),
                num("radius_bottom_left"),
                num("radius_bottom_right"),
            ),
            image=None if image_ref is None else (scope.text(image_ref) or None),  # type: ignore[arg-type]
        )

        if props.get("floating", False):
            box.floating = _Float(
                attach_parent=str(props.get("floating_attach_parent", "top-left")),
                attach_element=str(props.get("floating_attach_element", "top-left")),
                attach_to=str(props.get("floating_attach_to", "parent")),
                target=props.get("floating_target"),  # type: ignore[arg-type]
                offset_x=self._offset(props.get("floating_offset_x"), scope),
                offset_y=self._offset(props.get("floating_offset_y"), scope),
                expand_width=num("floating_expand_width"),
                expand_height=num("floating_expand_height"),
                z_index=int(self._offset(props.get("floating_z_index"), scope)),
                capture_pointer=bool(props.get("floating_capture_pointer", True)),
            )
        self._boxes_by_id.setdefault(element_id, box)
        if declared is not None:
            self._boxes_by_id.setdefault(declared, box)
        return box

    def _text(
        self,
        node: TextNode,
        parent: _Box,
        scope: BindingScope,
        indices: tuple[int, ...],
        depth: int,
    ) -> _Box:
        props = node.style.props

        def num(key: str, default: float = 0.0) -> float:
            return self._number(props.get(key), scope, key, default)

        font = FontStyle(
            font_id=int(num("font_id")),
            font_size_px=max(num("font_size", 16.0), 1.0),
            line_height_px=num("line_height"),
        )
        color_ref = props.get("color")
        paint = TextPaint(
            text=scope.text(node.content),
            font=font,
            color=WHITE if color_ref is None else scope.color(color_ref, WHITE),  # type: ignore[arg-type]
            align=props.get("align", "left"),  # type: ignore[arg-type]
        )
        metrics = self._measurer.measure_text(TextMeasureRequest(text=paint.text, font=font))
        box = _Box(kind="text", order=self._next_order(), depth=depth, parent=parent, item_indices=indices, text=paint)
        box.w = _non_negative(metrics.width_px)
        box.h = _non_negative(metrics.height_px)
        return box

    def _number(self, ref: object, scope: BindingScope, key: str, default: float) -> float:
        if ref is None:
            return default
        value = scope.number(ref)  # type: ignore[arg-type]
        if not math.isfinite(value) or value < 0:
            scope.report("clamped", f"`{key}` resolved to {value}; clamped to 0", key)
            return 0.0
        return value

    def _offset(self, ref: object, scope: BindingScope) -> float:
        if ref is None:
            return 0.0
        value = scope.number(ref)  # type: ignore[arg-type]
        return value if math.isfinite(value) else 0.0

    def _axis(self, sizing: object, scope: BindingScope) -> _Axis:
        if not isinstance(sizing, Sizing):
            return _Axis()
        value = 0.0 if sizing.value is None else self._number(sizing.value, scope, sizing.mode, 0.0)
        return _Axis(mode=sizing.mode, value=value, min=sizing.min, max=sizing.max)

    # intrinsic pass (post-order)

    def _intrinsic(self, box: _Box) -> None:
        for child in box.children:
            self._intrinsic(child)
        if box.kind == "text":
            return
        flow = box.flow()
        pl, pr, pt, pb = box.padding
        gaps = box.gap * max(len(flow) - 1, 0)
        widths = [c.w for c in flow]
        heights = [c.h for c in flow]
        if box.direction == "ltr":
            content_w = sum(widths) + gaps
            content_h = max(heights, default=0.0)
        else:
            content_w = max(widths, default=0.0)
            content_h = sum(heights) + gaps
        box.w = _intrinsic_size(box.width, content_w + pl + pr)
        box.h = _intrinsic_size(box.height, content_h + pt + pb)

    # distribution pass (pre-order)

    def _distribute(self, box: _Box) -> None:
        if not box.children:
            return
        pl, pr, pt, pb = box.padding
        inner_w = max(box.w - pl - pr, 0.0)
        inner_h = max(box.h - pt - pb, 0.0)
        horizontal = box.direction == "ltr"
        inner_main = inner_w if horizontal else inner_h
        inner_cross = inner_h if horizontal else inner_w
        flow = box.flow()
        gaps = box.gap * max(len(flow) - 1, 0)

        for child in flow:
            main = child.axis(horizontal)
            if main.mode == "percent":
                child.set_size(horizontal, main.clamp(main.value * max(inner_main - gaps, 0.0)))
        growers = [c for c in flow if c.axis(horizontal).mode == "grow"]
        remaining = inner_main - gaps - sum(c.size(horizontal) for c in flow)
        if growers and remaining > _EPS:
            _grow(growers, remaining, horizontal)

        for child in flow:
            cross = child.axis(not horizontal)
            if cross.mode == "grow":
                child.set_size(not horizontal, cross.clamp(inner_cross))
            elif cross.mode == "percent":
                child.set_size(not horizontal, cross.clamp(cross.value * inner_cross))

        for child in box.floats():
            for is_x, inner in ((True, inner_w), (False, inner_h)):
                axis = child.axis(is_x)
                if axis.mode == "grow":
                    child.set_size(is_x, axis.clamp(inner))
                elif axis.mode == "percent":
                    child.set_size(is_x, axis.clamp(axis.value * inner))
            child.w += child.floating.expand_width  # type: ignore[union-attr]
            child.h += child.floating.expand_height  # type: ignore[union-attr]

        for child in box.children:
            self._distribute(child)

    # placement pass (pre-order)

    def _place(self, box: _Box, clip: Rect | None) -> None:
        box.clip = clip
        if not box.children:
            return
        child_clip = clip
        if box.scroll_x or box.scroll_y:
            child_clip = box.rect() if clip is None else clip.intersect(box.rect())
        dx, dy = 0.0, 0.0
        if box.element_id is not None and box.element_id in self._scroll_offsets:
            sx, sy = self._scroll_offsets[box.element_id]
            dx = float(sx) if box.scroll_x else 0.0
            dy = float(sy) if box.scroll_y else 0.0

        pl, pr, pt, pb = box.padding
        inner_w = max(box.w - pl - pr, 0.0)
        inner_h = max(box.h - pt - pb, 0.0)
        horizontal = box.direction == "ltr"
        flow = box.flow()
        gaps = box.gap * max(len(flow) - 1, 0)
        inner_main = inner_w if horizontal else inner_h
        leftover = inner_main - gaps - sum(c.size(horizontal) for c in flow)
        cursor = 0.0
        if leftover > 0 and not any(c.axis(horizontal).mode == "grow" for c in flow):
            cursor = _align_offset(box.align_x if horizontal else box.align_y, leftover)

        divider = box.paint.border.between_children if box.paint and box.paint.border else 0.0
        for index, child in enumerate(flow):
            if horizontal:
                child.x = box.x + pl + cursor + dx
                child.y = box.y + pt + _align_offset(box.align_y, inner_h - child.h) + dy
            else:
                child.x = box.x + pl + _align_offset(box.align_x, inner_w - child.w) + dx
                child.y = box.y + pt + cursor + dy
            cursor += child.size(horizontal)
            if divider > 0 and index < len(flow) - 1:
                mid = cursor + box.gap / 2.0 - divider / 2.0
                if horizontal:
                    box.dividers.append(Rect(box.x + pl + mid + dx, box.y + pt + dy, divider, inner_h))
                else:
                    box.dividers.append(Rect(box.x + pl + dx, box.y + pt + mid + dy, inner_w, divider))
            cursor += box.gap
            self._place(child, child_clip)

        for child in box.floats():
            child.x, child.y = 0.0, 0.0
            self._place(child, None)

    # floating pass

    def _collect_floats(self, box: _Box) -> list[_Box]:
        out: list[_Box] = []
        for child in box.children:
            if child.floating is not None:
                out.append(child)
            out.extend(self._collect_floats(child))
        return out

    def _float_target(self, box: _Box) -> _Box | None:
        """Box whose rect anchors `box`; None means the root viewport."""

        spec = box.floating
        assert spec is not None
        if spec.attach_to == "root":
            return None
        if spec.attach_to == "element" and spec.target:
            ancestor = box.parent
            while ancestor is not None:
                if spec.target in (ancestor.declared_id, ancestor.element_id):
                    return ancestor
                ancestor = ancestor.parent
            found = self._boxes_by_id.get(spec.target)
            if found is not None and found is not box:
                return found
            self._scope.report(
                "unknown-float-target",
                f"floating element `{box.element_id}` targets unknown id `{spec.target}`; using parent",
                spec.target,
            )
        assert box.parent is not None
        return box.parent

    def _place_float(self, box: _Box, placed: set[int], pending: set[int]) -> None:
        # floats enclosing the element or its target move them, so they go first
        if id(box) in placed:
            return
        spec = box.floating
        assert spec is not None
        pending.add(id(box))
        target = self._float_target(box)
        for dep in _enclosing_floats(box) + ([] if target is None else _enclosing_floats(target, inclusive=True)):
            if id(dep) in pending:
                if dep is not box:
                    self._scope.report(
                        "float-cycle",
                        f"floating element `{box.element_id}` depends on `{dep.element_id}` which depends on it",
                        box.element_id,
                    )
                continue
            self._place_float(dep, placed, pending)
        pending.discard(id(box))
        rect = Rect(0.0, 0.0, self._viewport.width, self._viewport.height) if target is None else target.rect()
        tx, ty = _corner_point(rect.x, rect.y, rect.width, rect.height, spec.attach_parent)
        ex, ey = _corner_point(0.0, 0.0, box.w, box.h, spec.attach_element)
        x = tx - ex + spec.offset_x
        y = ty - ey + spec.offset_y
        _shift(box, x - box.x, y - box.y)
        placed.add(id(box))

    # emission

    def _emit_flow(self, box: _Box, out: list[LayoutNode]) -> None:
        for child in box.children:
            if child.floating is not None:
                continue
            out.append(self._to_node(child))
            self._emit_flow(child, out)

    def _to_node(self, box: _Box) -> LayoutNode:
        floating = box.floating is not None
        return LayoutNode(
            kind="text" if box.kind == "text" else "element",
            rect=box.rect(),
            depth=box.depth,
            element_id=box.element_id,
            paint=box.paint,
            text=box.text,
            clip=box.clip,
            click_event=box.click_event,
            item_indices=box.item_indices,
            floating=floating,
            pointer_target=box.kind == "element" and not (floating and not box.floating.capture_pointer),  # type: ignore[union-attr]
            dividers=tuple(box.dividers),
        )


def _intrinsic_size(axis: _Axis, content: float) -> float:
    if axis.mode == "fixed":
        return axis.value
    if axis.mode == "percent":
        return 0.0
    return axis.clamp(content)


def _grow(growers: list[_Box], remaining: float, horizontal: bool) -> None:
    """Hand out `remaining` in equal shares, dropping children that reach their max."""

    active = list(growers)
    while remaining > _EPS and active:
        share = remaining / len(active)
        still_growing: list[_Box] = []
        for child in active:
            size = child.size(horizontal)
            room = child.axis(horizontal).max - size
            add = min(share, room)
            child.set_size(horizontal, size + add)
            remaining -= add
            if room > share:
                still_growing.append(child)
        active = still_growing


def _align_offset(align: str, leftover: float) -> float:
    if align == "center":
        return leftover / 2.0
    if align in ("right", "bottom"):
        return leftover
    return 0.0


def _corner_point(x: float, y: float, w: float, h: float, corner: str) -> tuple[float, float]:
    vertical, _, horizontal = corner.partition("-")
    if corner == "center":
        vertical, horizontal = "center", "center"
    px = {"left": x, "center": x + w / 2.0, "right": x + w}[horizontal]
    py = {"top": y, "center": y + h / 2.0, "bottom": y + h}[vertical]
    return px, py


def _shift(box: _Box, dx: float, dy: float) -> None:
    if dx == 0.0 and dy == 0.0:
        return
    box.x += dx
    box.y += dy
    if box.clip is not None:
        box.clip = box.clip.translated(dx, dy)
    box.dividers = [d.translated(dx, dy) for d in box.dividers]
    for child in box.children:
        _shift(child, dx, dy)


def _enclosing_floats(box: _Box, inclusive: bool = False) -> list[_Box]:
    out: list[_Box] = []
    node = box if inclusive else box.parent
    while node is not None:
        if node.floating is not None:
            out.append(node)
        node = node.parent
    out.reverse()
    return out
