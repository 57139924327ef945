from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Mapping, Union


ValueKind = Literal["text", "bool", "number", "event", "color", "image"]
Corner = Literal[
    "top-left",
    "top-center",
    "top-right",
    "center-left",
    "center",
    "center-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
]
CORNERS: tuple[str, ...] = (
    "top-left",
    "top-center",
    "top-right",
    "center-left",
    "center",
    "center-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
)
SizingMode = Literal["fit", "grow", "fixed", "percent"]
Direction = Literal["ttb", "ltr"]
FloatTarget = Literal["parent", "element", "root"]


@dataclass(frozen=True)
class LiteralValue:
    value: object


@dataclass(frozen=True)
class BindingRef:
    key: str
    kind: ValueKind

    def __post_init__(self) -> None:
        if not self.key.strip():
            raise ValueError("binding key must be non-empty")


ValueRef = Union[LiteralValue, BindingRef]


@dataclass(frozen=True)
class Sizing:
    mode: SizingMode = "fit"
    value: ValueRef | None = None
    min: float = 0.0
    max: float = math.inf

    def __post_init__(self) -> None:
        if self.mode in ("fixed", "percent") and self.value is None:
            raise ValueError(f"{self.mode} sizing requires a value")
        if self.min < 0:
            raise ValueError("sizing min must be >= 0")
        if self.max < self.min:
            raise ValueError("sizing max must be >= min")


@dataclass(frozen=True)
class StyleSpec:
    """Element layout/paint properties keyed by property name.

    Values are either structural (a `Sizing`, a direction, a corner, a bool) or a
    `ValueRef` resolved against the binding scope each frame. `hovered` and
    `clicked` hold overrides that replace base entries while that state is active.
    """

    props: Mapping[str, object] = field(default_factory=dict)
    hovered: Mapping[str, object] = field(default_factory=dict)
    clicked: Mapping[str, object] = field(default_factory=dict)
    clicked_emit: ValueRef | None = None

    def variant(self, *, hovered: bool, clicked: bool) -> dict[str, object]:
        out = dict(self.props)
        if hovered:
            out.update(self.hovered)
        if clicked:
            out.update(self.clicked)
        return out


@dataclass(frozen=True)
class TextStyleSpec:
    props: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class ElementNode:
    style: StyleSpec = field(default_factory=StyleSpec)
    children: tuple["Node", ...] = ()
    element_id: str | None = None
    path: tuple[int, ...] = ()


@dataclass(frozen=True)
class TextNode:
    content: ValueRef
    style: TextStyleSpec = field(default_factory=TextStyleSpec)
    path: tuple[int, ...] = ()


@dataclass(frozen=True)
class ListNode:
    source_key: str
    body: tuple["Node", ...]
    item_bindings: Mapping[str, str] = field(default_factory=dict)
    path: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not self.source_key.strip():
            raise ValueError("list source key must be non-empty")


@dataclass(frozen=True)
class ConditionalNode:
    predicate: ValueRef
    body: "Node"
    negate: bool = False
    path: tuple[int, ...] = ()


@dataclass(frozen=True)
class ComponentUse:
    reusable_name: str
    local_overrides: Mapping[str, ValueRef] = field(default_factory=dict)
    path: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not self.reusable_name.strip():
            raise ValueError("reusable name must be non-empty")


Node = Union[ElementNode, TextNode, ListNode, ConditionalNode, ComponentUse]


@dataclass(frozen=True)
class ParamDecl:
    local: str
    default: ValueRef | None = None


@dataclass(frozen=True)
class ReusableDef:
    name: str
    params: Mapping[str, ParamDecl]
    body: tuple[Node, ...]


@dataclass(frozen=True)
class PageDef:
    name: str
    children: tuple[Node, ...]


@dataclass(frozen=True)
class CompiledTemplate:
    pages: tuple[PageDef, ...]
    reusables: Mapping[str, ReusableDef] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.pages:
            raise ValueError("compiled template requires at least one page")
        names = [p.name for p in self.pages]
        if len(set(names)) != len(names):
            raise ValueError("page names must be unique")

    @property
    def page_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.pages)

    def page(self, name: str | None = None) -> PageDef:
        if name is None:
            return self.pages[0]
        for page in self.pages:
            if page.name == name:
                return page
        raise KeyError(f"unknown page: {name}")


def walk(nodes: tuple[Node, ...]):
    """Yield every node in pre-order, descending through all node kinds."""

    for node in nodes:
        yield node
        if isinstance(node, ElementNode):
            yield from walk(node.children)
        elif isinstance(node, ListNode):
            yield from walk(node.body)
        elif isinstance(node, ConditionalNode):
            yield from walk((node.body,))
