from .compiler import compile_markup
from .nodes import (
    CORNERS,
    BindingRef,
    CompiledTemplate,
    ComponentUse,
    ConditionalNode,
    ElementNode,
    ListNode,
    LiteralValue,
    Node,
    PageDef,
    ParamDecl,
    ReusableDef,
    Sizing,
    StyleSpec,
    TextNode,
    TextStyleSpec,
    ValueRef,
    walk,
)

__all__ = [
    "CORNERS",
    "BindingRef",
    "CompiledTemplate",
    "ComponentUse",
    "ConditionalNode",
    "ElementNode",
    "ListNode",
    "LiteralValue",
    "Node",
    "PageDef",
    "ParamDecl",
    "ReusableDef",
    "Sizing",
    "StyleSpec",
    "TextNode",
    "TextStyleSpec",
    "ValueRef",
    "compile_markup",
    "walk",
]
