from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, replace
from typing import Callable, Mapping

from ..errors import CompileError, CyclicReuse, MalformedMarkup, UnboundLocal, UnknownReusable
from ..style.color import parse_color
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
    ValueKind,
    ValueRef,
    walk,
)


LOGGER = logging.getLogger(__name__)

_XML_DECL = re.compile(r"^\s*<\?xml[^>]*\?>")
_SET_KINDS: dict[str, ValueKind] = {
    "set-text": "text",
    "set-bool": "bool",
    "set-numeric": "number",
    "set-color": "color",
    "set-event": "event",
    "set-image": "image",
}
_GET_KINDS: dict[str, ValueKind] = {
    "get-text": "text",
    "get-bool": "bool",
    "get-numeric": "number",
    "get-color": "color",
    "get-event": "event",
    "get-image": "image",
}


@dataclass(frozen=True)
class _Context:
    owner: str
    params: frozenset[str] = frozenset()
    list_locals: frozenset[str] = frozenset()

    def is_local(self, name: str) -> bool:
        return name in self.params or name in self.list_locals


def compile_markup(markup: str) -> CompiledTemplate:
    """Compile a markup document into an immutable, fully expanded template.

    Raises a `CompileError` subclass for malformed markup, unknown or cyclic
    reusables, and referenced locals that have neither a value nor a default.
    """

    root = _parse_document(markup)
    raw_pages: list[tuple[str, tuple[Node, ...]]] = []
    reusables: dict[str, ReusableDef] = {}
    for child in root:
        if child.tag == "page":
            name = _require_attr(child, "name")
            if any(existing == name for existing, _ in raw_pages):
                raise MalformedMarkup(f"duplicate page: {name}")
            raw_pages.append((name, _parse_children(list(child), _Context(owner=name))))
        elif child.tag == "reusable":
            reusable = _parse_reusable(child)
            if reusable.name in reusables:
                raise MalformedMarkup(f"duplicate reusable: {reusable.name}")
            reusables[reusable.name] = reusable
        else:
            raise MalformedMarkup(f"unexpected top-level tag <{child.tag}>")
    if not raw_pages:
        raise MalformedMarkup("markup declares no <page>")

    _check_reuse_graph(raw_pages, reusables)

    pages = tuple(
        PageDef(name=name, children=_with_paths(_expand(children, {}, frozenset(), name, reusables), ()))
        for name, children in raw_pages
    )
    LOGGER.debug("compiled %d page(s), %d reusable(s)", len(pages), len(reusables))
    return CompiledTemplate(pages=pages, reusables=reusables)


compile = compile_markup


def _parse_document(markup: str) -> ET.Element:
    body = _XML_DECL.sub("", markup, count=1)
    try:
        return ET.fromstring(f"<trellis-document>{body}</trellis-document>")
    except ET.ParseError as exc:
        raise MalformedMarkup(f"invalid markup: {exc}") from exc


def _parse_reusable(el: ET.Element) -> ReusableDef:
    name = _require_attr(el, "name")
    params: dict[str, ParamDecl] = {}
    body_elements: list[ET.Element] = []
    for child in el:
        if child.tag == "param":
            local = _require_attr(child, "local")
            params[local] = ParamDecl(local=local)
        elif child.tag in _SET_KINDS:
            kind = _SET_KINDS[child.tag]
            local = _require_attr(child, "local")
            params[local] = ParamDecl(local=local, default=_literal(child, "to", kind))
        elif child.tag in _GET_KINDS:
            kind = _GET_KINDS[child.tag]
            local = _require_attr(child, "local")
            params[local] = ParamDecl(local=local, default=BindingRef(_require_attr(child, "from"), kind))
        else:
            body_elements.append(child)
    ctx = _Context(owner=name, params=frozenset(params))
    return ReusableDef(name=name, params=params, body=_parse_children(body_elements, ctx))


def _parse_children(elements: list[ET.Element], ctx: _Context) -> tuple[Node, ...]:
    return tuple(_parse_node(el, ctx) for el in elements)


def _parse_node(el: ET.Element, ctx: _Context) -> Node:
    if el.tag == "element":
        node: Node = _parse_element(el, ctx)
    elif el.tag == "text-element":
        node = _parse_text(el, ctx)
    elif el.tag == "list":
        node = _parse_list(el, ctx)
    elif el.tag == "use":
        node = _parse_use(el)
    else:
        raise MalformedMarkup(f"unknown tag <{el.tag}> in `{ctx.owner}`")
    if "if" in el.attrib and "if-not" in el.attrib:
        raise MalformedMarkup(f"<{el.tag}> cannot carry both `if` and `if-not`")
    if "if" in el.attrib:
        return ConditionalNode(predicate=BindingRef(el.attrib["if"], "bool"), body=node)
    if "if-not" in el.attrib:
        return ConditionalNode(predicate=BindingRef(el.attrib["if-not"], "bool"), body=node, negate=True)
    return node


def _parse_element(el: ET.Element, ctx: _Context) -> ElementNode:
    style: StyleSpec | None = None
    children: list[ET.Element] = []
    for child in el:
        if child.tag == "element-config":
            if style is not None:
                raise MalformedMarkup("<element> accepts a single <element-config>")
            style = _parse_element_config(child, ctx)
        else:
            children.append(child)
    element_id = el.attrib.get("id")
    if element_id is not None and not element_id.strip():
        raise MalformedMarkup("element id must be non-empty")
    return ElementNode(
        style=style or StyleSpec(),
        children=_parse_children(children, ctx),
        element_id=element_id,
    )


def _parse_element_config(el: ET.Element, ctx: _Context) -> StyleSpec:
    props: dict[str, object] = {}
    hovered: dict[str, object] = {}
    clicked: dict[str, object] = {}
    emit: ValueRef | None = None
    for child in el:
        if child.tag == "hovered":
            for tag in child:
                _apply_config_tag(tag, hovered, ctx)
        elif child.tag == "clicked":
            name = child.attrib.get("emit")
            if name is not None:
                emit = BindingRef(name, "event") if ctx.is_local(name) else LiteralValue(name)
            for tag in child:
                _apply_config_tag(tag, clicked, ctx)
        else:
            _apply_config_tag(child, props, ctx)
    return StyleSpec(props=props, hovered=hovered, clicked=clicked, clicked_emit=emit)


def _apply_config_tag(el: ET.Element, props: dict[str, object], ctx: _Context) -> None:
    handler = _CONFIG_TAGS.get(el.tag)
    if handler is None:
        raise MalformedMarkup(f"unknown config tag <{el.tag}> in `{ctx.owner}`")
    handler(el, props, ctx)
    if el.tag.startswith("floating"):
        props["floating"] = True


def _parse_text(el: ET.Element, ctx: _Context) -> TextNode:
    props: dict[str, object] = {}
    content: ValueRef | None = None

    def take_content(child: ET.Element) -> bool:
        nonlocal content
        if child.tag == "content":
            value: ValueRef = LiteralValue((child.text or "").strip())
        elif child.tag == "dyn-content":
            value = BindingRef(_require_attr(child, "from"), "text")
        else:
            return False
        if content is not None:
            raise MalformedMarkup("<text-element> accepts a single content source")
        content = value
        return True

    for child in el:
        if take_content(child):
            continue
        if child.tag != "text-config":
            raise MalformedMarkup(f"unexpected <{child.tag}> in <text-element>")
        for tag in child:
            if take_content(tag):
                continue
            handler = _TEXT_TAGS.get(tag.tag)
            if handler is None:
                raise MalformedMarkup(f"unknown text config tag <{tag.tag}> in `{ctx.owner}`")
            handler(tag, props, ctx)
    if content is None:
        raise MalformedMarkup("<text-element> requires <content> or <dyn-content>")
    return TextNode(content=content, style=TextStyleSpec(props=props))


def _parse_list(el: ET.Element, ctx: _Context) -> ListNode:
    source_key = _require_attr(el, "src")
    item_bindings: dict[str, str] = {}
    body: list[ET.Element] = []
    for child in el:
        if child.tag in _GET_KINDS:
            item_bindings[_require_attr(child, "local")] = _require_attr(child, "from")
        else:
            body.append(child)
    inner = replace(ctx, list_locals=ctx.list_locals | frozenset(item_bindings))
    return ListNode(source_key=source_key, body=_parse_children(body, inner), item_bindings=item_bindings)


def _parse_use(el: ET.Element) -> ComponentUse:
    overrides: dict[str, ValueRef] = {}
    for child in el:
        local = _require_attr(child, "local")
        if child.tag in _SET_KINDS:
            overrides[local] = _literal(child, "to", _SET_KINDS[child.tag])
        elif child.tag in _GET_KINDS:
            overrides[local] = BindingRef(_require_attr(child, "from"), _GET_KINDS[child.tag])
        else:
            raise MalformedMarkup(f"unexpected <{child.tag}> in <use>")
    return ComponentUse(reusable_name=_require_attr(el, "name"), local_overrides=overrides)


def _check_reuse_graph(raw_pages: list[tuple[str, tuple[Node, ...]]], reusables: Mapping[str, ReusableDef]) -> None:
    graph: dict[str, list[str]] = {name: _uses(r.body) for name, r in reusables.items()}
    for owner, names in [(n, _uses(children)) for n, children in raw_pages] + list(graph.items()):
        for name in names:
            if name not in reusables:
                raise UnknownReusable(name, referenced_from=owner)

    done: set[str] = set()
    stack: list[str] = []

    def visit(name: str) -> None:
        if name in stack:
            raise CyclicReuse(tuple(stack[stack.index(name):]) + (name,))
        if name in done:
            return
        stack.append(name)
        for used in graph[name]:
            visit(used)
        stack.pop()
        done.add(name)

    for name in graph:
        visit(name)


def _uses(nodes: tuple[Node, ...]) -> list[str]:
    return [n.reusable_name for n in walk(nodes) if isinstance(n, ComponentUse)]


_Env = Mapping[str, "ValueRef | None"]


def _expand(
    nodes: tuple[Node, ...],
    env: _Env,
    shadow: frozenset[str],
    owner: str,
    reusables: Mapping[str, ReusableDef],
) -> tuple[Node, ...]:
    out: list[Node] = []
    for node in nodes:
        if isinstance(node, ElementNode):
            out.append(
                replace(
                    node,
                    style=_subst_style(node.style, env, shadow, owner),
                    children=_expand(node.children, env, shadow, owner, reusables),
                )
            )
        elif isinstance(node, TextNode):
            props = {k: _subst_prop(v, env, shadow, owner) for k, v in node.style.props.items()}
            out.append(
                replace(node, content=_subst(node.content, env, shadow, owner), style=TextStyleSpec(props=props))
            )
        elif isinstance(node, ListNode):
            source_key = node.source_key
            if source_key in env and source_key not in shadow:
                alias = _subst(BindingRef(source_key, "text"), env, shadow, owner)
                if not isinstance(alias, BindingRef):
                    raise MalformedMarkup(f"list source `{source_key}` in `{owner}` must alias a binding key")
                source_key = alias.key
            inner = shadow | frozenset(node.item_bindings)
            out.append(replace(node, source_key=source_key, body=_expand(node.body, env, inner, owner, reusables)))
        elif isinstance(node, ConditionalNode):
            predicate = _subst(node.predicate, env, shadow, owner)
            if isinstance(predicate, LiteralValue):
                if bool(predicate.value) != node.negate:
                    out.extend(_expand((node.body,), env, shadow, owner, reusables))
                continue
            for body in _expand((node.body,), env, shadow, owner, reusables):
                out.append(ConditionalNode(predicate=predicate, body=body, negate=node.negate))
        elif isinstance(node, ComponentUse):
            reusable = reusables[node.reusable_name]
            inner_env: dict[str, ValueRef | None] = {}
            for local, decl in reusable.params.items():
                inner_env[local] = decl.default
            for local, override in node.local_overrides.items():
                inner_env[local] = _subst(override, env, shadow, owner)
            out.extend(_expand(reusable.body, inner_env, frozenset(), reusable.name, reusables))
        else:
            raise CompileError(f"unsupported node: {type(node).__name__}")
    return tuple(out)


def _subst(ref: ValueRef, env: _Env, shadow: frozenset[str], owner: str) -> ValueRef:
    if not isinstance(ref, BindingRef) or ref.key not in env or ref.key in shadow:
        return ref
    value = env[ref.key]
    if value is None:
        raise UnboundLocal(owner, ref.key)
    if isinstance(value, BindingRef):
        return BindingRef(value.key, ref.kind)
    return LiteralValue(_coerce_literal(value.value, ref.kind, ref.key, owner))


def _subst_prop(value: object, env: _Env, shadow: frozenset[str], owner: str) -> object:
    if isinstance(value, (LiteralValue, BindingRef)):
        return _subst(value, env, shadow, owner)
    if isinstance(value, Sizing) and value.value is not None:
        return replace(value, value=_subst(value.value, env, shadow, owner))
    return value


def _subst_style(style: StyleSpec, env: _Env, shadow: frozenset[str], owner: str) -> StyleSpec:
    if not env:
        return style

    def sub(props: Mapping[str, object]) -> dict[str, object]:
        return {k: _subst_prop(v, env, shadow, owner) for k, v in props.items()}

    emit = style.clicked_emit
    return StyleSpec(
        props=sub(style.props),
        hovered=sub(style.hovered),
        clicked=sub(style.clicked),
        clicked_emit=None if emit is None else _subst(emit, env, shadow, owner),
    )


def _coerce_literal(value: object, kind: ValueKind, local: str, owner: str) -> object:
    if kind == "bool" and isinstance(value, bool):
        return value
    if kind == "number" and isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if kind in ("text", "event", "image") and isinstance(value, str):
        return value
    if kind == "color":
        if isinstance(value, tuple) and len(value) == 4:
            return value
        if isinstance(value, str):
            try:
                return parse_color(value)
            except ValueError as exc:
                raise MalformedMarkup(f"local `{local}` in `{owner}`: {exc}") from exc
    raise MalformedMarkup(f"local `{local}` in `{owner}` expects {kind}, got {type(value).__name__}")


def _with_paths(nodes: tuple[Node, ...], prefix: tuple[int, ...]) -> tuple[Node, ...]:
    out: list[Node] = []
    for index, node in enumerate(nodes):
        path = prefix + (index,)
        if isinstance(node, ElementNode):
            out.append(replace(node, path=path, children=_with_paths(node.children, path)))
        elif isinstance(node, ListNode):
            out.append(replace(node, path=path, body=_with_paths(node.body, path)))
        elif isinstance(node, ConditionalNode):
            out.append(replace(node, path=path, body=_with_paths((node.body,), path)[0]))
        else:
            out.append(replace(node, path=path))
    return tuple(out)


def _require_attr(el: ET.Element, name: str) -> str:
    value = el.attrib.get(name)
    if value is None or not value.strip():
        raise MalformedMarkup(f"<{el.tag}> requires attribute `{name}`")
    return value


def _number(el: ET.Element, name: str, default: float | None = None) -> float:
    raw = el.attrib.get(name)
    if raw is None:
        if default is None:
            raise MalformedMarkup(f"<{el.tag}> requires attribute `{name}`")
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise MalformedMarkup(f"<{el.tag}> `{name}` must be a number, got {raw!r}") from exc


def _bool(el: ET.Element, name: str, default: bool | None = None) -> bool:
    raw = el.attrib.get(name)
    if raw is None:
        if default is None:
            raise MalformedMarkup(f"<{el.tag}> requires attribute `{name}`")
        return default
    lowered = raw.strip().lower()
    if lowered in ("true", "yes", "1"):
        return True
    if lowered in ("false", "no", "0"):
        return False
    raise MalformedMarkup(f"<{el.tag}> `{name}` must be true/false, got {raw!r}")


def _color(el: ET.Element, name: str) -> tuple[int, int, int, int]:
    raw = _require_attr(el, name)
    try:
        return parse_color(raw)
    except ValueError as exc:
        raise MalformedMarkup(f"<{el.tag}> {exc}") from exc


def _literal(el: ET.Element, name: str, kind: ValueKind) -> LiteralValue:
    if kind == "number":
        return LiteralValue(_number(el, name))
    if kind == "bool":
        return LiteralValue(_bool(el, name))
    if kind == "color":
        return LiteralValue(_color(el, name))
    raw = el.attrib.get(name)
    if raw is None:
        raise MalformedMarkup(f"<{el.tag}> requires attribute `{name}`")
    return LiteralValue(raw)


def _number_ref(el: ET.Element, literal_attr: str, default: float | None = None) -> ValueRef:
    if "from" in el.attrib:
        return BindingRef(_require_attr(el, "from"), "number")
    return LiteralValue(_number(el, literal_attr, default))


def _color_ref(el: ET.Element, literal_attr: str = "is") -> ValueRef:
    if "from" in el.attrib:
        return BindingRef(_require_attr(el, "from"), "color")
    return LiteralValue(_color(el, literal_attr))


def _sizing(el: ET.Element, mode: str, value: ValueRef | None = None) -> Sizing:
    low = _number(el, "min", 0.0)
    high = _number(el, "max", float("inf"))
    try:
        return Sizing(mode=mode, value=value, min=low, max=high)  # type: ignore[arg-type]
    except ValueError as exc:
        raise MalformedMarkup(f"<{el.tag}> {exc}") from exc


def _corner_attr(el: ET.Element) -> str:
    for name, raw in el.attrib.items():
        if name in CORNERS and raw.strip().lower() == "true":
            return name
    raise MalformedMarkup(f"<{el.tag}> requires one corner attribute set to true")


def _choice(el: ET.Element, name: str, allowed: tuple[str, ...]) -> str:
    value = _require_attr(el, name)
    if value not in allowed:
        raise MalformedMarkup(f"<{el.tag}> `{name}` must be one of {', '.join(allowed)}")
    return value


_ConfigHandler = Callable[[ET.Element, dict, _Context], None]


def _sides(prefix: str, sides: tuple[str, ...]) -> _ConfigHandler:
    def handler(el: ET.Element, props: dict, ctx: _Context) -> None:
        value = _number_ref(el, "is")
        for side in sides:
            props[f"{prefix}_{side}"] = value

    return handler


def _percent(axis: str) -> _ConfigHandler:
    def handler(el: ET.Element, props: dict, ctx: _Context) -> None:
        value = _number_ref(el, "at")
        if isinstance(value, LiteralValue) and not 0.0 <= float(value.value) <= 1.0:  # type: ignore[arg-type]
            raise MalformedMarkup(f"<{el.tag}> `at` must be within 0..1")
        props[axis] = _sizing(el, "percent", value)

    return handler


def _axis(axis: str, mode: str) -> _ConfigHandler:
    def handler(el: ET.Element, props: dict, ctx: _Context) -> None:
        value = _number_ref(el, "at") if mode == "fixed" else None
        props[axis] = _sizing(el, mode, value)

    return handler


def _grow_all(el: ET.Element, props: dict, ctx: _Context) -> None:
    props["width"] = Sizing("grow")
    props["height"] = Sizing("grow")


def _image(el: ET.Element, props: dict, ctx: _Context) -> None:
    if "from" in el.attrib:
        props["image"] = BindingRef(_require_attr(el, "from"), "image")
        return
    name = _require_attr(el, "src")
    props["image"] = BindingRef(name, "image") if ctx.is_local(name) else LiteralValue(name)


def _element_id(el: ET.Element, props: dict, ctx: _Context) -> None:
    if "from" in el.attrib:
        props["id"] = BindingRef(_require_attr(el, "from"), "text")
    else:
        props["id"] = LiteralValue(_require_attr(el, "is"))


def _floating(el: ET.Element, props: dict, ctx: _Context) -> None:
    if "anchor" in el.attrib:
        corner = _choice(el, "anchor", CORNERS)
        props["floating_attach_parent"] = corner
        props["floating_attach_element"] = corner


def _floating_offset(el: ET.Element, props: dict, ctx: _Context) -> None:
    props["floating_offset_x"] = (
        BindingRef(el.attrib["x-from"], "number") if "x-from" in el.attrib else LiteralValue(_number(el, "x", 0.0))
    )
    props["floating_offset_y"] = (
        BindingRef(el.attrib["y-from"], "number") if "y-from" in el.attrib else LiteralValue(_number(el, "y", 0.0))
    )


def _floating_size(el: ET.Element, props: dict, ctx: _Context) -> None:
    props["floating_expand_width"] = LiteralValue(_number(el, "width", 0.0))
    props["floating_expand_height"] = LiteralValue(_number(el, "height", 0.0))


def _floating_attach_to_element(el: ET.Element, props: dict, ctx: _Context) -> None:
    props["floating_attach_to"] = "element"
    props["floating_target"] = _require_attr(el, "id")


def _set(key: str, value: object) -> _ConfigHandler:
    def handler(el: ET.Element, props: dict, ctx: _Context) -> None:
        props[key] = value

    return handler


def _attr(key: str, read: Callable[[ET.Element], object]) -> _ConfigHandler:
    def handler(el: ET.Element, props: dict, ctx: _Context) -> None:
        props[key] = read(el)

    return handler


_ALL_SIDES = ("left", "right", "top", "bottom")
_ALL_CORNERS = ("top_left", "top_right", "bottom_left", "bottom_right")

_CONFIG_TAGS: dict[str, _ConfigHandler] = {
    "grow": _grow_all,
    "width-grow": _axis("width", "grow"),
    "height-grow": _axis("height", "grow"),
    "width-fit": _axis("width", "fit"),
    "height-fit": _axis("height", "fit"),
    "width-fixed": _axis("width", "fixed"),
    "height-fixed": _axis("height", "fixed"),
    "width-percent": _percent("width"),
    "height-percent": _percent("height"),
    "padding-all": _sides("padding", _ALL_SIDES),
    "padding-left": _sides("padding", ("left",)),
    "padding-right": _sides("padding", ("right",)),
    "padding-top": _sides("padding", ("top",)),
    "padding-bottom": _sides("padding", ("bottom",)),
    "child-gap": _attr("child_gap", lambda el: _number_ref(el, "is")),
    "direction": _attr("direction", lambda el: _choice(el, "is", ("ttb", "ltr"))),
    "align-children-x": _attr("align_x", lambda el: _choice(el, "to", ("left", "center", "right"))),
    "align-children-y": _attr("align_y", lambda el: _choice(el, "to", ("top", "center", "bottom"))),
    "color": _attr("color", _color_ref),
    "dyn-color": _attr("color", lambda el: BindingRef(_require_attr(el, "from"), "color")),
    "radius-all": _sides("radius", _ALL_CORNERS),
    "radius-top-left": _sides("radius", ("top_left",)),
    "radius-top-right": _sides("radius", ("top_right",)),
    "radius-bottom-left": _sides("radius", ("bottom_left",)),
    "radius-bottom-right": _sides("radius", ("bottom_right",)),
    "border-color": _attr("border_color", _color_ref),
    "border-dynamic-color": _attr("border_color", lambda el: BindingRef(_require_attr(el, "from"), "color")),
    "border-all": _sides("border", _ALL_SIDES),
    "border-left": _sides("border", ("left",)),
    "border-right": _sides("border", ("right",)),
    "border-top": _sides("border", ("top",)),
    "border-bottom": _sides("border", ("bottom",)),
    "border-between-children": _attr("border_between_children", lambda el: _number_ref(el, "is")),
    "scroll": lambda el, props, ctx: props.update(
        scroll_vertical=_bool(el, "vertical", False), scroll_horizontal=_bool(el, "horizontal", False)
    ),
    "image": _image,
    "id": _element_id,
    "floating": _floating,
    "floating-offset": _floating_offset,
    "floating-size": _floating_size,
    "floating-z-index": _attr("floating_z_index", lambda el: _number_ref(el, "z")),
    "floating-attach-to-parent": _attr("floating_attach_parent", _corner_attr),
    "floating-attach-element": _attr("floating_attach_element", _corner_attr),
    "floating-attach-to-element": _floating_attach_to_element,
    "floating-attach-to-root": _set("floating_attach_to", "root"),
    "floating-capture-pointer": _attr("floating_capture_pointer", lambda el: _bool(el, "state")),
}

_TEXT_TAGS: dict[str, _ConfigHandler] = {
    "font-id": _attr("font_id", lambda el: _number_ref(el, "is")),
    "font-size": _attr("font_size", lambda el: _number_ref(el, "is")),
    "line-height": _attr("line_height", lambda el: _number_ref(el, "is")),
    "color": _attr("color", _color_ref),
    "dyn-color": _attr("color", lambda el: BindingRef(_require_attr(el, "from"), "color")),
    "text-align-left": _set("align", "left"),
    "text-align-center": _set("align", "center"),
    "text-align-right": _set("align", "right"),
}
