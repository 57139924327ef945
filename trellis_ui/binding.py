from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

from .errors import BindingError, UnboundKey, WrongKind
from .style.color import RGBA, TRANSPARENT, parse_color
from .template.nodes import BindingRef, LiteralValue, ValueRef


LOGGER = logging.getLogger(__name__)


class BindingContext(Protocol):
    """Read-only host data for one frame.

    Every accessor raises `UnboundKey` for a missing key and `WrongKind` when the
    stored value is not of the requested kind.
    """

    def get_text(self, key: str) -> str:
        ...

    def get_bool(self, key: str) -> bool:
        ...

    def get_number(self, key: str) -> float:
        ...

    def get_list(self, key: str) -> Sequence["BindingContext"]:
        ...

    def get_event_name(self, key: str) -> str:
        ...


class MappingBindingContext:
    """Dict-backed binding context; list items may be mappings or contexts."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = dict(values or {})

    def _lookup(self, key: str) -> Any:
        if key not in self._values:
            raise UnboundKey(key)
        return self._values[key]

    def get_text(self, key: str) -> str:
        value = self._lookup(key)
        if not isinstance(value, str):
            raise WrongKind(key, "text", value)
        return value

    def get_bool(self, key: str) -> bool:
        value = self._lookup(key)
        if not isinstance(value, bool):
            raise WrongKind(key, "bool", value)
        return value

    def get_number(self, key: str) -> float:
        value = self._lookup(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise WrongKind(key, "number", value)
        return float(value)

    def get_list(self, key: str) -> Sequence[BindingContext]:
        value = self._lookup(key)
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise WrongKind(key, "list", value)
        items: list[BindingContext] = []
        for item in value:
            if isinstance(item, Mapping):
                items.append(MappingBindingContext(item))
            elif all(hasattr(item, name) for name in ("get_text", "get_bool", "get_list")):
                items.append(item)
            else:
                raise WrongKind(key, "list of mappings", item)
        return items

    def get_event_name(self, key: str) -> str:
        value = self._lookup(key)
        if not isinstance(value, str) or not value.strip():
            raise WrongKind(key, "event name", value)
        return value


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str
    key: str | None = None


class BindingScope:
    """Resolution chain for one node: innermost list item first, page bindings last.

    Lookups never raise; a failed lookup yields the kind's fallback and records a
    `Diagnostic` shared by every scope derived from the same root.
    """

    def __init__(
        self,
        context: BindingContext,
        *,
        item_bindings: Mapping[str, str] | None = None,
        parent: "BindingScope | None" = None,
        diagnostics: list[Diagnostic] | None = None,
    ) -> None:
        self._context = context
        self._item_bindings = dict(item_bindings or {})
        self._parent = parent
        self._diagnostics = diagnostics if diagnostics is not None else []

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    def report(self, code: str, message: str, key: str | None = None) -> None:
        self._diagnostics.append(Diagnostic(code=code, message=message, key=key))

    def child(self, context: BindingContext, item_bindings: Mapping[str, str]) -> "BindingScope":
        return BindingScope(context, item_bindings=item_bindings, parent=self, diagnostics=self._diagnostics)

    def _get(self, key: str, accessor: str) -> Any:
        scope: BindingScope | None = self
        while scope is not None:
            mapped = key in scope._item_bindings
            lookup = scope._item_bindings.get(key, key)
            try:
                return getattr(scope._context, accessor)(lookup)
            except UnboundKey:
                # an item-mapped local never falls through to outer scopes
                if mapped:
                    raise UnboundKey(lookup) from None
                if scope._parent is None:
                    raise UnboundKey(key) from None
            scope = scope._parent
        raise UnboundKey(key)

    def _recover(self, exc: BindingError, fallback: Any) -> Any:
        code = "wrong-kind" if isinstance(exc, WrongKind) else "unbound-key"
        self.report(code, str(exc), exc.key)
        LOGGER.debug("binding fallback for %s: %s", exc.key, exc)
        return fallback

    def text(self, ref: ValueRef) -> str:
        if isinstance(ref, LiteralValue):
            return str(ref.value)
        try:
            return self._get(ref.key, "get_text")
        except BindingError as exc:
            return self._recover(exc, "")

    def boolean(self, ref: ValueRef) -> bool:
        if isinstance(ref, LiteralValue):
            return bool(ref.value)
        try:
            return self._get(ref.key, "get_bool")
        except BindingError as exc:
            return self._recover(exc, False)

    def number(self, ref: ValueRef) -> float:
        if isinstance(ref, LiteralValue):
            return float(ref.value)  # type: ignore[arg-type]
        try:
            return self._get(ref.key, "get_number")
        except BindingError as exc:
            return self._recover(exc, 0.0)

    def items(self, key: str) -> Sequence[BindingContext]:
        try:
            return self._get(key, "get_list")
        except BindingError as exc:
            return self._recover(exc, [])

    def event(self, ref: ValueRef | None) -> str | None:
        if ref is None:
            return None
        if isinstance(ref, LiteralValue):
            return str(ref.value)
        try:
            return self._get(ref.key, "get_event_name")
        except BindingError as exc:
            return self._recover(exc, None)

    def color(self, ref: ValueRef, fallback: RGBA = TRANSPARENT) -> RGBA:
        if isinstance(ref, LiteralValue):
            return ref.value  # type: ignore[return-value]
        assert isinstance(ref, BindingRef)
        try:
            raw = self._get(ref.key, "get_text")
            return parse_color(raw)
        except BindingError as exc:
            return self._recover(exc, fallback)
        except ValueError:
            return self._recover(WrongKind(ref.key, "color", raw), fallback)
