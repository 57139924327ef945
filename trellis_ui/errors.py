from __future__ import annotations


class TrellisError(Exception):
    """Base class for every error raised by the Trellis engine."""


class CompileError(TrellisError, ValueError):
    """Markup could not be compiled; the previously active template stays live."""


class MalformedMarkup(CompileError):
    pass


class UnknownReusable(CompileError):
    def __init__(self, name: str, *, referenced_from: str) -> None:
        super().__init__(f"`{referenced_from}` uses undeclared reusable `{name}`")
        self.name = name
        self.referenced_from = referenced_from


class CyclicReuse(CompileError):
    def __init__(self, cycle: tuple[str, ...]) -> None:
        super().__init__("cyclic reuse: " + " -> ".join(cycle))
        self.cycle = cycle


class UnboundLocal(CompileError):
    def __init__(self, reusable: str, local: str) -> None:
        super().__init__(f"reusable `{reusable}` references local `{local}` with no value and no default")
        self.reusable = reusable
        self.local = local


class BindingError(TrellisError, LookupError):
    """A binding lookup failed; the solver recovers with a fallback value."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key


class UnboundKey(BindingError):
    def __init__(self, key: str) -> None:
        super().__init__(key, f"unbound key: {key}")


class WrongKind(BindingError):
    def __init__(self, key: str, expected: str, actual: object) -> None:
        super().__init__(key, f"key `{key}` expected {expected}, got {type(actual).__name__}")
        self.expected = expected
