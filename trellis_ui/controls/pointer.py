from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping


PRIMARY_BUTTON = 1


@dataclass(frozen=True)
class PointerState:
    """Pointer position in layout coordinates plus a pressed-buttons bitmask."""

    x: float
    y: float
    buttons: int = 0

    def __post_init__(self) -> None:
        if self.buttons < 0:
            raise ValueError("pointer buttons bitmask must be >= 0")

    @property
    def primary_down(self) -> bool:
        return bool(self.buttons & PRIMARY_BUTTON)


OFFSCREEN = PointerState(x=-math.inf, y=-math.inf)


def parse_pointer_payload(payload: object, previous: PointerState | None = None) -> PointerState | None:
    """Parse a normalized host pointer payload (`x`, `y`, `buttons` or `phase`).

    Missing coordinates fall back to the previous pointer position; a `phase` of
    `down`/`up` toggles the primary button on top of the previous bitmask.
    """

    if not isinstance(payload, Mapping):
        return None
    base = previous or OFFSCREEN
    x, y = base.x, base.y
    if "x" in payload and "y" in payload:
        try:
            x, y = float(payload["x"]), float(payload["y"])
        except (TypeError, ValueError):
            return None
    buttons = base.buttons
    if "buttons" in payload:
        try:
            buttons = int(payload["buttons"])
        except (TypeError, ValueError):
            return None
    phase = payload.get("phase")
    if phase == "down":
        buttons |= PRIMARY_BUTTON
    elif phase in ("up", "cancel"):
        buttons &= ~PRIMARY_BUTTON
    if buttons < 0:
        return None
    return PointerState(x=x, y=y, buttons=buttons)
