from __future__ import annotations

from PIL import ImageColor


RGBA = tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)
WHITE: RGBA = (255, 255, 255, 255)


def parse_color(value: str) -> RGBA:
    """Parse a CSS color (`#rgb`, `#rrggbb`, `#rrggbbaa`, `rgb()`, named) into RGBA255."""

    raw = value.strip()
    if not raw:
        raise ValueError("color must be non-empty")
    try:
        r, g, b, a = ImageColor.getcolor(raw, "RGBA")
    except ValueError as exc:
        raise ValueError(f"invalid color: {value}") from exc
    return (int(r), int(g), int(b), int(a))


def to_hex(color: RGBA) -> str:
    if color[3] == 255:
        return f"#{color[0]:02x}{color[1]:02x}{color[2]:02x}"
    return f"#{color[0]:02x}{color[1]:02x}{color[2]:02x}{color[3]:02x}"
