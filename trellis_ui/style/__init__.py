from .color import RGBA, TRANSPARENT, WHITE, parse_color, to_hex

__all__ = ["RGBA", "TRANSPARENT", "WHITE", "parse_color", "to_hex"]
