"""Text measurement contract for the layout solver."""

from .measure import FontStyle, MonospaceTextMeasurer, TextLayoutMetrics, TextMeasurer, TextMeasureRequest

__all__ = [
    "FontStyle",
    "MonospaceTextMeasurer",
    "TextLayoutMetrics",
    "TextMeasureRequest",
    "TextMeasurer",
]
