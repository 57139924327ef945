from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class FontStyle:
    """Font selection for a text leaf.

    `font_id` indexes the host's font table; `line_height_px` of 0 means the
    measurer derives it from the font size.
    """

    font_id: int = 0
    font_size_px: float = 16.0
    line_height_px: float = 0.0

    def __post_init__(self) -> None:
        if self.font_id < 0:
            raise ValueError("FontStyle `font_id` must be >= 0")
        if self.font_size_px <= 0:
            raise ValueError("FontStyle `font_size_px` must be > 0")
        if self.line_height_px < 0:
            raise ValueError("FontStyle `line_height_px` must be >= 0")


@dataclass(frozen=True)
class TextMeasureRequest:
    text: str
    font: FontStyle


@dataclass(frozen=True)
class TextLayoutMetrics:
    width_px: float
    height_px: float
    line_count: int = 1


class TextMeasurer(Protocol):
    """Pure text extent function consulted during the intrinsic sizing pass."""

    def measure_text(self, request: TextMeasureRequest) -> TextLayoutMetrics:
        ...


class MonospaceTextMeasurer:
    """Fixed-advance measurer; deterministic and font-file free."""

    def __init__(self, advance_ratio: float = 0.6, line_height_ratio: float = 1.2) -> None:
        if advance_ratio <= 0 or line_height_ratio <= 0:
            raise ValueError("measurer ratios must be > 0")
        self._advance_ratio = advance_ratio
        self._line_height_ratio = line_height_ratio

    def measure_text(self, request: TextMeasureRequest) -> TextLayoutMetrics:
        lines = request.text.split("\n")
        size = request.font.font_size_px
        line_height = request.font.line_height_px or size * self._line_height_ratio
        longest = max(len(line) for line in lines)
        return TextLayoutMetrics(
            width_px=longest * size * self._advance_ratio,
            height_px=len(lines) * line_height,
            line_count=len(lines),
        )
