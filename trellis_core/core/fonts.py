from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import logging
from pathlib import Path
from typing import Mapping

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from trellis_ui.text.measure import FontStyle, TextLayoutMetrics, TextMeasureRequest


LOGGER = logging.getLogger(__name__)

PillowFont = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True)
class GlyphBitmap:
    alpha_mask: np.ndarray
    x_offset: int
    y_offset: int
    advance: float


@dataclass
class FontAtlas:
    key: tuple[str, int]
    font: PillowFont
    size_px: float
    ascent: float
    descent: float
    line_height: float
    glyphs: dict[str, GlyphBitmap] = field(default_factory=dict)

    def glyph(self, ch: str) -> GlyphBitmap:
        cached = self.glyphs.get(ch)
        if cached is not None:
            return cached
        glyph = _rasterize_glyph(self.font, self.size_px, ch)
        self.glyphs[ch] = glyph
        return glyph

    def line_advance(self, line: str) -> float:
        return sum(self.glyph(ch).advance for ch in line)


class FontLibrary:
    """Font id to Pillow font atlas mapping, cached per (path, size)."""

    def __init__(self, font_paths: Mapping[int, str | Path] | None = None) -> None:
        self._font_paths = {int(k): str(Path(v).expanduser()) for k, v in (font_paths or {}).items()}
        self._atlases: dict[tuple[str, int], FontAtlas] = {}

    def register_font(self, font_id: int, path: str | Path) -> None:
        if font_id < 0:
            raise ValueError("font_id must be >= 0")
        self._font_paths[font_id] = str(Path(path).expanduser())

    def path_for(self, font_id: int) -> str:
        path = self._font_paths.get(font_id)
        if path is None:
            path = self._font_paths.get(0) or _resolve_system_font_path()
        return path

    def atlas(self, font: FontStyle) -> FontAtlas:
        font_path = self.path_for(font.font_id)
        key = (font_path, int(round(font.font_size_px * 100)))
        cached = self._atlases.get(key)
        if cached is not None:
            return cached
        loaded = _load_font(font_path, font.font_size_px)
        ascent, descent = _font_metrics(loaded, font.font_size_px)
        atlas = FontAtlas(
            key=key,
            font=loaded,
            size_px=font.font_size_px,
            ascent=float(ascent),
            descent=float(descent),
            line_height=max(font.font_size_px, float(ascent + descent)),
        )
        self._atlases[key] = atlas
        return atlas

    def line_height(self, font: FontStyle) -> float:
        return font.line_height_px or self.atlas(font).line_height


class PillowTextMeasurer:
    """Text measurer backed by the same Pillow fonts the matrix renderer draws with."""

    def __init__(self, fonts: FontLibrary | None = None) -> None:
        self.fonts = fonts or FontLibrary()

    def measure_text(self, request: TextMeasureRequest) -> TextLayoutMetrics:
        atlas = self.fonts.atlas(request.font)
        lines = request.text.split("\n")
        widths = [atlas.line_advance(line) for line in lines]
        line_h = self.fonts.line_height(request.font)
        return TextLayoutMetrics(
            width_px=max(widths) if widths else 0.0,
            height_px=len(lines) * line_h,
            line_count=len(lines),
        )


@lru_cache(maxsize=64)
def _load_font(font_path: str, size_px: float) -> PillowFont:
    size = max(1, int(round(size_px)))
    if font_path:
        try:
            return ImageFont.truetype(font_path, size=size)
        except OSError as exc:
            LOGGER.warning("falling back to default font for %s: %s", font_path, exc)
    return ImageFont.load_default(size=size)


def _font_metrics(font: PillowFont, size_px: float) -> tuple[int, int]:
    if isinstance(font, ImageFont.FreeTypeFont):
        ascent, descent = font.getmetrics()
        return int(max(1, ascent)), int(max(0, descent))
    return int(max(1, size_px * 0.8)), int(max(0, size_px * 0.2))


def _rasterize_glyph(font: PillowFont, size_px: float, ch: str) -> GlyphBitmap:
    if ch == "":
        return GlyphBitmap(alpha_mask=np.zeros((1, 1), dtype=np.uint8), x_offset=0, y_offset=0, advance=0.0)
    left, top, right, bottom = font.getbbox(ch)
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), ch, fill=255, font=font)
    mask = np.asarray(image, dtype=np.uint8)
    advance = float(font.getlength(ch))
    if ch == " ":
        advance = max(advance, size_px * 0.33)
    return GlyphBitmap(alpha_mask=mask, x_offset=int(left), y_offset=int(top), advance=max(1.0, advance))


@lru_cache(maxsize=1)
def _resolve_system_font_path() -> str:
    patterns = ("dejavusansmono", "menlo", "monaco", "couriernew", "courier", "dejavusans")
    font_dirs = (
        Path.home() / "Library/Fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
    )
    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(sorted(base.rglob(ext)))
    for pattern in patterns:
        for path in candidates:
            if pattern in path.stem.lower().replace(" ", "").replace("-", ""):
                return str(path)
    if candidates:
        return str(candidates[0])
    return ""
