from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Protocol

import numpy as np
import torch
from PIL import Image

from trellis_ui.layout.tree import LayoutNode, LayoutTree, Rect
from trellis_ui.style.color import RGBA

from .fonts import FontLibrary


LOGGER = logging.getLogger(__name__)

_Bounds = tuple[int, int, int, int]


class LayoutRenderer(Protocol):
    def render(self, layout: LayoutTree) -> object:
        ...


@dataclass
class MatrixLayoutRenderer:
    """Torch-first reference backend that rasterizes a layout tree into RGBA255."""

    fonts: FontLibrary = field(default_factory=FontLibrary)
    images: dict[str, Image.Image] = field(default_factory=dict)
    clear_color: RGBA = (0, 0, 0, 255)
    _frame: torch.Tensor | None = None
    _grid_x: torch.Tensor | None = None
    _grid_y: torch.Tensor | None = None
    _missing_images: set[str] = field(default_factory=set)

    def register_image(self, name: str, image: Image.Image) -> None:
        if not name.strip():
            raise ValueError("image name must be non-empty")
        self.images[name] = image.convert("RGBA")

    def render(self, layout: LayoutTree) -> torch.Tensor:
        self.begin_frame(int(round(layout.viewport.width)), int(round(layout.viewport.height)))
        for node in layout.ordered_nodes_for_draw():
            if node.kind == "text":
                self._draw_text(node)
            else:
                self._draw_element(node)
        return self.end_frame()

    def begin_frame(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("frame dimensions must be > 0")
        self._frame = torch.zeros((height, width, 4), dtype=torch.uint8)
        for channel in range(4):
            self._frame[:, :, channel] = self.clear_color[channel]
        self._grid_x = torch.arange(width, dtype=torch.float32).unsqueeze(0).expand(height, width)
        self._grid_y = torch.arange(height, dtype=torch.float32).unsqueeze(1).expand(height, width)

    def end_frame(self) -> torch.Tensor:
        if self._frame is None:
            raise RuntimeError("begin_frame must be called before end_frame")
        out = self._frame.clone()
        self._frame = None
        self._grid_x = None
        self._grid_y = None
        return out

    def _draw_element(self, node: LayoutNode) -> None:
        paint = node.paint
        if paint is None:
            return
        clip = self._clip_bounds(node.clip)
        if paint.color is not None and paint.color[3] > 0:
            mask, x0, y0 = self._rounded_mask(node.rect, paint.radius, clip)
            if mask is not None:
                self._blend_mask(mask, x=x0, y=y0, color=paint.color)
        if paint.image is not None:
            self._draw_image(paint.image, node.rect, clip)
        border = paint.border
        if border is not None and border.visible:
            outer, x0, y0 = self._rounded_mask(node.rect, paint.radius, clip)
            if outer is not None:
                inner_rect = Rect(
                    node.rect.x + border.left,
                    node.rect.y + border.top,
                    max(0.0, node.rect.width - border.left - border.right),
                    max(0.0, node.rect.height - border.top - border.bottom),
                )
                inset = max(border.left, border.right, border.top, border.bottom)
                inner_radius = tuple(max(0.0, r - inset) for r in paint.radius)
                inner = self._rect_mask(inner_rect, inner_radius, x0, y0, outer.shape[1], outer.shape[0])
                self._blend_mask(outer & ~inner, x=x0, y=y0, color=border.color)
            if border.between_children > 0:
                divider_clip = self._intersect_bounds(clip, _rect_bounds(node.rect))
                for divider in node.dividers:
                    mask, dx0, dy0 = self._rounded_mask(divider, (0.0, 0.0, 0.0, 0.0), divider_clip)
                    if mask is not None:
                        self._blend_mask(mask, x=dx0, y=dy0, color=border.color)

    def _draw_image(self, name: str, rect: Rect, clip: _Bounds) -> None:
        image = self.images.get(name)
        if image is None:
            if name not in self._missing_images:
                self._missing_images.add(name)
                LOGGER.warning("image `%s` is not registered with the renderer", name)
            return
        width = int(round(rect.width))
        height = int(round(rect.height))
        if width <= 0 or height <= 0:
            return
        patch = np.asarray(image.resize((width, height), Image.Resampling.BILINEAR), dtype=np.float32)
        self._composite(
            patch[:, :, :3],
            patch[:, :, 3] / 255.0,
            x=int(round(rect.x)),
            y=int(round(rect.y)),
            clip=clip,
        )

    def _draw_text(self, node: LayoutNode) -> None:
        text = node.text
        if text is None or not text.text:
            return
        clip = self._clip_bounds(node.clip)
        atlas = self.fonts.atlas(text.font)
        line_h = self.fonts.line_height(text.font)
        for i, line in enumerate(text.text.split("\n")):
            width = atlas.line_advance(line)
            if text.align == "center":
                cursor = node.rect.x + (node.rect.width - width) / 2.0
            elif text.align == "right":
                cursor = node.rect.x + node.rect.width - width
            else:
                cursor = node.rect.x
            top_y = node.rect.y + i * line_h
            for ch in line:
                glyph = atlas.glyph(ch)
                cov = glyph.alpha_mask.astype(np.float32) / 255.0
                self._composite(
                    np.broadcast_to(np.asarray(text.color[:3], dtype=np.float32), cov.shape + (3,)),
                    cov * (text.color[3] / 255.0),
                    x=int(round(cursor + glyph.x_offset)),
                    y=int(round(top_y + glyph.y_offset)),
                    clip=clip,
                )
                cursor += glyph.advance

    def _clip_bounds(self, clip: Rect | None) -> _Bounds:
        assert self._frame is not None
        frame_bounds = (0, 0, int(self._frame.shape[1]), int(self._frame.shape[0]))
        if clip is None:
            return frame_bounds
        return self._intersect_bounds(frame_bounds, _rect_bounds(clip))

    @staticmethod
    def _intersect_bounds(a: _Bounds, b: _Bounds) -> _Bounds:
        return (max(a[0], b[0]), max(a[1], b[1]), min(a[2], b[2]), min(a[3], b[3]))

    def _rounded_mask(
        self,
        rect: Rect,
        radius: tuple[float, float, float, float],
        clip: _Bounds,
    ) -> tuple[torch.Tensor | None, int, int]:
        x0, y0, x1, y1 = self._intersect_bounds(_rect_bounds(rect), clip)
        if x1 <= x0 or y1 <= y0:
            return None, x0, y0
        return self._rect_mask(rect, radius, x0, y0, x1 - x0, y1 - y0), x0, y0

    def _rect_mask(
        self,
        rect: Rect,
        radius: tuple[float, float, float, float],
        x0: int,
        y0: int,
        width: int,
        height: int,
    ) -> torch.Tensor:
        assert self._grid_x is not None and self._grid_y is not None
        gx = self._grid_x[y0 : y0 + height, x0 : x0 + width] + 0.5
        gy = self._grid_y[y0 : y0 + height, x0 : x0 + width] + 0.5
        mask = (gx >= rect.x) & (gx < rect.right) & (gy >= rect.y) & (gy < rect.bottom)
        limit = min(rect.width, rect.height) / 2.0
        tl, tr, bl, br = (min(r, limit) for r in radius)
        corners = (
            (tl, rect.x + tl, rect.y + tl, gx < rect.x + tl, gy < rect.y + tl),
            (tr, rect.right - tr, rect.y + tr, gx > rect.right - tr, gy < rect.y + tr),
            (bl, rect.x + bl, rect.bottom - bl, gx < rect.x + bl, gy > rect.bottom - bl),
            (br, rect.right - br, rect.bottom - br, gx > rect.right - br, gy > rect.bottom - br),
        )
        for r, cx, cy, in_x, in_y in corners:
            if r <= 0:
                continue
            outside = ((gx - cx) ** 2 + (gy - cy) ** 2) > (r * r)
            mask &= ~(in_x & in_y & outside)
        return mask

    def _blend_mask(self, mask: torch.Tensor, *, x: int, y: int, color: RGBA) -> None:
        if self._frame is None:
            return
        h, w = mask.shape
        if h <= 0 or w <= 0 or not bool(mask.any()):
            return
        alpha = color[3] / 255.0
        if alpha <= 0:
            return
        region = self._frame[y : y + h, x : x + w, :3]
        dst = region.to(torch.float32)
        src = torch.tensor(color[:3], dtype=torch.float32).view(1, 1, 3)
        blended = torch.clamp(src * alpha + dst * (1.0 - alpha), 0, 255).to(torch.uint8)
        self._frame[y : y + h, x : x + w, :3] = torch.where(mask.unsqueeze(-1), blended, region)
        self._frame[y : y + h, x : x + w, 3] = torch.where(
            mask, torch.full_like(mask, 255, dtype=torch.uint8), self._frame[y : y + h, x : x + w, 3]
        )

    def _composite(self, src_rgb: np.ndarray, src_alpha: np.ndarray, *, x: int, y: int, clip: _Bounds) -> None:
        if self._frame is None:
            return
        h, w = src_alpha.shape
        if h <= 0 or w <= 0:
            return
        x0, y0, x1, y1 = self._intersect_bounds((x, y, x + w, y + h), clip)
        if x1 <= x0 or y1 <= y0:
            return
        sx0 = x0 - x
        sy0 = y0 - y
        alpha = src_alpha[sy0 : sy0 + (y1 - y0), sx0 : sx0 + (x1 - x0)]
        if not np.any(alpha > 0):
            return
        rgb = src_rgb[sy0 : sy0 + (y1 - y0), sx0 : sx0 + (x1 - x0)]

        patch = self._frame[y0:y1, x0:x1]
        dst_rgb = patch[:, :, :3].to(torch.float32).cpu().numpy()
        dst_alpha = patch[:, :, 3].to(torch.float32).cpu().numpy() / 255.0

        out_alpha = alpha + dst_alpha * (1.0 - alpha)
        out_rgb_num = rgb * alpha[:, :, None] + dst_rgb * dst_alpha[:, :, None] * (1.0 - alpha[:, :, None])
        safe = np.where(out_alpha > 1e-6, out_alpha, 1.0)
        out_rgb = out_rgb_num / safe[:, :, None]

        patch[:, :, :3] = torch.from_numpy(np.clip(out_rgb, 0, 255).astype(np.uint8))
        patch[:, :, 3] = torch.from_numpy(np.clip(out_alpha * 255.0, 0, 255).astype(np.uint8))


def _rect_bounds(rect: Rect) -> _Bounds:
    return (
        int(np.floor(rect.x)),
        int(np.floor(rect.y)),
        int(np.ceil(rect.right)),
        int(np.ceil(rect.bottom)),
    )


def frame_to_image(frame: torch.Tensor) -> Image.Image:
    """Wrap an `H x W x 4` uint8 frame as a Pillow RGBA image."""

    if frame.ndim != 3 or frame.shape[2] != 4:
        raise ValueError("frame must be H x W x 4")
    return Image.fromarray(frame.cpu().numpy().astype(np.uint8))
