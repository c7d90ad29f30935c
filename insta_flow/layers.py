"""Canvas drawing shared by still images and reel frames."""
from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from .config import ExportConfig
from .geometry import Rect, Size, inset_rect, resolve_draw_rect
from .utils import as_rgba, natural_size, resample, warp

Box = Tuple[int, int, int, int]


def _premultiply(arr: np.ndarray) -> np.ndarray:
    """Return *arr* with RGB channels pre-multiplied by alpha."""
    if arr.shape[-1] == 4:
        alpha = arr[..., 3:4]
        if np.all(alpha == 255):
            return arr
        rgb = arr[..., :3].astype(np.float32) * (alpha.astype(np.float32) / 255.0)
        out = arr.copy()
        out[..., :3] = (rgb + 0.5).astype(np.uint8)
        return out
    return arr


def _round(v: float) -> int:
    return int(math.floor(v + 0.5))


def fill_canvas(size: Tuple[int, int], color: Tuple[int, int, int]) -> np.ndarray:
    """Allocate an opaque RGBA canvas filled with *color*."""
    w, h = size
    canvas = np.empty((h, w, 4), dtype=np.uint8)
    canvas[..., :3] = color
    canvas[..., 3] = 255
    return canvas


def content_rect(config: ExportConfig) -> Rect:
    w, h = config.canvas_size
    return inset_rect(Rect(0, 0, w, h), config.border_px)


def visible_box(draw: Rect, clip: Rect) -> Optional[Box]:
    """Integer ``(x0, y0, x1, y1)`` of *draw* inside *clip*, or ``None``."""
    x0 = max(_round(clip.x), _round(draw.x))
    y0 = max(_round(clip.y), _round(draw.y))
    x1 = min(_round(clip.right), _round(draw.x) + int(draw.w))
    y1 = min(_round(clip.bottom), _round(draw.y) + int(draw.h))
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def _place(src: np.ndarray, draw: Rect, box: Box) -> np.ndarray:
    """Resample the part of *src* that lands in *box*, aligned exactly to *draw*."""
    src_h, src_w = src.shape[:2]
    sx = draw.w / src_w
    sy = draw.h / src_h
    x0, y0, x1, y1 = box
    # two extra source pixels per side for the filter taps
    left = min(src_w - 1, max(0, int(math.floor((x0 - draw.x) / sx)) - 2))
    top = min(src_h - 1, max(0, int(math.floor((y0 - draw.y) / sy)) - 2))
    right = max(left + 1, min(src_w, int(math.ceil((x1 - draw.x) / sx)) + 2))
    bottom = max(top + 1, min(src_h, int(math.ceil((y1 - draw.y) / sy)) + 2))
    window = _premultiply(src[top:bottom, left:right])
    win_w, win_h = right - left, bottom - top
    tx = draw.x + left * sx - x0
    ty = draw.y + top * sy - y0
    if sx < 1.0 or sy < 1.0:
        # area-average close to the target size, warp handles the remainder
        pre_w = max(1, _round(win_w * sx))
        pre_h = max(1, _round(win_h * sy))
        window = resample(window, (pre_w, pre_h))
        sx, sy = sx * win_w / pre_w, sy * win_h / pre_h
    return warp(window, (sx, sy), (tx, ty), (x1 - x0, y1 - y0))


def composite(region: np.ndarray, overlay: np.ndarray) -> None:
    """Blend premultiplied RGBA *overlay* over the opaque *region* in place."""
    alpha = overlay[..., 3:4]
    if np.all(alpha == 255):
        region[..., :3] = overlay[..., :3]
        return
    a = alpha.astype(np.uint16)
    rgb = overlay[..., :3].astype(np.uint16) + (
        region[..., :3].astype(np.uint16) * (255 - a) + 127
    ) // 255
    region[..., :3] = np.clip(rgb, 0, 255).astype(np.uint8)


def render_canvas(
    pixels: np.ndarray,
    offset: Tuple[float, float],
    config: ExportConfig,
) -> Tuple[np.ndarray, Rect]:
    """Draw *pixels* onto a fresh bordered canvas described by *config*.

    The background fill doubles as the border mat. Only the part of the
    scaled source that survives the content-rect clip is resampled, so
    extreme aspect ratios in fill mode stay cheap. Returns the opaque RGBA
    canvas and the draw rectangle; an empty rectangle means nothing but the
    background was drawn.
    """
    canvas = fill_canvas(config.canvas_size, config.background)
    content = content_rect(config)
    src = as_rgba(pixels)
    draw = resolve_draw_rect(Size(*natural_size(src)), content, config.zoom_mode, offset)
    if draw.is_empty or content.is_empty:
        return canvas, draw

    box = visible_box(draw, content)
    if box is None:
        return canvas, draw
    x0, y0, x1, y1 = box
    composite(canvas[y0:y1, x0:x1], _place(src, draw, box))
    return canvas, draw
