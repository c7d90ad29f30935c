"""Placement of a source image inside a bordered canvas.

Every output path (square stills, portrait stills, reel frames) resolves
its draw rectangle here so the three renderings cannot drift apart.
Coordinates are raster coordinates: origin top-left, y grows downwards.
"""
from __future__ import annotations

import math
from typing import NamedTuple, Tuple

from .config import ZoomMode


class Size(NamedTuple):
    w: float
    h: float


class Rect(NamedTuple):
    x: float
    y: float
    w: float
    h: float

    @property
    def mid_x(self) -> float:
        return self.x + self.w / 2

    @property
    def mid_y(self) -> float:
        return self.y + self.h / 2

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def is_empty(self) -> bool:
        return self.w <= 0 or self.h <= 0


ZERO = Size(0, 0)


def _scaled(source: Size, target: Size, pick) -> Size:
    if source.w <= 0 or source.h <= 0 or target.w <= 0 or target.h <= 0:
        return ZERO
    scale = pick(target.w / source.w, target.h / source.h)
    # epsilon keeps 1079.9999999 from flooring a full pixel short
    return Size(
        math.floor(source.w * scale + 1e-9), math.floor(source.h * scale + 1e-9)
    )


def fit_size(source: Size, target: Size) -> Size:
    """Largest floored size with *source*'s aspect contained in *target*."""
    return _scaled(Size(*source), Size(*target), min)


def fill_size(source: Size, target: Size) -> Size:
    """Smallest floored size with *source*'s aspect covering *target*."""
    return _scaled(Size(*source), Size(*target), max)


def max_pan_offset(
    source_aspect: float, container_aspect: float, container_size: Size
) -> Tuple[float, float]:
    """Return the largest pan ``(max_x, max_y)`` available at fill time.

    Only the axis on which the filled image overflows the container can
    pan; the other axis is always zero.
    """
    cw, ch = container_size
    if cw <= 0 or ch <= 0 or source_aspect <= 0 or container_aspect <= 0:
        return 0.0, 0.0
    if source_aspect > container_aspect:
        return (ch * source_aspect - cw) / 2, 0.0
    if source_aspect < container_aspect:
        return 0.0, (cw / source_aspect - ch) / 2
    return 0.0, 0.0


def inset_rect(bounds: Rect, inset: float) -> Rect:
    """Shrink *bounds* by *inset* on every side, never below zero area."""
    inset = max(0.0, float(inset))
    w = max(0.0, bounds.w - 2 * inset)
    h = max(0.0, bounds.h - 2 * inset)
    return Rect(bounds.mid_x - w / 2, bounds.mid_y - h / 2, w, h)


def _clamp_unit(v: float) -> float:
    if v != v:  # NaN
        return 0.0
    return max(-1.0, min(1.0, float(v)))


def resolve_draw_rect(
    source: Size,
    content: Rect,
    mode: ZoomMode,
    offset: Tuple[float, float] = (0.0, 0.0),
) -> Rect:
    """Return the rectangle *source* is drawn into within *content*.

    The scaled image is centred on the content rectangle. In fill mode the
    normalized *offset* shifts it by ``offset * max_pan_offset`` on the
    overflowing axis; fit mode never pans. A zero-area rectangle means the
    caller should skip drawing.
    """
    source = Size(*source)
    content = Rect(*content)
    mode = ZoomMode(mode)
    if mode is ZoomMode.FILL:
        scaled = fill_size(source, Size(content.w, content.h))
    else:
        scaled = fit_size(source, Size(content.w, content.h))
    if scaled.w <= 0 or scaled.h <= 0:
        return Rect(content.mid_x, content.mid_y, 0, 0)

    x = content.mid_x - scaled.w / 2
    y = content.mid_y - scaled.h / 2
    if mode is ZoomMode.FILL:
        max_x, max_y = max_pan_offset(
            source.w / source.h, content.w / content.h, Size(content.w, content.h)
        )
        # floored scaled size can overflow slightly less than the exact maximum
        max_x = max(0.0, min(max_x, (scaled.w - content.w) / 2))
        max_y = max(0.0, min(max_y, (scaled.h - content.h) / 2))
        x += _clamp_unit(offset[0]) * max_x
        y += _clamp_unit(offset[1]) * max_y
    return Rect(x, y, scaled.w, scaled.h)
