"""Encoder-ready frames for the reel.

Frames go through the same :func:`~insta_flow.layers.render_canvas` as the
stills, then are packed as ``rgb24``: one contiguous ``H x W x 3`` block,
stride ``W * 3``, channel order R, G, B, no alpha. The canvas is opaque by
construction so dropping alpha cannot shift colours.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import ExportConfig
from .layers import render_canvas
from .models import SourceImage
from .utils import load_source

PIX_FMT = "rgb24"


@dataclass(frozen=True)
class PixelBuffer:
    data: np.ndarray
    pix_fmt: str = PIX_FMT

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def stride(self) -> int:
        return int(self.data.strides[0])

    def tobytes(self) -> bytes:
        return self.data.tobytes()


def pack_rgb24(canvas: np.ndarray) -> np.ndarray:
    """Return a C-contiguous RGB copy of an opaque RGBA *canvas*."""
    return np.ascontiguousarray(canvas[..., :3], dtype=np.uint8)


def synthesize(
    image: SourceImage,
    config: ExportConfig,
    pixels: Optional[np.ndarray] = None,
) -> Optional[PixelBuffer]:
    """Build the reel frame for *image*, or ``None`` if it must be skipped."""
    if pixels is None:
        pixels = load_source(image.path)
        if pixels is None:
            return None
    try:
        canvas, _ = render_canvas(pixels, image.offset, config)
        data = pack_rgb24(canvas)
    except MemoryError:
        logging.warning("%s: cannot allocate %dx%d frame", image.name, *config.canvas_size)
        return None
    return PixelBuffer(data)
