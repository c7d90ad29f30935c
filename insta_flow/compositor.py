"""Still-image compositing for the square and portrait exports."""
from __future__ import annotations

import io
import logging
from typing import Optional

import numpy as np
from PIL import Image

from .config import ExportConfig
from .layers import render_canvas
from .models import SourceImage
from .utils import load_source


def compose_image(
    image: SourceImage,
    config: ExportConfig,
    pixels: Optional[np.ndarray] = None,
) -> Optional[Image.Image]:
    """Return the composed RGB canvas for *image*, or ``None`` if it cannot be drawn."""
    if pixels is None:
        pixels = load_source(image.path)
        if pixels is None:
            return None
    try:
        canvas, draw = render_canvas(pixels, image.offset, config)
    except MemoryError:
        logging.warning("%s: cannot allocate %dx%d canvas", image.name, *config.canvas_size)
        return None
    if draw.is_empty:
        logging.warning("%s: nothing to draw (degenerate size)", image.name)
    return Image.fromarray(np.ascontiguousarray(canvas[..., :3]))


def encode_jpeg(img: Image.Image, quality: float) -> bytes:
    """Encode *img* as sRGB JPEG; *quality* is in ``(0, 1]``."""
    buf = io.BytesIO()
    img.save(
        buf,
        format="JPEG",
        quality=max(1, min(100, int(round(quality * 100)))),
        subsampling=0,
        optimize=True,
    )
    return buf.getvalue()


def compose(
    image: SourceImage,
    config: ExportConfig,
    pixels: Optional[np.ndarray] = None,
) -> Optional[bytes]:
    """Compose *image* with the treatment in *config* and encode it.

    Returns the JPEG bytes, or ``None`` when the source cannot be decoded
    or encoded. Failures are logged; callers skip the item.
    """
    img = compose_image(image, config, pixels)
    if img is None:
        return None
    try:
        return encode_jpeg(img, config.quality)
    except (OSError, ValueError) as e:
        logging.warning("%s: JPEG encode failed: %s", image.name, e)
        return None
