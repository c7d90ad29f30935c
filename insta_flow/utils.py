"""Decoding and resampling helpers."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError


def load_source(path) -> Optional[np.ndarray]:
    """Decode *path* into an RGBA ``uint8`` array, or ``None`` if it fails.

    EXIF orientation is applied so the natural size matches what a viewer
    shows. Undecodable or empty images are reported and skipped by callers.
    """
    try:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            rgba = img.convert("RGBA")
            arr = np.asarray(rgba, dtype=np.uint8)
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
        logging.warning("cannot decode %s: %s", path, e)
        return None
    if arr.ndim != 3 or arr.shape[0] == 0 or arr.shape[1] == 0:
        logging.warning("empty image: %s", path)
        return None
    return arr


def as_rgba(pixels: np.ndarray) -> np.ndarray:
    """Return *pixels* (gray, RGB or RGBA) as an RGBA ``uint8`` array."""
    arr = np.asarray(pixels)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    if arr.ndim == 2:
        arr = np.dstack([arr, arr, arr])
    if arr.shape[-1] == 3:
        alpha = np.full(arr.shape[:2], 255, dtype=np.uint8)
        arr = np.dstack([arr, alpha])
    return arr


def natural_size(pixels: np.ndarray) -> Tuple[int, int]:
    h, w = pixels.shape[:2]
    return w, h


def resample(pixels: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Resize *pixels* to ``(w, h)`` choosing the filter by direction."""
    w, h = int(size[0]), int(size[1])
    src_h, src_w = pixels.shape[:2]
    if (w, h) == (src_w, src_h):
        return pixels
    shrinking = w * h < src_w * src_h
    interp = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC
    return cv2.resize(pixels, (w, h), interpolation=interp)


def warp(
    pixels: np.ndarray,
    scale: Tuple[float, float],
    translate: Tuple[float, float],
    size: Tuple[int, int],
) -> np.ndarray:
    """Map *pixels* into a ``(w, h)`` output with ``dst = src * scale + translate``.

    *scale* and *translate* are in pixel-edge coordinates, so sub-pixel
    placement is kept exactly instead of snapping to whole source pixels.
    """
    sx, sy = float(scale[0]), float(scale[1])
    tx, ty = float(translate[0]), float(translate[1])
    # cv2 samples at pixel centres
    m = np.array(
        [[sx, 0.0, tx + 0.5 * sx - 0.5], [0.0, sy, ty + 0.5 * sy - 0.5]],
        dtype=np.float64,
    )
    interp = cv2.INTER_CUBIC if sx > 1.0 or sy > 1.0 else cv2.INTER_LINEAR
    return cv2.warpAffine(
        pixels,
        m,
        (int(size[0]), int(size[1])),
        flags=interp,
        borderMode=cv2.BORDER_REPLICATE,
    )
