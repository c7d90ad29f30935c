"""Numbered still-image batches (square and portrait)."""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .compositor import compose
from .config import ExportConfig
from .encoder import ExportError
from .models import SourceImage, ordered_enabled


def still_name(position: int, ext: str = "jpg") -> str:
    """``image_NNN.<ext>`` for a 1-based *position*."""
    return f"image_{position:03d}.{ext}"


def export_batch(
    images: Iterable[SourceImage],
    config: ExportConfig,
    output_dir,
    ext: str = "jpg",
    progress: Optional[Callable[[float], None]] = None,
) -> List[Path]:
    """Write one composed still per enabled image into *output_dir*.

    Items that fail to decode, encode or write are logged and skipped; the
    returned list holds only the files actually produced, in display order.
    Failing to create *output_dir* is a hard error.
    """
    output_dir = Path(output_dir)
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise ExportError(f"cannot create {output_dir}: {e}") from e

    items = ordered_enabled(images)
    written: List[Path] = []
    for idx, item in enumerate(items, 1):
        data = compose(item, config)
        if data is None:
            logging.warning("still %d (%s) skipped", idx, item.name)
        else:
            out = output_dir / still_name(idx, ext)
            try:
                out.write_bytes(data)
            except OSError as e:
                logging.warning("cannot write %s: %s", out, e)
            else:
                written.append(out)
        if progress:
            progress(idx / len(items))
    logging.info("%s: %d/%d stills written", output_dir, len(written), len(items))
    return written


def copy_originals(
    images: Iterable[SourceImage],
    output_dir,
    progress: Optional[Callable[[float], None]] = None,
) -> List[Path]:
    """Copy the untouched source files as ``image_NNN.<original ext>``.

    Used when cropping is off. Numbering follows the display order the same
    way :func:`export_batch` does; unreadable files are logged and skipped.
    """
    output_dir = Path(output_dir)
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise ExportError(f"cannot create {output_dir}: {e}") from e

    items = ordered_enabled(images)
    written: List[Path] = []
    for idx, item in enumerate(items, 1):
        out = output_dir / still_name(idx, item.path.suffix.lstrip(".") or "bin")
        try:
            shutil.copyfile(item.path, out)
        except OSError as e:
            logging.warning("cannot copy %s: %s", item.path, e)
        else:
            written.append(out)
        if progress:
            progress(idx / len(items))
    logging.info("%s: %d/%d originals copied", output_dir, len(written), len(items))
    return written
