"""Source image records handed to the exporters."""
from __future__ import annotations

import logging
import math
import os
import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import yaml

from .config import IMAGE_EXTS


def _clamp_offset(v: float) -> float:
    v = float(v)
    if math.isnan(v):
        return 0.0
    return max(-1.0, min(1.0, v))


@dataclass(frozen=True)
class SourceImage:
    """One photograph in display order.

    ``offset_x``/``offset_y`` are normalized to the maximum pan available
    at render time, so the same value works for every output size.
    """

    path: Path
    order_index: int = 0
    disabled: bool = False
    offset_x: float = 0.0
    offset_y: float = 0.0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "offset_x", _clamp_offset(self.offset_x))
        object.__setattr__(self, "offset_y", _clamp_offset(self.offset_y))

    @property
    def enabled(self) -> bool:
        return not self.disabled

    @property
    def offset(self) -> Tuple[float, float]:
        return self.offset_x, self.offset_y

    @property
    def name(self) -> str:
        return self.path.name


def ordered_enabled(images: Iterable[SourceImage]) -> List[SourceImage]:
    """Enabled images sorted by display order (stable for equal indices)."""
    return sorted((im for im in images if im.enabled), key=lambda im: im.order_index)


def scan_folder(folder) -> List[SourceImage]:
    """Wrap the image files of *folder* as ``SourceImage`` in name order."""
    paths = [
        os.path.join(folder, f)
        for f in os.listdir(folder)
        if os.path.splitext(f)[1].lower() in IMAGE_EXTS
    ]
    paths.sort(key=lambda s: os.path.basename(s).lower())
    return [SourceImage(path=p, order_index=i) for i, p in enumerate(paths)]


def _parse_offset(value) -> Tuple[float, float]:
    if isinstance(value, dict):
        return float(value.get("x", 0.0)), float(value.get("y", 0.0))
    x, y = value
    return float(x), float(y)


def load_offsets(path) -> Tuple[Dict[str, Tuple[float, float]], List[str]]:
    """Read an offsets YAML file.

    Format::

        offsets:
          IMG_0001.jpg: [0.4, 0]
          IMG_0002.jpg: {x: 0, y: -1}
        disabled: [IMG_0003.jpg]

    A bare mapping of file name to offset is accepted as well.
    """
    with open(path, "r", encoding="utf8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping")
    disabled = [str(n) for n in data.get("disabled", []) or []]
    raw = data.get("offsets", data if "disabled" not in data else {}) or {}
    offsets = {str(k): _parse_offset(v) for k, v in raw.items()}
    return offsets, disabled


def apply_offsets(
    images: Iterable[SourceImage],
    offsets: Dict[str, Tuple[float, float]],
    disabled: Iterable[str] = (),
) -> List[SourceImage]:
    """Return copies of *images* with pan offsets and disabled flags applied."""
    disabled = set(disabled)
    out = []
    known = set()
    for im in images:
        known.add(im.name)
        ox, oy = offsets.get(im.name, im.offset)
        out.append(
            replace(im, offset_x=ox, offset_y=oy, disabled=im.disabled or im.name in disabled)
        )
    for name in sorted(set(offsets) - known):
        logging.warning("offset given for unknown image %s", name)
    return out
