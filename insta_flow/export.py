"""One export run: square stills, portrait stills and the reel."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import (
    REEL_BITRATE,
    REEL_FPS,
    REEL_SECONDS_PER_IMAGE,
    REEL_SIZE,
    ExportConfig,
    ReelConfig,
    ZoomMode,
)
from .encoder import ExportError
from .models import SourceImage, ordered_enabled
from .reel import ReelAssembler, ReelResult
from .stills import copy_originals, export_batch

STEPS = ("square", "carousel", "reel", "original")
DEFAULT_STEPS = ("square", "carousel", "reel")
SQUARE_DIR = "Square"
CAROUSEL_DIR = "Images"
REEL_NAME = "Reel.mp4"
ORIGINAL_DIR = "Original"
CAPTION_NAME = "caption.txt"


@dataclass(frozen=True)
class ExportSettings:
    """User-facing values shared by every step of a run."""

    border: float = 0.0
    zoom_mode: ZoomMode = ZoomMode.FILL
    background: Tuple[int, int, int] = (0, 0, 0)
    seconds_per_image: float = REEL_SECONDS_PER_IMAGE
    fps: int = REEL_FPS
    reel_size: Tuple[int, int] = REEL_SIZE
    codec: str = "h264"
    bitrate: int = REEL_BITRATE
    steps: Tuple[str, ...] = DEFAULT_STEPS
    caption: Optional[str] = None

    def square_config(self) -> ExportConfig:
        return ExportConfig.square(self.border, zoom_mode=self.zoom_mode, background=self.background)

    def carousel_config(self) -> ExportConfig:
        return ExportConfig.portrait(self.border, zoom_mode=self.zoom_mode, background=self.background)

    def reel_configs(self) -> Tuple[ExportConfig, ReelConfig]:
        reel = ReelConfig(
            size=self.reel_size,
            fps=self.fps,
            seconds_per_image=self.seconds_per_image,
            bitrate=self.bitrate,
            codec=self.codec,
        )
        frame = ExportConfig.reel_frame(
            reel.size, self.border, zoom_mode=self.zoom_mode, background=self.background
        )
        return frame, reel


@dataclass
class ExportReport:
    root: Path
    square: List[Path] = field(default_factory=list)
    carousel: List[Path] = field(default_factory=list)
    original: List[Path] = field(default_factory=list)
    reel: Optional[ReelResult] = None
    caption: Optional[Path] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def write_caption(root: Path, caption: str) -> Path:
    out = Path(root) / CAPTION_NAME
    out.write_text(caption.strip() + "\n", encoding="utf8")
    return out


def run_export(
    images: Iterable[SourceImage],
    settings: ExportSettings,
    export_root,
    progress: Optional[Callable[[str, float], None]] = None,
    cancel: Optional[threading.Event] = None,
    session_factory: Optional[Callable] = None,
) -> ExportReport:
    """Run the requested steps into *export_root*.

    Each step is independent: a hard failure in one is recorded in
    ``report.errors`` and the remaining steps still run.
    """
    unknown = set(settings.steps) - set(STEPS)
    if unknown:
        raise ValueError(f"unknown export steps: {', '.join(sorted(unknown))}")
    root = Path(export_root)
    items = ordered_enabled(images)
    report = ExportReport(root)
    steps = [s for s in STEPS if s in settings.steps]

    for n, step in enumerate(steps, 1):
        try:
            if step == "square":
                report.square = export_batch(items, settings.square_config(), root / SQUARE_DIR)
            elif step == "carousel":
                report.carousel = export_batch(items, settings.carousel_config(), root / CAROUSEL_DIR)
            elif step == "original":
                report.original = copy_originals(items, root / ORIGINAL_DIR)
            else:
                frame, reel = settings.reel_configs()
                kwargs = {"session_factory": session_factory} if session_factory else {}
                assembler = ReelAssembler(frame, reel, **kwargs)
                report.reel = assembler.assemble(items, root / REEL_NAME, cancel=cancel)
        except (ExportError, ValueError) as e:
            logging.error("%s export failed: %s", step, e)
            report.errors[step] = str(e)
        if progress:
            progress(step, n / len(steps))

    if settings.caption and settings.caption.strip():
        # uncropped runs keep the caption next to the copied originals
        target = root / ORIGINAL_DIR if steps == ["original"] else root
        try:
            target.mkdir(parents=True, exist_ok=True)
            report.caption = write_caption(target, settings.caption)
        except OSError as e:
            logging.error("cannot write caption: %s", e)
            report.errors["caption"] = str(e)
    return report
