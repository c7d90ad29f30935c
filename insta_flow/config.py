"""Configuration values for insta_flow exports."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from .timeline import clamp_seconds_per_image, snap_to_frame_duration

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".webp", ".heic", ".tif", ".tiff"}

SQUARE_SIZE = (1080, 1080)
PORTRAIT_SIZE = (1080, 1350)
REEL_SIZE = (1080, 1920)

# user-facing border slider -> pixels
STILL_BORDER_SCALE = 2.0
REEL_BORDER_SCALE = 3.0

JPEG_QUALITY = 0.95
REEL_FPS = 25
REEL_BITRATE = 16_000_000
REEL_SECONDS_PER_IMAGE = 2.0

ASPECT_PRESETS = {
    "1:1": 1.0,
    "4:5": 4.0 / 5.0,
    "9:16": 9.0 / 16.0,
}

CODECS = {"h264": "libx264", "hevc": "libx265"}

NAMED_COLORS = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
}

RGB = Tuple[int, int, int]


class ZoomMode(str, Enum):
    FIT = "fit"
    FILL = "fill"


def parse_color(value) -> RGB:
    """Return an opaque sRGB triple from ``"#rrggbb"``, a name or a tuple."""
    if isinstance(value, (tuple, list)):
        if len(value) != 3:
            raise ValueError(f"invalid color: {value!r}")
        r, g, b = (int(c) for c in value)
        if not all(0 <= c <= 255 for c in (r, g, b)):
            raise ValueError(f"invalid color: {value!r}")
        return r, g, b
    text = str(value).strip().lower()
    if text in NAMED_COLORS:
        return NAMED_COLORS[text]
    text = text.lstrip("#")
    if len(text) != 6:
        raise ValueError(f"invalid hex color: {value}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError as e:
        raise ValueError(f"invalid hex color: {value}") from e


def size_for_aspect(aspect: str, width: int = 1080) -> Tuple[int, int]:
    """Return an even ``(w, h)`` canvas for an aspect preset at *width*."""
    ratio = ASPECT_PRESETS[aspect]
    height = int(round(width / ratio))
    return width, height + (height % 2)


@dataclass(frozen=True)
class ExportConfig:
    """Visual treatment for one output kind.

    ``border`` is the user-facing slider value; the drawn mat is
    ``border * border_scale`` pixels wide on every side.
    """

    canvas_size: Tuple[int, int]
    border: float = 0.0
    border_scale: float = STILL_BORDER_SCALE
    zoom_mode: ZoomMode = ZoomMode.FILL
    background: RGB = (0, 0, 0)
    quality: float = JPEG_QUALITY

    def __post_init__(self) -> None:
        w, h = self.canvas_size
        if w <= 0 or h <= 0:
            raise ValueError(f"canvas size must be positive, got {w}x{h}")
        object.__setattr__(self, "canvas_size", (int(w), int(h)))
        object.__setattr__(self, "zoom_mode", ZoomMode(self.zoom_mode))
        object.__setattr__(self, "background", parse_color(self.background))
        if not (0.0 < self.quality <= 1.0):
            raise ValueError("quality must be in (0, 1]")

    @property
    def border_px(self) -> int:
        return max(0, int(self.border * self.border_scale))

    @classmethod
    def square(cls, border: float = 0.0, **kwargs) -> "ExportConfig":
        return cls(SQUARE_SIZE, border=border, border_scale=STILL_BORDER_SCALE, **kwargs)

    @classmethod
    def portrait(cls, border: float = 0.0, **kwargs) -> "ExportConfig":
        return cls(PORTRAIT_SIZE, border=border, border_scale=STILL_BORDER_SCALE, **kwargs)

    @classmethod
    def reel_frame(
        cls, size: Tuple[int, int] = REEL_SIZE, border: float = 0.0, **kwargs
    ) -> "ExportConfig":
        return cls(size, border=border, border_scale=REEL_BORDER_SCALE, **kwargs)


@dataclass(frozen=True)
class ReelConfig:
    """Timing and encoder settings for the reel video."""

    size: Tuple[int, int] = REEL_SIZE
    fps: int = REEL_FPS
    seconds_per_image: float = REEL_SECONDS_PER_IMAGE
    bitrate: int = REEL_BITRATE
    codec: str = "h264"
    preset: str = "medium"
    extra_params: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        w, h = (int(v) for v in self.size)
        if w <= 0 or h <= 0:
            raise ValueError(f"reel size must be positive, got {w}x{h}")
        if w % 2 or h % 2:
            raise ValueError(f"reel size must be even for yuv420p, got {w}x{h}")
        if int(self.fps) <= 0:
            raise ValueError("fps must be > 0")
        if self.codec not in CODECS:
            raise ValueError(f"unknown codec: {self.codec}")
        if int(self.bitrate) <= 0:
            raise ValueError("bitrate must be > 0")
        object.__setattr__(self, "size", (w, h))
        object.__setattr__(self, "fps", int(self.fps))
        seconds = clamp_seconds_per_image(self.seconds_per_image)
        object.__setattr__(
            self, "seconds_per_image", snap_to_frame_duration(seconds, self.fps)
        )

    @property
    def ffmpeg_codec(self) -> str:
        return CODECS[self.codec]
