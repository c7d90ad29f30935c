"""Frame-accurate timing for the reel."""
from __future__ import annotations

import math
from fractions import Fraction
from typing import Iterator

MIN_SECONDS_PER_IMAGE = 0.1
MAX_SECONDS_PER_IMAGE = 10.0


def clamp_seconds_per_image(seconds: float) -> float:
    """Clamp a per-image duration to ``[0.1, 10.0]`` seconds."""
    return max(MIN_SECONDS_PER_IMAGE, min(MAX_SECONDS_PER_IMAGE, float(seconds)))


def frames_per_image(seconds_per_image: float, fps: int) -> int:
    """Number of frames an image is held for; never less than one.

    Halves round up, so 0.1s at 25 fps is 3 frames rather than 2.
    """
    return max(1, int(math.floor(fps * seconds_per_image + 0.5)))


def seconds_for_tempo(bpm: float, beats_per_image: int = 1) -> float:
    """Seconds per image that hold each photo for *beats_per_image* beats."""
    if bpm <= 0 or beats_per_image <= 0:
        raise ValueError("bpm and beats per image must be > 0")
    return beats_per_image * 60.0 / bpm


def snap_to_frame_duration(seconds: float, fps: int) -> float:
    """Coerce *seconds* to the nearest whole number of frames at *fps*.

    The result is what the renderer will actually produce, so editors
    should display this value rather than the raw input.
    """
    return frames_per_image(seconds, fps) / fps


class ReelTimeline:
    """Presentation-time cursor kept in exact frame-interval arithmetic."""

    def __init__(self, fps: int, seconds_per_image: float) -> None:
        if fps <= 0:
            raise ValueError("fps must be > 0")
        self.fps = int(fps)
        self.frame_interval = Fraction(1, self.fps)
        self.frames_per_image = frames_per_image(seconds_per_image, self.fps)
        self.frame_index = 0

    @property
    def cursor(self) -> Fraction:
        return self.frame_index * self.frame_interval

    def advance_frame(self) -> Fraction:
        """Return the current presentation time, then step one frame."""
        pts = self.cursor
        self.frame_index += 1
        return pts

    def image_frames(self) -> Iterator[Fraction]:
        """Yield the presentation times for one image's repeated frames."""
        for _ in range(self.frames_per_image):
            yield self.advance_frame()

    def image_duration(self) -> Fraction:
        return self.frames_per_image * self.frame_interval

    def total_duration(self, n_images: int) -> Fraction:
        return n_images * self.image_duration()
