"""Video encoder session backed by moviepy's ffmpeg writer."""
from __future__ import annotations

import logging
import os
from fractions import Fraction
from typing import List, Optional

from .config import ReelConfig
from .frames import PixelBuffer, PIX_FMT


class ExportError(RuntimeError):
    """Hard failure of an export step."""


class EncoderSetupError(ExportError):
    """The output container or video track could not be opened."""


class EncoderWriteError(ExportError):
    """A frame could not be handed to the encoder."""


class EncoderFinalizeError(ExportError):
    """The encoder did not finish successfully; the output is unusable."""


def _ffmpeg_params(config: ReelConfig) -> List[str]:
    params = [
        "-g", str(config.fps),
        "-pix_fmt", "yuv420p",
        "-movflags", "+faststart",
    ]
    if config.codec == "hevc":
        params.extend(["-tag:v", "hvc1"])
    params.extend(config.extra_params)
    return params


class FFMPEGEncoderSession:
    """One video track written through an ffmpeg pipe.

    ffmpeg reads constant-rate ``rgb24`` frames, so presentation times must
    be consecutive multiples of the frame interval starting at zero; any
    other timestamp is rejected rather than silently retimed.
    """

    def __init__(self, path, config: ReelConfig) -> None:
        self.path = str(path)
        self.config = config
        self.frame_interval = Fraction(1, config.fps)
        self.frames_written = 0
        self.status = "idle"
        self.diagnostic = ""
        self._writer = None
        self._finished = False

    def open(self) -> None:
        try:
            from moviepy.video.io.ffmpeg_writer import FFMPEG_VideoWriter
        except ImportError as e:
            raise EncoderSetupError(f"moviepy is not available: {e}") from e

        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            if os.path.exists(self.path):
                os.remove(self.path)
            self._writer = FFMPEG_VideoWriter(
                self.path,
                self.config.size,
                self.config.fps,
                codec=self.config.ffmpeg_codec,
                preset=self.config.preset,
                bitrate=str(self.config.bitrate),
                ffmpeg_params=_ffmpeg_params(self.config),
            )
        except (OSError, ValueError) as e:
            self.status = "failed"
            self.diagnostic = str(e)
            raise EncoderSetupError(f"cannot open encoder for {self.path}: {e}") from e
        self.status = "writing"
        logging.info(
            "encoder open: %s %dx%d@%d %s",
            self.path, *self.config.size, self.config.fps, self.config.ffmpeg_codec,
        )

    @property
    def ready_for_more_data(self) -> bool:
        # pipe writes block while ffmpeg is busy, so an open session is ready
        return self._writer is not None and not self._finished

    def append(self, buffer: PixelBuffer, pts: Fraction) -> None:
        if not self.ready_for_more_data:
            raise EncoderWriteError("encoder session is not accepting frames")
        expected = self.frames_written * self.frame_interval
        if Fraction(pts) != expected:
            raise ValueError(f"non-contiguous presentation time {pts}, expected {expected}")
        if buffer.pix_fmt != PIX_FMT or (buffer.width, buffer.height) != self.config.size:
            raise ValueError(
                f"frame {buffer.width}x{buffer.height} {buffer.pix_fmt} does not match "
                f"{self.config.size[0]}x{self.config.size[1]} {PIX_FMT}"
            )
        try:
            self._writer.write_frame(buffer.data)
        except (OSError, AttributeError) as e:
            self.status = "failed"
            self.diagnostic = str(e)
            raise EncoderWriteError(f"ffmpeg rejected frame {self.frames_written}: {e}") from e
        self.frames_written += 1

    def mark_finished(self) -> None:
        self._finished = True

    def finish(self) -> str:
        """Close the pipe and wait for ffmpeg; return ``"completed"`` or ``"failed"``."""
        self._finished = True
        writer, self._writer = self._writer, None
        if writer is None:
            return self.status
        proc = getattr(writer, "proc", None)
        try:
            writer.close()
        except (OSError, ValueError) as e:
            self.status = "failed"
            self.diagnostic = str(e)
            return self.status
        code = getattr(proc, "returncode", 0)
        if code:
            self.status = "failed"
            self.diagnostic = f"ffmpeg exited with status {code}"
        elif self.frames_written == 0:
            self.status = "failed"
            self.diagnostic = "no frames were written"
        elif not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
            self.status = "failed"
            self.diagnostic = f"ffmpeg produced no output at {self.path}"
        else:
            self.status = "completed"
        return self.status

    def abort(self) -> None:
        """Tear the session down after a hard failure."""
        try:
            self.finish()
        except Exception as e:  # noqa: BLE001 - already failing
            logging.warning("encoder teardown failed: %s", e)
        self.status = "failed"
