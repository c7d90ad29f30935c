"""Reel video assembly."""
from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Callable, Iterable, List, Optional

from .config import ExportConfig, ReelConfig
from .encoder import (
    EncoderFinalizeError,
    EncoderSetupError,
    EncoderWriteError,
    ExportError,
    FFMPEGEncoderSession,
)
from .frames import synthesize
from .models import SourceImage, ordered_enabled
from .timeline import ReelTimeline

READY_POLL = 0.001
READY_TIMEOUT = 30.0


class ReelState(str, Enum):
    IDLE = "idle"
    SESSION_OPEN = "session_open"
    WRITING = "writing"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class ReelResult:
    state: ReelState
    path: str
    frames_written: int = 0
    images_written: int = 0
    skipped: List[str] = field(default_factory=list)
    duration: Fraction = Fraction(0)

    @property
    def ok(self) -> bool:
        return self.state is ReelState.COMPLETED


def _discard(path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logging.warning("cannot remove %s: %s", path, e)


class ReelAssembler:
    """Drive one encoder session from an ordered list of source images.

    Images that cannot be decoded are skipped, so the reel gets shorter by
    their duration. Session setup, frame submission and finalization
    failures are hard and raise :class:`ExportError` subclasses. A
    *cancel* event is checked between images; when set, the session is
    still finalized and the result is ``CANCELLED``. A reel cancelled
    before its first frame is aborted and leaves no file behind.
    """

    def __init__(
        self,
        frame_config: ExportConfig,
        reel_config: ReelConfig,
        session_factory: Optional[Callable] = None,
        ready_timeout: float = READY_TIMEOUT,
    ) -> None:
        if tuple(frame_config.canvas_size) != tuple(reel_config.size):
            raise ValueError(
                f"frame canvas {frame_config.canvas_size} does not match reel size {reel_config.size}"
            )
        self.frame_config = frame_config
        self.reel_config = reel_config
        self.session_factory = session_factory or FFMPEGEncoderSession
        self.ready_timeout = ready_timeout
        self.state = ReelState.IDLE

    def _wait_ready(self, session) -> None:
        deadline = time.monotonic() + self.ready_timeout
        while not session.ready_for_more_data:
            if time.monotonic() > deadline:
                raise EncoderWriteError(
                    f"encoder not ready after {self.ready_timeout:.1f}s"
                )
            time.sleep(READY_POLL)

    def assemble(
        self,
        images: Iterable[SourceImage],
        output_path,
        progress: Optional[Callable[[float], None]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ReelResult:
        items = ordered_enabled(images)
        timeline = ReelTimeline(self.reel_config.fps, self.reel_config.seconds_per_image)
        result = ReelResult(ReelState.IDLE, str(output_path))

        session = self.session_factory(output_path, self.reel_config)
        try:
            session.open()
        except ExportError:
            self.state = result.state = ReelState.FAILED
            raise
        except OSError as e:
            self.state = result.state = ReelState.FAILED
            raise EncoderSetupError(f"cannot open encoder for {output_path}: {e}") from e
        self.state = ReelState.SESSION_OPEN

        self.state = ReelState.WRITING
        cancelled = False
        try:
            for i, item in enumerate(items):
                if cancel is not None and cancel.is_set():
                    logging.info("reel cancelled after %d/%d images", i, len(items))
                    cancelled = True
                    break
                buffer = synthesize(item, self.frame_config)
                if buffer is None:
                    logging.warning("reel: skipping %s", item.name)
                    result.skipped.append(item.name)
                    continue
                for pts in timeline.image_frames():
                    self._wait_ready(session)
                    session.append(buffer, pts)
                    result.frames_written += 1
                result.images_written += 1
                # only one frame buffer alive at a time
                del buffer
                if progress:
                    progress((i + 1) / len(items))
        except BaseException:
            # the encoder child process must not outlive a failed reel
            self.state = result.state = ReelState.FAILED
            session.abort()
            raise

        if cancelled and result.frames_written == 0:
            session.abort()
            _discard(output_path)
            self.state = result.state = ReelState.CANCELLED
            logging.info("reel cancelled before any frame; %s discarded", output_path)
            return result

        self.state = ReelState.FINALIZING
        session.mark_finished()
        status = session.finish()
        result.duration = timeline.cursor
        if status != "completed":
            self.state = result.state = ReelState.FAILED
            raise EncoderFinalizeError(
                f"reel {output_path} failed to finalize: {session.diagnostic or status}"
            )
        self.state = result.state = ReelState.CANCELLED if cancelled else ReelState.COMPLETED
        logging.info(
            "reel %s: %d frames, %d images, %.2fs (%d skipped)",
            result.state.value, result.frames_written, result.images_written,
            float(result.duration), len(result.skipped),
        )
        return result


def assemble_reel(
    images: Iterable[SourceImage],
    output_path,
    frame_config: ExportConfig,
    reel_config: ReelConfig,
    **kwargs,
) -> ReelResult:
    """Convenience wrapper around :class:`ReelAssembler`."""
    progress = kwargs.pop("progress", None)
    cancel = kwargs.pop("cancel", None)
    assembler = ReelAssembler(frame_config, reel_config, **kwargs)
    return assembler.assemble(images, output_path, progress=progress, cancel=cancel)
