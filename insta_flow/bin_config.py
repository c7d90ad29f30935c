"""Helpers to resolve the ffmpeg binary used by moviepy.

Resolution honors an explicit CLI argument, the ``FFMPEG_BINARY``
environment variable, ``ffmpeg`` on ``PATH`` and finally the binary bundled
with ``imageio-ffmpeg`` (a moviepy dependency).
"""
from __future__ import annotations

import os
import shutil
from typing import Optional


def _validate_binary(path: str | None) -> Optional[str]:
    """Return *path* if it points to an existing executable."""
    if not path:
        return None
    if os.path.isfile(path) or shutil.which(path):
        return path
    return None


def _bundled_ffmpeg() -> Optional[str]:
    try:
        import imageio_ffmpeg
    except ImportError:
        return None
    try:
        return imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError:
        return None


def resolve_ffmpeg(cli_path: str | None = None) -> Optional[str]:
    """Resolve path to the ``ffmpeg`` executable.

    The validated path is stored in ``FFMPEG_BINARY`` so moviepy picks it
    up when its writer is first imported. Returns ``None`` if nothing is
    found.
    """
    candidates = [
        cli_path,
        os.environ.get("FFMPEG_BINARY"),
        shutil.which("ffmpeg"),
    ]
    for cand in candidates:
        path = _validate_binary(cand)
        if path:
            os.environ["FFMPEG_BINARY"] = path
            return path
    path = _validate_binary(_bundled_ffmpeg())
    if path:
        os.environ["FFMPEG_BINARY"] = path
    return path
