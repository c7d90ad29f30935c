"""Argument validation helpers for the insta_flow CLI."""
from __future__ import annotations

from argparse import Namespace
from typing import List

from .config import CODECS, parse_color
from .export import STEPS
from .timeline import MAX_SECONDS_PER_IMAGE, MIN_SECONDS_PER_IMAGE


def validate_args(args: Namespace) -> List[str]:
    """Validate parsed CLI arguments.

    Returns a list of human readable error messages. The caller should abort
    if the list is non-empty.
    """
    errors: List[str] = []
    if args.border < 0:
        errors.append("--border must be >= 0")
    if not (MIN_SECONDS_PER_IMAGE <= args.seconds <= MAX_SECONDS_PER_IMAGE):
        errors.append(
            f"--seconds {args.seconds:.2f} outside [{MIN_SECONDS_PER_IMAGE}, {MAX_SECONDS_PER_IMAGE}]"
        )
    if args.bpm is not None and args.bpm <= 0:
        errors.append("--bpm must be > 0")
    if args.beats_per_image < 1:
        errors.append("--beats-per-image must be >= 1")
    if args.fps <= 0:
        errors.append("--fps must be > 0")
    if args.bitrate <= 0:
        errors.append("--bitrate must be > 0")
    if args.codec not in CODECS:
        errors.append(f"--codec must be one of {', '.join(CODECS)}")
    w, h = args.reel_size
    if w <= 0 or h <= 0 or w % 2 or h % 2:
        errors.append(f"--reel-size {w}x{h} must be positive and even")
    try:
        parse_color(args.background)
    except ValueError:
        errors.append(f"--background {args.background!r} is not a color")
    for step in args.steps:
        if step not in STEPS:
            errors.append(f"--steps: unknown step {step!r}")
    return errors
