"""Command line interface for insta_flow."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import Tuple

import yaml

from .bin_config import resolve_ffmpeg
from .config import ASPECT_PRESETS, CODECS, REEL_BITRATE, REEL_FPS, parse_color, size_for_aspect
from .export import DEFAULT_STEPS, STEPS, ExportSettings, run_export
from .models import apply_offsets, load_offsets, scan_folder
from .timeline import clamp_seconds_per_image, seconds_for_tempo, snap_to_frame_duration
from .validate import validate_args


def _size_type(x: str) -> Tuple[int, int]:
    try:
        w, h = x.lower().split("x")
        return int(w), int(h)
    except ValueError as e:
        raise argparse.ArgumentTypeError("size format WxH") from e


def _steps_type(x: str) -> Tuple[str, ...]:
    return tuple(s.strip() for s in x.split(",") if s.strip())


def _nonneg_float(x: str) -> float:
    v = float(x)
    if v < 0:
        raise argparse.ArgumentTypeError("--border must be >= 0")
    return v


def _resolve_export_root(output_arg: str | None, base_folder: str) -> str:
    """Pick a fresh export directory; existing ones get a timestamp/counter."""
    out = output_arg or os.path.join(base_folder, "export")
    out = out.rstrip(os.sep) or out
    if not os.path.exists(out):
        return out
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    cand = f"{out}_{ts}"
    if not os.path.exists(cand):
        return cand
    i = 2
    while True:
        cand = f"{out}_{i}"
        if not os.path.exists(cand):
            return cand
        i += 1


def reel_seconds(args: argparse.Namespace) -> float:
    """Seconds per image the reel will really use, from --bpm or --seconds."""
    raw = args.seconds
    if args.bpm:
        raw = clamp_seconds_per_image(seconds_for_tempo(args.bpm, args.beats_per_image))
        logging.info("%.1f bpm x %d beats -> %.3fs per image", args.bpm, args.beats_per_image, raw)
    seconds = snap_to_frame_duration(raw, args.fps)
    if abs(seconds - raw) > 1e-9:
        logging.info("seconds per image %.3f snapped to %.3f (%d fps)", raw, seconds, args.fps)
    return seconds


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export square stills, 4:5 stills and a 9:16 reel from a photo folder"
    )
    parser.add_argument("folder", help="Folder with source photos")
    parser.add_argument("--preset", action="append", default=[], help="Path to YAML preset overriding defaults")
    parser.add_argument("--output", help="Export directory. If existing, a timestamp/counter is appended.")
    parser.add_argument("--offsets", help="YAML file with per-image pan offsets and disabled images")
    parser.add_argument("--validate", action="store_true", help="Validate arguments and exit")
    parser.add_argument("--border", type=_nonneg_float, default=0.0, help="Border slider value (2x px on stills, 3x on the reel)")
    parser.add_argument("--zoom", choices=["fit", "fill"], default="fill", help="Scale photos to fit or fill the frame")
    parser.add_argument("--background", default="black", help="Border/background color, #RRGGBB, white or black")
    parser.add_argument("--seconds", type=float, default=2.0, help="Seconds each photo stays on screen in the reel")
    parser.add_argument("--fps", type=int, default=REEL_FPS, help="Reel frame rate")
    parser.add_argument(
        "--reel-aspect",
        choices=sorted(ASPECT_PRESETS),
        default="9:16",
        help="Reel aspect (ignored with --reel-size)",
    )
    parser.add_argument("--reel-size", type=_size_type, default=None, help="Reel size WxH")
    parser.add_argument("--codec", choices=sorted(CODECS), default="h264", help="Reel video codec")
    parser.add_argument("--bitrate", type=int, default=REEL_BITRATE, help="Reel bitrate (bit/s)")
    parser.add_argument(
        "--steps",
        type=_steps_type,
        default=DEFAULT_STEPS,
        help="Comma separated steps: " + ",".join(STEPS),
    )
    parser.add_argument(
        "--no-crop",
        action="store_true",
        help="Copy the original files into Original/ instead of cropping (same as --steps original)",
    )
    parser.add_argument("--bpm", type=float, help="Derive seconds per image from this tempo (beats per minute)")
    parser.add_argument("--beats-per-image", type=int, default=1, help="Beats each photo is held for with --bpm")
    parser.add_argument("--caption", help="Text written to caption.txt in the export directory")
    parser.add_argument("--ffmpeg", help="Path to ffmpeg binary")

    prelim, _ = parser.parse_known_args(argv)
    for path in prelim.preset:
        with open(path, "r", encoding="utf8") as fh:
            data = yaml.safe_load(fh) or {}
        parser.set_defaults(**data)

    args = parser.parse_args(argv)
    if args.reel_size is None:
        args.reel_size = size_for_aspect(args.reel_aspect)
    if isinstance(args.steps, str):
        args.steps = _steps_type(args.steps)
    if args.no_crop:
        args.steps = ("original",)
    return args


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    errs = validate_args(args)
    if errs:
        for e in errs:
            print(f"validation error: {e}", file=sys.stderr)
        raise SystemExit(1)
    if args.validate:
        return

    if not os.path.isdir(args.folder):
        raise SystemExit(f"not a folder: {args.folder}")
    images = scan_folder(args.folder)
    if args.offsets:
        offsets, disabled = load_offsets(args.offsets)
        images = apply_offsets(images, offsets, disabled)
    if not any(im.enabled for im in images):
        raise SystemExit(f"no images in {args.folder}")

    if "reel" in args.steps and not resolve_ffmpeg(args.ffmpeg):
        logging.warning("ffmpeg not found; the reel step will fail")

    seconds = reel_seconds(args)

    settings = ExportSettings(
        border=args.border,
        zoom_mode=args.zoom,
        background=parse_color(args.background),
        seconds_per_image=seconds,
        fps=args.fps,
        reel_size=tuple(args.reel_size),
        codec=args.codec,
        bitrate=args.bitrate,
        steps=tuple(args.steps),
        caption=args.caption,
    )
    root = _resolve_export_root(args.output, args.folder)

    def _progress(step: str, fraction: float) -> None:
        print(f"[{fraction:4.0%}] {step} done")

    report = run_export(images, settings, root, progress=_progress)
    print(f"square: {len(report.square)} files, carousel: {len(report.carousel)} files")
    if report.original:
        print(f"original: {len(report.original)} files")
    if report.reel is not None:
        print(f"reel: {report.reel.path} ({float(report.reel.duration):.2f}s)")
    for step, msg in report.errors.items():
        print(f"{step} failed: {msg}", file=sys.stderr)
    if report.errors:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
