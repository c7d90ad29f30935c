from fractions import Fraction

import pytest

from insta_flow.config import ReelConfig
from insta_flow.timeline import (
    ReelTimeline,
    clamp_seconds_per_image,
    frames_per_image,
    seconds_for_tempo,
    snap_to_frame_duration,
)


def test_two_seconds_at_25fps():
    assert frames_per_image(2.0, 25) == 50
    tl = ReelTimeline(25, 2.0)
    assert tl.total_duration(3) == Fraction(150, 25) == 6


@pytest.mark.parametrize("seconds", [0.1, 0.13, 0.5, 1.0, 1.98, 2.0, 3.33, 7.77, 10.0])
def test_snap_is_idempotent_and_whole_frames(seconds):
    snapped = snap_to_frame_duration(seconds, 25)
    assert snap_to_frame_duration(snapped, 25) == snapped
    assert frames_per_image(seconds, 25) >= 1
    assert abs(snapped * 25 - round(snapped * 25)) < 1e-9


def test_tiny_duration_keeps_one_frame():
    assert frames_per_image(0.0001, 25) == 1
    assert snap_to_frame_duration(0.0001, 25) == pytest.approx(0.04)


def test_clamp_range():
    assert clamp_seconds_per_image(0.0) == 0.1
    assert clamp_seconds_per_image(42) == 10.0
    assert clamp_seconds_per_image(2.5) == 2.5


def test_cursor_has_no_drift():
    tl = ReelTimeline(25, 0.12)
    assert tl.frames_per_image == 3
    pts = []
    for _ in range(1000):
        pts.extend(tl.image_frames())
    assert pts[0] == 0
    assert all(b - a == Fraction(1, 25) for a, b in zip(pts, pts[1:]))
    assert tl.cursor == Fraction(3000, 25) == 120


def test_reel_config_snaps_and_clamps():
    assert ReelConfig(seconds_per_image=1.99).seconds_per_image == pytest.approx(2.0)
    assert ReelConfig(seconds_per_image=60).seconds_per_image == 10.0
    assert ReelConfig(seconds_per_image=0.01).seconds_per_image == pytest.approx(0.12)


def test_reel_config_rejects_odd_size():
    with pytest.raises(ValueError):
        ReelConfig(size=(1081, 1920))


def test_seconds_for_tempo():
    assert seconds_for_tempo(120) == 0.5
    assert seconds_for_tempo(120, 4) == 2.0
    assert snap_to_frame_duration(seconds_for_tempo(97, 2), 25) == pytest.approx(1.24)
    with pytest.raises(ValueError):
        seconds_for_tempo(0)
    with pytest.raises(ValueError):
        seconds_for_tempo(120, 0)
