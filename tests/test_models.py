from pathlib import Path

import pytest

from conftest import make_photo
from insta_flow.config import ExportConfig, parse_color, size_for_aspect
from insta_flow.models import (
    SourceImage,
    apply_offsets,
    load_offsets,
    ordered_enabled,
    scan_folder,
)


def test_offsets_are_clamped():
    im = SourceImage("a.jpg", offset_x=3, offset_y=-2.5)
    assert im.offset == (1.0, -1.0)


def test_ordered_enabled_filters_and_sorts():
    a = SourceImage("a.jpg", order_index=3)
    b = SourceImage("b.jpg", order_index=1, disabled=True)
    c = SourceImage("c.jpg", order_index=0)
    assert ordered_enabled([a, b, c]) == [c, a]


def test_scan_folder_sorted_case_insensitive(tmp_path: Path):
    for name in ["B.png", "a.JPG", "c.txt", "d.bmp"]:
        if name.endswith(".txt"):
            (tmp_path / name).write_text("x")
        else:
            make_photo(tmp_path / name)
    images = scan_folder(tmp_path)
    assert [im.name for im in images] == ["a.JPG", "B.png", "d.bmp"]
    assert [im.order_index for im in images] == [0, 1, 2]


def test_load_and_apply_offsets(tmp_path: Path, caplog):
    spec = tmp_path / "offsets.yaml"
    spec.write_text(
        "offsets:\n"
        "  a.png: [0.5, 0]\n"
        "  b.png: {x: 0, y: -1}\n"
        "  ghost.png: [1, 1]\n"
        "disabled: [c.png]\n"
    )
    offsets, disabled = load_offsets(spec)
    images = [SourceImage(tmp_path / n, order_index=i) for i, n in enumerate(["a.png", "b.png", "c.png"])]
    out = apply_offsets(images, offsets, disabled)
    assert out[0].offset == (0.5, 0.0)
    assert out[1].offset == (0.0, -1.0)
    assert out[2].disabled
    assert out[0].id == images[0].id
    assert "ghost.png" in caplog.text


def test_bare_offsets_mapping(tmp_path: Path):
    spec = tmp_path / "o.yaml"
    spec.write_text("a.png: [0.1, 0.2]\n")
    offsets, disabled = load_offsets(spec)
    assert offsets == {"a.png": (0.1, 0.2)} and disabled == []


@pytest.mark.parametrize(
    "value,expected",
    [("#FF0080", (255, 0, 128)), ("white", (255, 255, 255)), ((1, 2, 3), (1, 2, 3))],
)
def test_parse_color(value, expected):
    assert parse_color(value) == expected


@pytest.mark.parametrize("value", ["#12345", "nope", (1, 2), (300, 0, 0)])
def test_parse_color_rejects(value):
    with pytest.raises(ValueError):
        parse_color(value)


def test_aspect_sizes():
    assert size_for_aspect("1:1") == (1080, 1080)
    assert size_for_aspect("4:5") == (1080, 1350)
    assert size_for_aspect("9:16") == (1080, 1920)


def test_export_config_validates():
    with pytest.raises(ValueError):
        ExportConfig((0, 100))
    with pytest.raises(ValueError):
        ExportConfig((10, 10), zoom_mode="stretch")


def test_nan_offset_recenters():
    im = SourceImage("a.jpg", offset_x=float("nan"), offset_y=0.3)
    assert im.offset == (0.0, 0.3)
