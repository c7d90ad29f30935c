from pathlib import Path

import pytest
from PIL import Image

from conftest import make_broken, make_photo
from insta_flow.config import ExportConfig
from insta_flow.encoder import ExportError
from insta_flow.models import SourceImage
from insta_flow.stills import copy_originals, export_batch, still_name


def test_still_name():
    assert still_name(1) == "image_001.jpg"
    assert still_name(42, "png") == "image_042.png"


def test_partial_failure_keeps_going(tmp_path: Path):
    images = []
    for i in range(5):
        p = tmp_path / f"src{i}.jpg"
        if i == 2:
            make_broken(p)
        else:
            make_photo(p, (120, 90), (i * 50, 0, 0))
        images.append(SourceImage(p, order_index=i))

    out = export_batch(images, ExportConfig.square(border=5), tmp_path / "Square")
    assert [p.name for p in out] == [
        "image_001.jpg",
        "image_002.jpg",
        "image_004.jpg",
        "image_005.jpg",
    ]
    assert all(p.exists() for p in out)
    with Image.open(out[0]) as img:
        assert img.size == (1080, 1080)


def test_disabled_and_order(tmp_path: Path):
    a = SourceImage(make_photo(tmp_path / "a.png"), order_index=2)
    b = SourceImage(make_photo(tmp_path / "b.png", color=(0, 0, 0)), order_index=0)
    c = SourceImage(make_photo(tmp_path / "c.png"), order_index=1, disabled=True)
    out = export_batch([a, b, c], ExportConfig((40, 50)), tmp_path / "out")
    assert [p.name for p in out] == ["image_001.jpg", "image_002.jpg"]
    with Image.open(out[0]) as img:
        assert max(img.getpixel((20, 25))) < 20


def test_creates_nested_output_dir(tmp_path: Path):
    src = SourceImage(make_photo(tmp_path / "a.png"))
    target = tmp_path / "deep" / "er" / "Images"
    out = export_batch([src], ExportConfig.portrait(), target)
    assert target.is_dir()
    assert out == [target / "image_001.jpg"]


def test_unusable_output_dir_is_hard_failure(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    src = SourceImage(make_photo(tmp_path / "a.png"))
    with pytest.raises(ExportError):
        export_batch([src], ExportConfig.square(), blocker / "Square")


def test_write_failure_skips_item(tmp_path: Path, monkeypatch, caplog):
    images = [SourceImage(make_photo(tmp_path / f"{i}.png"), order_index=i) for i in range(3)]
    real = Path.write_bytes

    def flaky(self, data):
        if self.name == "image_002.jpg":
            raise OSError("disk full")
        return real(self, data)

    monkeypatch.setattr(Path, "write_bytes", flaky)
    out = export_batch(images, ExportConfig((30, 30)), tmp_path / "out")
    assert [p.name for p in out] == ["image_001.jpg", "image_003.jpg"]
    assert "disk full" in caplog.text


def test_progress_reports_each_item(tmp_path: Path):
    images = [SourceImage(make_photo(tmp_path / f"{i}.png"), order_index=i) for i in range(4)]
    seen = []
    export_batch(images, ExportConfig((20, 20)), tmp_path / "out", progress=seen.append)
    assert seen == [0.25, 0.5, 0.75, 1.0]


def test_compositing_failure_skips_item(tmp_path: Path, monkeypatch, caplog):
    from insta_flow import compositor

    images = [SourceImage(make_photo(tmp_path / f"{i}.png"), order_index=i) for i in range(3)]
    real = compositor.render_canvas
    calls = []

    def starved(pixels, offset, config):
        calls.append(1)
        if len(calls) == 2:
            raise MemoryError
        return real(pixels, offset, config)

    monkeypatch.setattr(compositor, "render_canvas", starved)
    out = export_batch(images, ExportConfig((30, 30)), tmp_path / "out")
    assert [p.name for p in out] == ["image_001.jpg", "image_003.jpg"]
    assert "cannot allocate" in caplog.text


def test_copy_originals_keeps_bytes_and_extension(tmp_path: Path):
    a = make_photo(tmp_path / "b.PNG")
    b = make_photo(tmp_path / "a.bmp")
    missing = tmp_path / "gone.jpg"
    images = [
        SourceImage(a, order_index=1),
        SourceImage(b, order_index=0),
        SourceImage(missing, order_index=2),
    ]
    out = copy_originals(images, tmp_path / "Original")
    assert [p.name for p in out] == ["image_001.bmp", "image_002.PNG"]
    assert out[1].read_bytes() == a.read_bytes()
