from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def make_photo(path: Path, size=(60, 40), color=(200, 120, 40)) -> Path:
    Image.new("RGB", size, color).save(path)
    return path


def make_broken(path: Path) -> Path:
    path.write_bytes(b"this is not an image")
    return path


class FakeSession:
    """In-memory stand-in for the ffmpeg session."""

    def __init__(self, path, config, busy_polls=0, fail_open=None, finish_status="completed"):
        self.path = str(path)
        self.config = config
        self.busy_polls = busy_polls
        self.fail_open = fail_open
        self.finish_status = finish_status
        self.frames = []
        self.pts = []
        self.polls = 0
        self.status = "idle"
        self.diagnostic = ""
        self.marked = False
        self.aborted = False

    def open(self):
        if self.fail_open is not None:
            raise self.fail_open
        self.status = "writing"

    @property
    def ready_for_more_data(self):
        self.polls += 1
        return self.busy_polls == 0 or self.polls % (self.busy_polls + 1) == 0

    def append(self, buffer, pts):
        self.frames.append(buffer)
        self.pts.append(pts)

    def mark_finished(self):
        self.marked = True

    def finish(self):
        self.status = self.finish_status
        if self.finish_status != "completed":
            self.diagnostic = "disk full"
        return self.status

    def abort(self):
        self.aborted = True
        self.status = "failed"


@pytest.fixture
def fake_sessions():
    """Return ``(factory, created)``; keyword args go to every session."""
    created = []

    def build(**opts):
        def factory(path, config):
            s = FakeSession(path, config, **opts)
            created.append(s)
            return s

        return factory

    return build, created


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    folder = tmp_path / "photos"
    folder.mkdir()
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (0, 255, 255)]
    for i, c in enumerate(colors, 1):
        make_photo(folder / f"img{i}.png", (80, 60), c)
    return folder


def solid(w: int, h: int, color) -> np.ndarray:
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[...] = color
    return arr
