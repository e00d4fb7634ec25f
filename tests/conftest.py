from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from idcard_batch.errors import HostBusy
from idcard_batch.geometry import BoundingBox


@dataclass
class FakeLayer:
    path: Path
    left: float
    top: float
    width: float
    height: float


@dataclass
class FakeDoc:
    path: Path
    size: Tuple[int, int]
    layers: List[FakeLayer] = field(default_factory=list)
    flattened: bool = False


class FakeHost:
    """Records every call; fails on demand per file stem."""

    def __init__(self, doc_size=(800, 600), photo_size=(150, 190), sizes=None, fail=None):
        self.doc_size = doc_size
        self.photo_size = photo_size
        self.sizes: Dict[str, Tuple[int, int]] = sizes or {}
        self.fail: Dict[Tuple[str, str], Exception] = fail or {}
        self.calls: List[tuple] = []
        self.open_doc: Optional[FakeDoc] = None
        self.saved: List[Path] = []

    def _maybe_fail(self, step, path):
        exc = self.fail.get((step, Path(path).stem))
        if exc is not None:
            raise exc

    def open_document(self, path):
        if self.open_doc is not None:
            raise HostBusy("busy")
        self.calls.append(("open", Path(path).name))
        self._maybe_fail("open", path)
        self.open_doc = FakeDoc(Path(path), self.sizes.get(Path(path).stem, self.doc_size))
        return self.open_doc

    def place_image(self, doc, path):
        self.calls.append(("place", Path(path).name))
        self._maybe_fail("place", path)
        w, h = self.photo_size
        layer = FakeLayer(Path(path), (doc.size[0] - w) / 2, (doc.size[1] - h) / 2, w, h)
        doc.layers.append(layer)
        return layer

    def measure_bounds(self, layer):
        return BoundingBox(layer.left, layer.top, layer.left + layer.width, layer.top + layer.height)

    def translate(self, layer, dx, dy):
        self.calls.append(("translate", round(dx, 3), round(dy, 3)))
        layer.left += dx
        layer.top += dy

    def document_size(self, doc):
        return doc.size

    def resize_image(self, doc, width, height, method):
        self.calls.append(("resize_image", width, height))
        doc.size = (width, height)

    def resize_canvas(self, doc, width, height, offset):
        self.calls.append(("resize_canvas", width, height, offset))
        doc.size = (width, height)

    def resize_layer(self, layer, width, height, method):
        self.calls.append(("resize_layer", width, height))
        layer.width, layer.height = width, height

    def flatten(self, doc):
        self.calls.append(("flatten",))
        doc.flattened = True

    def save_as(self, doc, path, fmt, options=None):
        self.calls.append(("save", Path(path).name, fmt))
        self._maybe_fail("save", doc.path)
        Path(path).write_bytes(b"fake")
        self.saved.append(Path(path))

    def close(self, doc, discard_changes=True):
        self.calls.append(("close", doc.path.name, discard_changes))
        self.open_doc = None


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def card_dirs(tmp_path):
    templates = tmp_path / "psd"
    assets = tmp_path / "photos"
    output = tmp_path / "out"
    templates.mkdir()
    assets.mkdir()
    return templates, assets, output


def touch(directory, *names):
    for name in names:
        (Path(directory) / name).write_bytes(b"")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("IDCARD_"):
            monkeypatch.delenv(key, raising=False)
