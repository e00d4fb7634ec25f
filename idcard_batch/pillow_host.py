"""Editing host backed by Pillow, OpenCV and psd-tools.

Documents are kept in memory as a base raster plus a list of placed layers.
``.psd`` templates are read with psd-tools so their layers survive a layered
export; everything else goes through Pillow.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np
from PIL import Image
from psd_tools import PSDImage
from psd_tools.api.layers import PixelLayer

from .errors import ExportFailure, HostBusy, OpenFailure, PlacementFailure
from .geometry import BoundingBox
from .host import ExportFormat, ResampleMethod, SaveOptions

log = logging.getLogger(__name__)

RESAMPLE_FILTERS = {
    ResampleMethod.BICUBIC: Image.Resampling.BICUBIC,
    ResampleMethod.BICUBIC_SHARPER: Image.Resampling.LANCZOS,
    ResampleMethod.BICUBIC_SMOOTHER: Image.Resampling.BICUBIC,
    ResampleMethod.BILINEAR: Image.Resampling.BILINEAR,
}


def _snap(value):
    return int(math.floor(value + 0.5))


@dataclass
class Layer:
    name: str
    image: Image.Image
    left: int = 0
    top: int = 0
    placed_as: str = "linked"


@dataclass
class Document:
    path: Path
    image: Image.Image
    layers: List[Layer] = field(default_factory=list)
    psd: Optional[PSDImage] = None
    icc_profile: Optional[bytes] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


class PillowHost:
    """Single-document editing host.

    ``background`` fills new canvas area and the alpha of flattened JPEGs.
    """

    def __init__(self, background=(255, 255, 255)):
        self.background = tuple(background)
        self._active: Optional[Document] = None
        # Tried in order; each returns an RGBA image or None.
        self.place_strategies = (
            ("linked", self._decode_with_pillow),
            ("pasted", self._decode_with_opencv),
        )

    @property
    def active_document(self) -> Optional[Document]:
        return self._active

    # --- documents ---

    def open_document(self, path):
        if self._active is not None:
            raise HostBusy(f"{self._active.path.name} is still open")

        path = Path(path)
        try:
            if path.suffix.lower() == ".psd":
                psd = PSDImage.open(path)
                doc = Document(path=path, image=psd.composite().convert("RGBA"), psd=psd)
            else:
                with Image.open(path) as im:
                    im.load()
                    doc = Document(
                        path=path,
                        image=im.convert("RGBA"),
                        icc_profile=im.info.get("icc_profile"),
                    )
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise OpenFailure(f"Failed to open {path.name}: {exc}") from exc

        self._active = doc
        log.debug("Opened %s (%dx%d)", path.name, *doc.size)
        return doc

    def close(self, doc, discard_changes=True):
        if not discard_changes:
            raise ValueError("saving changes back to the source document is not supported")
        if doc is self._active:
            self._active = None
        log.debug("Closed %s", doc.path.name)

    def document_size(self, doc):
        return doc.size

    # --- layers ---

    def place_image(self, doc, path):
        path = Path(path)
        for how, decode in self.place_strategies:
            try:
                image = decode(path)
            except Image.DecompressionBombError as exc:
                # Oversized photos are refused outright, not retried with OpenCV.
                raise PlacementFailure(f"Failed to place image: {exc}") from exc
            if image is None:
                log.debug("Place (%s) failed for %s", how, path.name)
                continue
            doc_w, doc_h = doc.size
            layer = Layer(
                name=path.stem,
                image=image,
                left=(doc_w - image.width) // 2,
                top=(doc_h - image.height) // 2,
                placed_as=how,
            )
            doc.layers.append(layer)
            return layer
        raise PlacementFailure(f"Failed to place image: {path.name} could not be decoded")

    def _decode_with_pillow(self, path):
        try:
            with Image.open(path) as im:
                im.load()
                return im.convert("RGBA")
        except (OSError, ValueError):
            return None

    def _decode_with_opencv(self, path):
        pixels = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if pixels is None:
            return None
        rgb = np.ascontiguousarray(pixels[:, :, ::-1])
        return Image.fromarray(rgb).convert("RGBA")

    def measure_bounds(self, layer):
        return BoundingBox(
            layer.left, layer.top,
            layer.left + layer.image.width, layer.top + layer.image.height,
        )

    def translate(self, layer, dx, dy):
        layer.left = _snap(layer.left + dx)
        layer.top = _snap(layer.top + dy)

    def resize_layer(self, layer, width, height, method=ResampleMethod.BICUBIC_SHARPER):
        cx = layer.left + layer.image.width / 2
        cy = layer.top + layer.image.height / 2
        layer.image = layer.image.resize((width, height), RESAMPLE_FILTERS[method])
        layer.left = _snap(cx - width / 2)
        layer.top = _snap(cy - height / 2)

    # --- whole document ---

    def resize_image(self, doc, width, height, method=ResampleMethod.BICUBIC_SHARPER):
        old_w, old_h = doc.size
        sx, sy = width / old_w, height / old_h
        resample = RESAMPLE_FILTERS[method]
        doc.image = doc.image.resize((width, height), resample)
        for layer in doc.layers:
            layer.image = layer.image.resize(
                (max(_snap(layer.image.width * sx), 1), max(_snap(layer.image.height * sy), 1)),
                resample,
            )
            layer.left = _snap(layer.left * sx)
            layer.top = _snap(layer.top * sy)
        doc.psd = None

    def resize_canvas(self, doc, width, height, offset=(0, 0)):
        canvas = Image.new("RGBA", (width, height), self.background + (255,))
        canvas.paste(doc.image, offset)
        doc.image = canvas
        for layer in doc.layers:
            layer.left += offset[0]
            layer.top += offset[1]
        doc.psd = None

    def flatten(self, doc):
        doc.image = self._composite(doc)
        doc.layers = []
        doc.psd = None

    def _composite(self, doc):
        image = doc.image.copy()
        for layer in doc.layers:
            image.paste(layer.image, (layer.left, layer.top), layer.image)
        return image

    # --- export ---

    def save_as(self, doc, path, fmt, options=None):
        options = options or SaveOptions()
        path = Path(path)
        try:
            if fmt is ExportFormat.JPEG:
                self._save_jpeg(doc, path, options)
            else:
                self._save_psd(doc, path)
        except (OSError, ValueError) as exc:
            raise ExportFailure(f"Failed to save {path.name}: {exc}") from exc
        log.debug("Saved %s", path)

    def _save_jpeg(self, doc, path, options):
        image = self._composite(doc)
        flat = Image.new("RGB", image.size, self.background)
        flat.paste(image, mask=image.getchannel("A"))
        kwargs = {"quality": options.jpeg_quality, "progressive": False}
        if options.embed_color_profile and doc.icc_profile:
            kwargs["icc_profile"] = doc.icc_profile
        flat.save(path, "JPEG", **kwargs)

    def _save_psd(self, doc, path):
        psd = doc.psd
        if psd is None:
            psd = PSDImage.new("RGB", doc.size)
            psd.append(PixelLayer.frompil(doc.image, psd, "Background"))
        for layer in doc.layers:
            psd.append(PixelLayer.frompil(layer.image, psd, layer.name, layer.top, layer.left))
        psd.save(path)
