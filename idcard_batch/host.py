"""Capabilities the batch needs from an image-editing host.

The orchestrator never touches pixels itself. It drives a host object that
can open a document, place a photo into it as a layer, move that layer,
resize, flatten, save and close. :class:`~idcard_batch.pillow_host.PillowHost`
is the implementation shipped here; tests use a recording fake.

A host holds at most one open document at a time.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol, Tuple

from .geometry import BoundingBox


class ExportFormat(enum.Enum):
    PSD = "psd"
    JPEG = "jpg"

    @property
    def suffix(self) -> str:
        return "." + self.value

    @property
    def layered(self) -> bool:
        return self is ExportFormat.PSD

    @classmethod
    def parse(cls, value: str) -> "ExportFormat":
        value = value.lower().lstrip(".")
        if value == "jpeg":
            value = "jpg"
        return cls(value)


class ResampleMethod(enum.Enum):
    BICUBIC = "bicubic"
    BICUBIC_SHARPER = "bicubic_sharper"
    BICUBIC_SMOOTHER = "bicubic_smoother"
    BILINEAR = "bilinear"


@dataclass(frozen=True)
class SaveOptions:
    jpeg_quality: int = 95
    embed_color_profile: bool = True


class EditingHost(Protocol):
    def open_document(self, path: Path) -> Any:
        ...

    def place_image(self, doc: Any, path: Path) -> Any:
        ...

    def measure_bounds(self, layer: Any) -> BoundingBox:
        ...

    def translate(self, layer: Any, dx: float, dy: float) -> None:
        ...

    def document_size(self, doc: Any) -> Tuple[int, int]:
        ...

    def resize_image(self, doc: Any, width: int, height: int, method: ResampleMethod) -> None:
        ...

    def resize_canvas(self, doc: Any, width: int, height: int, offset: Tuple[int, int]) -> None:
        """Grow the canvas to ``width x height``, new area in the background colour.

        Takes the ``(left, top)`` pixel offset of the old content instead of
        an anchor name, so an odd padding pixel lands on a known edge.
        """

    def resize_layer(self, layer: Any, width: int, height: int, method: ResampleMethod) -> None:
        ...

    def flatten(self, doc: Any) -> None:
        ...

    def save_as(self, doc: Any, path: Path, fmt: ExportFormat, options: Optional[SaveOptions] = None) -> None:
        ...

    def close(self, doc: Any, discard_changes: bool = True) -> None:
        ...
