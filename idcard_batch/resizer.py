"""Target-size arithmetic for the batch resizer.

Two modes are supported:

* ``STRETCH`` scales straight to the target size and may distort.
* ``FIT_WITH_PADDING`` scales by ``min(tw / w, th / h)`` so the whole image
  fits the box, then pads the canvas out to the exact target size with the
  image centred. When the padding cannot be split evenly the odd pixel goes
  to the trailing edge (right or bottom).
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidDimension

DEFAULT_TARGET_SIZE = (195, 247)


class ResizeMode(enum.Enum):
    STRETCH = "stretch"
    FIT_WITH_PADDING = "fit"


@dataclass(frozen=True)
class ResizeSpec:
    target_width: int
    target_height: int
    mode: ResizeMode = ResizeMode.FIT_WITH_PADDING

    def __post_init__(self) -> None:
        if self.target_width <= 0 or self.target_height <= 0:
            raise InvalidDimension(
                f"target size must be positive, got {self.target_width}x{self.target_height}"
            )


@dataclass(frozen=True)
class ResizePlan:
    scaled_size: Tuple[int, int]
    canvas_size: Tuple[int, int]
    padding: Tuple[int, int, int, int]  # left, top, right, bottom

    @property
    def needs_canvas(self) -> bool:
        return self.scaled_size != self.canvas_size

    @property
    def offset(self) -> Tuple[int, int]:
        """Where the scaled image's top-left corner sits on the canvas."""
        return self.padding[0], self.padding[1]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _split(delta: int) -> Tuple[int, int]:
    lead = delta // 2
    return lead, delta - lead


def compute_resize(width: int, height: int, spec: ResizeSpec) -> ResizePlan:
    """Work out scaled size, canvas size and padding for a ``width`` x ``height`` image."""
    if width <= 0 or height <= 0:
        raise InvalidDimension(f"invalid image size {width}x{height}")

    target = (spec.target_width, spec.target_height)
    if spec.mode is ResizeMode.STRETCH:
        return ResizePlan(scaled_size=target, canvas_size=target, padding=(0, 0, 0, 0))

    scale = min(spec.target_width / width, spec.target_height / height)
    new_w = min(max(_round_half_up(width * scale), 1), spec.target_width)
    new_h = min(max(_round_half_up(height * scale), 1), spec.target_height)

    left, right = _split(spec.target_width - new_w)
    top, bottom = _split(spec.target_height - new_h)
    return ResizePlan(
        scaled_size=(new_w, new_h),
        canvas_size=target,
        padding=(left, top, right, bottom),
    )
