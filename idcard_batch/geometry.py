"""Placement geometry: where a placed photo has to move to hit its target."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple

# Hosts snap layers to whole pixels, so half a pixel of error is expected.
PIXEL_TOLERANCE = 0.5


class Anchor(enum.Enum):
    TOP_LEFT = "top-left"
    CENTER = "center"


@dataclass(frozen=True)
class BoundingBox:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def translated(self, dx: float, dy: float) -> "BoundingBox":
        return BoundingBox(self.left + dx, self.top + dy, self.right + dx, self.bottom + dy)


@dataclass(frozen=True)
class PlacementSpec:
    target_x: float
    target_y: float
    anchor: Anchor = Anchor.TOP_LEFT


# Photo slot positions used by the two card layouts.
LAYERED_PLACEMENT = PlacementSpec(394.0, 467.5, Anchor.TOP_LEFT)
FLATTENED_PLACEMENT = PlacementSpec(394.0, 459.0, Anchor.CENTER)


def anchor_point(bounds: BoundingBox, anchor: Anchor) -> Tuple[float, float]:
    if anchor is Anchor.CENTER:
        return (bounds.left + bounds.right) / 2, (bounds.top + bounds.bottom) / 2
    return bounds.left, bounds.top


def compute_translation(bounds: BoundingBox, spec: PlacementSpec) -> Tuple[float, float]:
    """Return ``(dx, dy)`` that moves the anchor of ``bounds`` onto the target."""
    x, y = anchor_point(bounds, spec.anchor)
    return spec.target_x - x, spec.target_y - y


def is_placed(bounds: BoundingBox, spec: PlacementSpec, tolerance: float = PIXEL_TOLERANCE) -> bool:
    dx, dy = compute_translation(bounds, spec)
    return abs(dx) <= tolerance and abs(dy) <= tolerance
