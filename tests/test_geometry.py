from __future__ import annotations

import pytest

from idcard_batch.geometry import (
    FLATTENED_PLACEMENT,
    LAYERED_PLACEMENT,
    Anchor,
    BoundingBox,
    PlacementSpec,
    anchor_point,
    compute_translation,
    is_placed,
)

BOXES = [
    BoundingBox(0, 0, 195, 247),
    BoundingBox(302.5, 176, 497.5, 424),
    BoundingBox(-40, -12, 60, 101),
    BoundingBox(1000, 900, 1001, 901),
]


def test_top_left_translation() -> None:
    spec = PlacementSpec(394.0, 467.5, Anchor.TOP_LEFT)
    assert compute_translation(BoundingBox(100, 200, 300, 400), spec) == (294.0, 267.5)


def test_center_translation() -> None:
    spec = PlacementSpec(394.0, 459.0, Anchor.CENTER)
    assert compute_translation(BoundingBox(100, 200, 300, 400), spec) == (94.0, 159.0)


@pytest.mark.parametrize("box", BOXES)
@pytest.mark.parametrize("spec", [LAYERED_PLACEMENT, FLATTENED_PLACEMENT])
def test_translation_lands_anchor_on_target(box: BoundingBox, spec: PlacementSpec) -> None:
    dx, dy = compute_translation(box, spec)
    moved = box.translated(dx, dy)
    assert anchor_point(moved, spec.anchor) == pytest.approx((spec.target_x, spec.target_y))
    assert compute_translation(moved, spec) == pytest.approx((0.0, 0.0))
    assert is_placed(moved, spec)


@pytest.mark.parametrize("box", BOXES)
def test_integer_grid_stays_within_tolerance(box: BoundingBox) -> None:
    spec = FLATTENED_PLACEMENT
    dx, dy = compute_translation(box, spec)
    # what a host that snaps to whole pixels would do
    moved = box.translated(round(box.left + dx) - box.left, round(box.top + dy) - box.top)
    assert is_placed(moved, spec)


def test_not_placed_outside_tolerance() -> None:
    assert not is_placed(BoundingBox(0, 0, 10, 10), PlacementSpec(2, 0, Anchor.TOP_LEFT))


def test_box_size() -> None:
    box = BoundingBox(10, 20, 205, 267)
    assert (box.width, box.height) == (195, 247)
