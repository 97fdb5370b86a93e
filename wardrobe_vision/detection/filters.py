"""Validity gate for detections that may become a catalog item."""

from __future__ import annotations

from dataclasses import dataclass

from wardrobe_vision.catalog.taxonomy import BELT_PATTERN, is_part_label
from wardrobe_vision.detection.geometry import area, aspect_ratio
from wardrobe_vision.detection.schemas import Detection


@dataclass(frozen=True, slots=True)
class FilterThresholds:
    """Tunable bounds for a usable item box, in unit-square terms."""

    min_area: float = 0.06
    min_aspect_ratio: float = 0.2
    max_aspect_ratio: float = 4.5


DEFAULT_THRESHOLDS = FilterThresholds()


def is_valid_item_box(
    det: Detection,
    thresholds: FilterThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Return True when the detection's normalized box can stand for an item.

    Belts are exempt from the aspect ratio bounds since they are legitimately
    long and thin.
    """

    if det.box is None:
        return False
    if is_part_label(det.label):
        return False
    if area(det.box) < thresholds.min_area:
        return False

    ratio = aspect_ratio(det.box)
    if BELT_PATTERN.search(det.label or ""):
        return True
    return thresholds.min_aspect_ratio <= ratio <= thresholds.max_aspect_ratio
