"""Box geometry helpers shared by filtering, voting and cropping."""

from __future__ import annotations

import math
from typing import Any, Mapping, Sequence

from wardrobe_vision.detection.schemas import BBox, Detection

MIN_SIDE = 0.01
ASPECT_EPSILON = 1e-6


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _raw_coordinates(raw: Any) -> list[float] | None:
    if isinstance(raw, BBox):
        values: Sequence[Any] = raw.to_xyxy()
    elif isinstance(raw, Mapping):
        values = [raw.get(key) for key in ("xmin", "ymin", "xmax", "ymax")]
    elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)) and len(raw) == 4:
        values = raw
    else:
        return None

    coords: list[float] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value):
            return None
        coords.append(float(value))
    return coords


def to_norm_box(
    raw: Any,
    img_w: float | None = None,
    img_h: float | None = None,
) -> BBox | None:
    """Normalize a detector box to the unit square.

    Accepts a ``BBox``, an ``{xmin, ymin, xmax, ymax}`` mapping or an ordered
    4-sequence of corners. Any coordinate above 1 marks the box as pixel
    valued, which needs the image size to rescale. Swapped corners are
    reordered. Returns ``None`` for anything unusable, never raises.
    """

    coords = _raw_coordinates(raw)
    if coords is None:
        return None

    # The detector emits [1, 1, 1, 1] as a placeholder for "no box".
    if all(value == 1 for value in coords):
        return None

    x1, y1, x2, y2 = coords
    if any(value > 1 for value in coords):
        if not img_w or not img_h or img_w <= 0 or img_h <= 0:
            return None
        x1, x2 = x1 / img_w, x2 / img_w
        y1, y2 = y1 / img_h, y2 / img_h

    x1, y1, x2, y2 = (_clamp01(value) for value in (x1, y1, x2, y2))
    box = BBox(
        xmin=min(x1, x2),
        ymin=min(y1, y2),
        xmax=max(x1, x2),
        ymax=max(y1, y2),
    )
    if box.width <= MIN_SIDE or box.height <= MIN_SIDE:
        return None
    return box


def normalize_xywh(value: Any) -> list[float] | None:
    """Validate a stored ``[x, y, w, h]`` box, clamping each entry to [0, 1]."""

    if not isinstance(value, (list, tuple)) or len(value) != 4:
        return None
    if any(isinstance(item, bool) or not isinstance(item, (int, float)) for item in value):
        return None
    if not all(math.isfinite(item) for item in value):
        return None
    return [_clamp01(float(item)) for item in value]


def area(box: BBox) -> float:
    return max(0.0, box.width) * max(0.0, box.height)


def aspect_ratio(box: BBox) -> float:
    """Width over height, with the height floored to avoid division by zero."""

    return box.width / max(box.height, ASPECT_EPSILON)


def iou(a: BBox, b: BBox) -> float:
    """Intersection over union of two boxes in the same coordinate space."""

    inter_w = max(0.0, min(a.xmax, b.xmax) - max(a.xmin, b.xmin))
    inter_h = max(0.0, min(a.ymax, b.ymax) - max(a.ymin, b.ymin))
    intersection = inter_w * inter_h
    union = area(a) + area(b) - intersection
    if union <= 0:
        return 0.0
    return intersection / union


def normalize_detections(
    detections: Sequence[Detection],
    img_w: float | None = None,
    img_h: float | None = None,
) -> list[Detection]:
    """Replace each raw box with its normalized form, or ``None`` if unusable."""

    return [det.with_box(to_norm_box(det.box, img_w, img_h)) for det in detections]
