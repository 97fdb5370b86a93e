"""Non-max suppression over detections sharing a label."""

from __future__ import annotations

from typing import Sequence

from wardrobe_vision.detection.geometry import iou
from wardrobe_vision.detection.schemas import Detection


def _label_key(det: Detection) -> str:
    return (det.label or "").strip().lower()


def nms_same_label(
    detections: Sequence[Detection],
    iou_threshold: float = 0.5,
) -> list[Detection]:
    """Greedy NMS that only suppresses overlaps between identical labels.

    Cross-label duplicates are left for the category vote. Detections
    without a box can't overlap anything and are always kept.
    """

    remaining = sorted(detections, key=lambda det: det.score, reverse=True)
    kept: list[Detection] = []

    while remaining:
        best = remaining.pop(0)
        kept.append(best)
        if best.box is None:
            continue
        remaining = [
            det
            for det in remaining
            if det.box is None
            or _label_key(det) != _label_key(best)
            or iou(det.box, best.box) <= iou_threshold
        ]
    return kept
