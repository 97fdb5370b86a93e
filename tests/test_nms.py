"""Tests for same-label non-max suppression."""

from __future__ import annotations

from itertools import combinations

from wardrobe_vision.detection.geometry import iou
from wardrobe_vision.detection.nms import nms_same_label
from wardrobe_vision.detection.schemas import BBox, Detection


def test_overlapping_same_label_keeps_best() -> None:
    detections = [
        Detection(0.6, "shirt", BBox(0.1, 0.1, 0.6, 0.6)),
        Detection(0.9, "shirt", BBox(0.12, 0.1, 0.62, 0.6)),
    ]

    kept = nms_same_label(detections)

    assert kept == [detections[1]]


def test_overlapping_different_labels_are_kept() -> None:
    detections = [
        Detection(0.9, "shirt", BBox(0.1, 0.1, 0.6, 0.6)),
        Detection(0.8, "jacket", BBox(0.1, 0.1, 0.6, 0.6)),
    ]

    assert len(nms_same_label(detections)) == 2


def test_label_comparison_ignores_case() -> None:
    detections = [
        Detection(0.9, "Shirt", BBox(0.1, 0.1, 0.6, 0.6)),
        Detection(0.5, "shirt ", BBox(0.1, 0.1, 0.6, 0.6)),
    ]

    assert len(nms_same_label(detections)) == 1


def test_boxless_detections_survive() -> None:
    detections = [
        Detection(0.9, "shirt", BBox(0.1, 0.1, 0.6, 0.6)),
        Detection(0.4, "shirt", None),
    ]

    assert len(nms_same_label(detections)) == 2


def test_output_has_no_same_label_overlaps() -> None:
    detections = [
        Detection(0.1 * index, "shoe" if index % 2 else "bag", BBox(0.05 * index, 0.1, 0.05 * index + 0.4, 0.5))
        for index in range(1, 9)
    ]

    kept = nms_same_label(detections, iou_threshold=0.5)

    assert len(kept) <= len(detections)
    for first, second in combinations(kept, 2):
        if first.label == second.label:
            assert iou(first.box, second.box) <= 0.5
