"""Tests for the zoom transform used to render item thumbnails."""

from __future__ import annotations

import pytest

from wardrobe_vision.detection.schemas import BBox
from wardrobe_vision.imgproc.crop import compute_zoom_style, pad_box, project_box


def test_pixel_box_is_centered_and_fills_container() -> None:
    style = compute_zoom_style([10, 10, 50, 50], (100, 100), (200, 200), padding=0.1)

    padded_side = 40 * 1.2
    assert style.scale * padded_side == pytest.approx(200)
    # Box center (30, 30) lands on the container center.
    assert 30 * style.scale + style.translate_x == pytest.approx(100)
    assert 30 * style.scale + style.translate_y == pytest.approx(100)


def test_binding_side_fills_container_exactly() -> None:
    style = compute_zoom_style(BBox(0.2, 0.1, 0.4, 0.9), (1000, 500), (300, 300), padding=0.0)

    padded_w, padded_h = 200, 400
    assert style.scale == pytest.approx(max(300 / padded_w, 300 / padded_h))
    assert style.scale * padded_w == pytest.approx(300)


def test_padding_is_clamped_to_image() -> None:
    padded = pad_box(BBox(0.0, 0.0, 0.5, 0.5), 0.2)

    assert padded.to_xyxy() == pytest.approx([0.0, 0.0, 0.6, 0.6])


def test_missing_box_cover_fits_whole_image() -> None:
    style = compute_zoom_style(None, (100, 50), (200, 200))

    assert style.scale == pytest.approx(4.0)
    assert style.translate_x == pytest.approx(-100.0)
    assert style.translate_y == pytest.approx(0.0)


def test_same_inputs_give_identical_transform() -> None:
    args = ([0.25, 0.3, 0.5, 0.8], (640, 480), (160, 200))

    assert compute_zoom_style(*args) == compute_zoom_style(*args)
    assert compute_zoom_style(*args).as_css()["transformOrigin"] == "0 0"


def test_project_box_matches_zoom() -> None:
    box = BBox(0.1, 0.1, 0.5, 0.5)
    style = compute_zoom_style(box, (100, 100), (200, 200), padding=0.0)

    left, top, width, height = project_box(box, (100, 100), style)

    assert (left, top) == pytest.approx((0.0, 0.0))
    assert (width, height) == pytest.approx((200.0, 200.0))
