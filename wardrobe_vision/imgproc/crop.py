"""Crop/zoom transforms for rendering an item thumbnail from its box."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from wardrobe_vision.detection.geometry import to_norm_box
from wardrobe_vision.detection.schemas import BBox


@dataclass(frozen=True, slots=True)
class ZoomStyle:
    """Scale then translate, applied with the transform origin at top-left."""

    scale: float
    translate_x: float
    translate_y: float

    @property
    def transform(self) -> str:
        return f"translate({self.translate_x:.3f}px, {self.translate_y:.3f}px) scale({self.scale:.6f})"

    def as_css(self) -> dict[str, str]:
        return {"transform": self.transform, "transformOrigin": "0 0"}


def pad_box(box: BBox, padding: float) -> BBox:
    """Grow ``box`` by ``padding`` of its own size on every side, within the unit square."""

    pad_x = box.width * padding
    pad_y = box.height * padding
    return BBox(
        xmin=max(0.0, box.xmin - pad_x),
        ymin=max(0.0, box.ymin - pad_y),
        xmax=min(1.0, box.xmax + pad_x),
        ymax=min(1.0, box.ymax + pad_y),
    )


def _cover_style(natural: tuple[float, float], container: tuple[float, float]) -> ZoomStyle:
    nat_w, nat_h = natural
    cont_w, cont_h = container
    if nat_w <= 0 or nat_h <= 0:
        return ZoomStyle(scale=1.0, translate_x=0.0, translate_y=0.0)
    scale = max(cont_w / nat_w, cont_h / nat_h)
    return ZoomStyle(
        scale=scale,
        translate_x=cont_w / 2 - scale * nat_w / 2,
        translate_y=cont_h / 2 - scale * nat_h / 2,
    )


def compute_zoom_style(
    bbox: Any,
    natural_dims: tuple[float, float],
    container_dims: tuple[float, float],
    padding: float = 0.1,
) -> ZoomStyle:
    """Return the transform that zooms the padded box to fill the container.

    ``bbox`` may be normalized or in natural pixels. The padded box's
    binding side fills the container exactly (it may overflow on the other
    side) and its center lands on the container center. Without a usable box
    the whole image is cover-fitted instead.
    """

    nat_w, nat_h = natural_dims
    cont_w, cont_h = container_dims
    box = to_norm_box(bbox, nat_w, nat_h)
    if box is None or nat_w <= 0 or nat_h <= 0:
        return _cover_style(natural_dims, container_dims)

    padded = pad_box(box, padding)
    padded_w = padded.width * nat_w
    padded_h = padded.height * nat_h
    scale = max(cont_w / padded_w, cont_h / padded_h)

    center_x, center_y = padded.center
    return ZoomStyle(
        scale=scale,
        translate_x=cont_w / 2 - scale * center_x * nat_w,
        translate_y=cont_h / 2 - scale * center_y * nat_h,
    )


def project_box(
    box: BBox,
    natural_dims: tuple[float, float],
    zoom: ZoomStyle,
) -> tuple[float, float, float, float]:
    """Map a normalized box into container pixels as ``(left, top, width, height)``."""

    nat_w, nat_h = natural_dims
    return (
        box.xmin * nat_w * zoom.scale + zoom.translate_x,
        box.ymin * nat_h * zoom.scale + zoom.translate_y,
        box.width * nat_w * zoom.scale,
        box.height * nat_h * zoom.scale,
    )
