"""Data structures describing detector output."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class BBox:
    """Axis-aligned box as corner coordinates.

    Units are ambiguous (pixels or fractions of the image) until the box goes
    through ``geometry.to_norm_box``. Boxes returned from there are always
    normalized to the unit square with ``xmin < xmax`` and ``ymin < ymax``.
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self) -> tuple[float, float]:
        return (self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2

    def to_xyxy(self) -> list[float]:
        return [self.xmin, self.ymin, self.xmax, self.ymax]

    def to_xywh(self) -> list[float]:
        """Return the ``[x, y, w, h]`` form persisted for items."""

        return [self.xmin, self.ymin, self.width, self.height]

    @classmethod
    def from_xywh(cls, values: list[float] | tuple[float, ...]) -> "BBox":
        x, y, w, h = values
        return cls(xmin=x, ymin=y, xmax=x + w, ymax=y + h)


@dataclass(frozen=True, slots=True)
class Detection:
    """Single detector prediction."""

    score: float
    label: str
    box: BBox | None = None

    def with_box(self, box: BBox | None) -> "Detection":
        return replace(self, box=box)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Detection":
        """Build a detection from one raw inference entry.

        Endpoints disagree on field names, so the label may arrive as
        ``label``, ``class`` or ``category``. The box is kept raw; callers
        normalize it against the image size.
        """

        raw_label = payload.get("label") or payload.get("class") or payload.get("category") or ""
        label = str(raw_label).replace("_", " ").strip().lower()

        try:
            score = float(payload.get("score") or 0.0)
        except (TypeError, ValueError):
            score = 0.0

        return cls(score=score, label=label, box=_coerce_box(payload.get("box")))


def _coerce_box(raw: Any) -> BBox | None:
    values: list[Any]
    if isinstance(raw, BBox):
        return raw
    if isinstance(raw, Mapping):
        values = [raw.get(key) for key in ("xmin", "ymin", "xmax", "ymax")]
    elif isinstance(raw, (list, tuple)) and len(raw) == 4:
        values = list(raw)
    else:
        return None

    try:
        coords = [float(value) for value in values]
    except (TypeError, ValueError):
        return None
    return BBox(*coords)


def parse_detections(payload: Any) -> list[Detection]:
    """Convert a raw inference response into detections, ignoring junk entries."""

    if not isinstance(payload, list):
        return []
    return [Detection.from_payload(entry) for entry in payload if isinstance(entry, Mapping)]


@dataclass(frozen=True, slots=True)
class NormalizedResult:
    """Final per-image output handed over to item persistence."""

    category: str
    bbox: BBox | None
    color_name: str | None
    color_hex: str | None
    top_labels: tuple[str, ...]

    def as_record(self) -> dict[str, Any]:
        """Return the column mapping written to the items table."""

        return {
            "category": self.category,
            "bbox": self.bbox.to_xywh() if self.bbox else None,
            "color_name": self.color_name,
            "color_hex": self.color_hex,
            "yolos_top_labels": list(self.top_labels),
        }
