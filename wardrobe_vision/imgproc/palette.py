"""Named colour palette and RGB snapping."""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from skimage import color


class RGB(NamedTuple):
    r: int
    g: int
    b: int


class HSL(NamedTuple):
    """Hue in degrees [0, 360), saturation and lightness in [0, 1]."""

    h: float
    s: float
    l: float


class LAB(NamedTuple):
    l: float
    a: float
    b: float


@dataclass(frozen=True, slots=True)
class PaletteEntry:
    name: str
    hex: str

    @property
    def rgb(self) -> RGB:
        return hex_to_rgb(self.hex)


PALETTE: tuple[PaletteEntry, ...] = (
    PaletteEntry("Black", "#000000"),
    PaletteEntry("Grey", "#D9D9D9"),
    PaletteEntry("White", "#FFFFFF"),
    PaletteEntry("Beige", "#EEE3D1"),
    PaletteEntry("Brown", "#583B30"),
    PaletteEntry("Purple", "#8023AD"),
    PaletteEntry("Blue", "#3289E2"),
    PaletteEntry("Navy", "#144679"),
    PaletteEntry("Green", "#39C161"),
    PaletteEntry("Yellow", "#FCD759"),
    PaletteEntry("Orange", "#FB7C00"),
    PaletteEntry("Pink", "#F167A7"),
    PaletteEntry("Red", "#CD0002"),
    PaletteEntry("Maroon", "#720907"),
)
_BY_NAME = {entry.name: entry for entry in PALETTE}

# Inclusive hue ranges in degrees, checked in order. Red wraps around 0.
HUE_BUCKETS: tuple[tuple[str, float, float], ...] = (
    ("Red", 345.0, 15.0),
    ("Orange", 15.0, 45.0),
    ("Yellow", 45.0, 75.0),
    ("Green", 75.0, 165.0),
    ("Blue", 165.0, 240.0),
    ("Purple", 240.0, 290.0),
    ("Pink", 290.0, 345.0),
)
# Hue match -> palette name used when lightness falls below DARK_LIGHTNESS.
DARK_VARIANTS = {"Red": "Maroon", "Blue": "Navy", "Orange": "Brown"}

WHITE_LIGHTNESS = 0.95
BLACK_LIGHTNESS = 0.05
ACHROMATIC_SATURATION = 0.1
HUE_SATURATION = 0.15
DARK_LIGHTNESS = 0.3



def hex_to_rgb(value: str) -> RGB:
    """Parse ``#RRGGBB`` (the leading hash is optional)."""

    digits = value.strip().lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected #RRGGBB colour, got {value!r}")
    number = int(digits, 16)
    return RGB((number >> 16) & 255, (number >> 8) & 255, number & 255)


def rgb_to_hex(rgb: RGB | tuple[int, int, int]) -> str:
    r, g, b = (max(0, min(255, round(channel))) for channel in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def rgb_to_hsl(rgb: RGB | tuple[int, int, int]) -> HSL:
    r, g, b = (channel / 255.0 for channel in rgb)
    hue, lightness, saturation = colorsys.rgb_to_hls(r, g, b)
    return HSL((hue * 360) % 360, saturation, lightness)


def _to_lab_array(colors: np.ndarray) -> np.ndarray:
    """Convert an ``(n, 3)`` array of 0-255 sRGB colours to CIE Lab (D65)."""

    scaled = np.asarray(colors, dtype=np.float64).reshape(-1, 1, 3) / 255.0
    return color.rgb2lab(scaled, illuminant="D65").reshape(-1, 3)


def rgb_to_lab(rgb: RGB | tuple[int, int, int]) -> LAB:
    """Convert sRGB to CIE L*a*b* under D65."""

    l, a, b = _to_lab_array(np.array([rgb]))[0]
    return LAB(float(l), float(a), float(b))


def delta_e_cie76(first: LAB, second: LAB) -> float:
    """Euclidean distance between two Lab colours."""

    return float(color.deltaE_cie76(np.array(first), np.array(second)))


_PALETTE_LAB = _to_lab_array(np.array([entry.rgb for entry in PALETTE]))


def nearest_by_lab(rgb: RGB | tuple[int, int, int]) -> PaletteEntry:
    """Return the palette entry with the smallest delta E to ``rgb``."""

    target = _to_lab_array(np.array([rgb]))[0]
    distances = np.linalg.norm(_PALETTE_LAB - target, axis=1)
    return PALETTE[int(np.argmin(distances))]


def _hue_bucket(hue: float) -> str | None:
    for name, start, end in HUE_BUCKETS:
        if start > end:
            if hue >= start or hue <= end:
                return name
        elif start <= hue <= end:
            return name
    return None


def snap_to_palette(rgb: RGB | tuple[int, int, int]) -> PaletteEntry:
    """Snap an RGB colour to the closest named palette entry.

    Lightness extremes and greys are settled first, then saturated colours
    go through the hue buckets. Whatever is left falls back to the nearest
    palette colour in Lab space, so every input gets a name.
    """

    hsl = rgb_to_hsl(rgb)
    if hsl.l > WHITE_LIGHTNESS:
        return _BY_NAME["White"]
    if hsl.l < BLACK_LIGHTNESS:
        return _BY_NAME["Black"]

    if hsl.s < ACHROMATIC_SATURATION:
        if hsl.l < 0.2:
            return _BY_NAME["Black"]
        if hsl.l > 0.8:
            return _BY_NAME["White"]
        return _BY_NAME["Grey"]

    if hsl.s > HUE_SATURATION:
        name = _hue_bucket(hsl.h)
        if name is not None:
            if hsl.l < DARK_LIGHTNESS and name in DARK_VARIANTS:
                name = DARK_VARIANTS[name]
            return _BY_NAME[name]

    return nearest_by_lab(rgb)


def palette_entry(name: str) -> PaletteEntry:
    return _BY_NAME[name]
