"""Dominant colour extraction utilities."""

from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from wardrobe_vision.imgproc.palette import RGB, PaletteEntry, snap_to_palette

ALPHA_MIN = 128
BACKGROUND_LIGHTNESS = 0.97
WHITE_DOMINANCE = 3


class ImageLoadError(ValueError):
    """Raised when image bytes cannot be decoded."""


def load_image(data: bytes) -> Image.Image:
    """Decode image bytes into an RGBA Pillow image."""

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageLoadError("Image bytes could not be decoded.") from exc


class ColorExtractor:
    """Averages the foreground of a downsampled image.

    Near-white pixels are treated as studio background. When they outnumber
    the rest by more than ``WHITE_DOMINANCE`` to one the garment itself is
    taken to be white.
    """

    def __init__(self, sample_size: int = 64) -> None:
        self._sample_size = sample_size

    def dominant_color(self, image: Image.Image | bytes) -> RGB:
        if isinstance(image, bytes):
            image = load_image(image)

        sample = image.convert("RGBA").resize(
            (self._sample_size, self._sample_size),
            Image.Resampling.BILINEAR,
        )
        pixels = np.asarray(sample, dtype=np.int64)
        rgb = pixels[..., :3]
        opaque = pixels[..., 3] >= ALPHA_MIN
        lightness = (rgb.max(axis=-1) + rgb.min(axis=-1)) / 2 / 255
        background = opaque & (lightness > BACKGROUND_LIGHTNESS)
        foreground = opaque & ~background

        count = int(foreground.sum())
        if int(background.sum()) > WHITE_DOMINANCE * count:
            return RGB(255, 255, 255)
        if count == 0:
            # Nothing opaque at all: average everything.
            return _mean_rgb(rgb.reshape(-1, 3))
        return _mean_rgb(rgb[foreground])

    def dominant_palette_entry(self, image: Image.Image | bytes) -> PaletteEntry:
        return snap_to_palette(self.dominant_color(image))


def get_dominant_color(image: Image.Image | bytes, size: int = 64) -> RGB:
    return ColorExtractor(sample_size=size).dominant_color(image)


def _mean_rgb(pixels: np.ndarray) -> RGB:
    count = max(len(pixels), 1)
    return RGB(*(round(int(total) / count) for total in pixels.sum(axis=0)))
