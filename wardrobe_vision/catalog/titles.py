"""Human-readable item titles."""

from __future__ import annotations

import re

from wardrobe_vision.catalog.taxonomy import TaxonomyEntry

NOUN_BY_SUBCATEGORY = {
    "t-shirt": "t-shirt",
    "shirt": "shirt",
    "top": "top",
    "sweater": "sweater",
    "cardigan": "cardigan",
    "vest": "vest",
    "skirt": "skirt",
    "trousers": "jeans",
    "shorts": "shorts",
    "dress": "dress",
    "jumpsuit": "jumpsuit",
    "jacket": "jacket",
    "coat": "coat",
    "blazer": "blazer",
    "cape": "cape",
    "sneakers": "sneakers",
    "boots": "boots",
    "sandals": "sandals",
    "heels": "heels",
    "flats": "flats",
    "shoes": "shoes",
    "handbag": "bag",
    "tote": "tote bag",
    "shoulder": "shoulder bag",
    "clutch": "clutch",
    "backpack": "backpack",
    "wallet": "wallet",
    "belt": "belt",
    "sunglasses": "sunglasses",
    "hat": "hat",
    "scarf": "scarf",
    "item": "clothing",
}

_IMAGE_SUFFIX_RE = re.compile(r"\.(jpe?g|png|gif|webp|heic)$", re.IGNORECASE)


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def build_title(
    color_name: str | None,
    mapped: TaxonomyEntry | None,
    fallback: str | None = None,
) -> str:
    """Compose ``"<Color> <noun>"`` for an item.

    Without a mapped category ``fallback`` (usually the humanized upload file
    name) wins, then the noun "clothing" is used.
    """

    color = (color_name or "").strip().lower()
    if mapped is not None:
        noun = NOUN_BY_SUBCATEGORY.get(mapped.subcategory, mapped.subcategory or "clothing")
        return f"{_capitalize(color)} {noun}" if color else _capitalize(noun)
    if fallback:
        return fallback
    return f"{_capitalize(color)} clothing" if color else "Clothing"


def humanize_file_name(file_name: str) -> str:
    """Turn ``blue_denim-jacket.jpg`` into ``Blue Denim Jacket``."""

    base = _IMAGE_SUFFIX_RE.sub("", file_name)
    words = re.split(r"[_\-\s]+", base)
    return " ".join(_capitalize(word) for word in words if word)
