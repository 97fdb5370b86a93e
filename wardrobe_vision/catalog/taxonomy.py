"""Mapping from free-text detector labels to the catalog taxonomy."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class Family(str, Enum):
    """Coarse item families used as the item category."""

    DRESS = "Dress"
    BOTTOMS = "Bottoms"
    TOPS = "Tops"
    OUTERWEAR = "Outerwear"
    SHOES = "Shoes"
    BAGS = "Bags"
    ACCESSORIES = "Accessories"
    CLOTHING = "Clothing"

    @classmethod
    def parse(cls, value: str | None) -> "Family | None":
        """Resolve a family from its name, case-insensitively."""

        if not value:
            return None
        cleaned = value.strip().lower()
        for family in cls:
            if family.value.lower() == cleaned:
                return family
        return None


SMALL_FAMILIES = frozenset({Family.BAGS, Family.SHOES, Family.ACCESSORIES})
GARMENT_FAMILIES = frozenset({Family.TOPS, Family.BOTTOMS, Family.DRESS, Family.OUTERWEAR})

# Labels the zero-shot classifier chooses between.
CLASSIFIER_LABELS: tuple[str, ...] = tuple(
    family.value for family in Family if family is not Family.CLOTHING
)

PART_LABELS = frozenset(
    {
        "sleeve",
        "collar",
        "neckline",
        "pocket",
        "zipper",
        "button",
        "hem",
        "waistband",
        "cuff",
        "lapel",
        "epaulette",
        "hood",
        "applique",
        "bead",
        "bow",
        "flower",
        "fringe",
        "ribbon",
        "rivet",
        "ruffle",
        "sequin",
        "tassel",
    }
)


@dataclass(frozen=True, slots=True)
class TaxonomyEntry:
    """Category/subcategory pair derived from a label."""

    category: Family
    subcategory: str


# Families in priority order; within a family aliases are tried in order and
# the first one found in any token decides the subcategory.
_FAMILY_ALIASES: tuple[tuple[Family, tuple[tuple[str, str], ...]], ...] = (
    (
        Family.DRESS,
        (
            ("jumpsuit", "jumpsuit"),
            ("romper", "jumpsuit"),
            ("playsuit", "jumpsuit"),
            ("dress", "dress"),
            ("gown", "dress"),
        ),
    ),
    (
        Family.BOTTOMS,
        (
            ("skirt", "skirt"),
            ("jeans", "trousers"),
            ("pants", "trousers"),
            ("trousers", "trousers"),
            ("leggings", "trousers"),
            ("shorts", "shorts"),
        ),
    ),
    (
        Family.TOPS,
        (
            ("tshirt", "t-shirt"),
            ("tee", "t-shirt"),
            ("sweatshirt", "sweater"),
            ("hoodie", "sweater"),
            ("sweater", "sweater"),
            ("jumper", "sweater"),
            ("knit", "sweater"),
            ("cardigan", "cardigan"),
            ("blouse", "shirt"),
            ("shirt", "shirt"),
            ("polo", "shirt"),
            ("vest", "vest"),
            ("tank", "top"),
            ("top", "top"),
        ),
    ),
    (
        Family.OUTERWEAR,
        (
            ("trench", "coat"),
            ("parka", "coat"),
            ("coat", "coat"),
            ("blazer", "blazer"),
            ("cape", "cape"),
            ("jacket", "jacket"),
            ("outerwear", "jacket"),
            ("outwear", "jacket"),
        ),
    ),
    (
        Family.SHOES,
        (
            ("boot", "boots"),
            ("sneaker", "sneakers"),
            ("trainer", "sneakers"),
            ("sandal", "sandals"),
            ("heel", "heels"),
            ("loafer", "flats"),
            ("flat", "flats"),
            ("shoe", "shoes"),
        ),
    ),
    (
        Family.BAGS,
        (
            ("backpack", "backpack"),
            ("tote", "tote"),
            ("clutch", "clutch"),
            ("crossbody", "shoulder"),
            ("shoulder bag", "shoulder"),
            ("sling bag", "shoulder"),
            ("handbag", "handbag"),
            ("purse", "handbag"),
            ("satchel", "handbag"),
            ("bag", "handbag"),
            ("wallet", "wallet"),
        ),
    ),
    (
        Family.ACCESSORIES,
        (
            ("sunglasses", "sunglasses"),
            ("glasses", "sunglasses"),
            ("belt", "belt"),
            ("buckle", "belt"),
            ("beanie", "hat"),
            ("hat", "hat"),
            ("cap", "hat"),
            ("headband", "headband"),
            ("head covering", "headband"),
            ("hair accessory", "headband"),
            ("scarf", "scarf"),
            ("glove", "gloves"),
            ("watch", "watch"),
            ("umbrella", "umbrella"),
            ("leg warmer", "leg warmers"),
            ("tights", "tights"),
            ("stockings", "tights"),
            ("sock", "socks"),
            ("necklace", "jewelry"),
            ("earring", "jewelry"),
            ("bracelet", "jewelry"),
            ("jewelry", "jewelry"),
            ("tie", "tie"),
        ),
    ),
)

_COMPOUNDS = (
    (re.compile(r"\bt[\s-]?shirt"), "tshirt"),
)
_SPLIT_RE = re.compile(r"[,\-/]")

BAG_PATTERN = re.compile(r"bag|wallet|purse|tote|clutch|backpack|satchel", re.IGNORECASE)
SHOE_PATTERN = re.compile(r"shoe|sneaker|boot|sandal|heel|loafer|trainer", re.IGNORECASE)
BELT_PATTERN = re.compile(r"belt", re.IGNORECASE)


def _clean(label: str | None) -> str:
    return (label or "").strip().lower()


def is_part_label(label: str | None) -> bool:
    """Return True for garment components that never stand alone as an item."""

    return _clean(label) in PART_LABELS


def tokenize(label: str | None) -> list[str]:
    text = _clean(label)
    for pattern, replacement in _COMPOUNDS:
        text = pattern.sub(replacement, text)
    return [token.strip() for token in _SPLIT_RE.split(text) if token.strip()]


def map_label_to_taxonomy(label: str | None) -> TaxonomyEntry | None:
    """Map a detector label to a family and subcategory.

    Part labels and empty labels give ``None``. Anything else resolves to
    some family, falling back to the generic clothing family.
    """

    if not _clean(label) or is_part_label(label):
        return None

    tokens = tokenize(label)
    for family, aliases in _FAMILY_ALIASES:
        for alias, subcategory in aliases:
            if any(alias in token for token in tokens):
                return TaxonomyEntry(category=family, subcategory=subcategory)
    return TaxonomyEntry(category=Family.CLOTHING, subcategory="item")


def map_label_to_category(label: str | None) -> Family | None:
    entry = map_label_to_taxonomy(label)
    return entry.category if entry else None


def family_keywords(family: Family) -> tuple[str, ...]:
    """Return the label keywords that identify ``family`` in free text."""

    for candidate, aliases in _FAMILY_ALIASES:
        if candidate is family:
            return tuple(alias for alias, _ in aliases)
    return ()


def label_matches_family(label: str | None, family: Family) -> bool:
    """Return True when the label text names an item of ``family``."""

    if is_part_label(label):
        return False
    tokens = tokenize(label)
    return any(keyword in token for keyword in family_keywords(family) for token in tokens)
