"""Tests for detector label to catalog taxonomy mapping."""

from __future__ import annotations

import pytest

from wardrobe_vision.catalog.taxonomy import (
    CLASSIFIER_LABELS,
    Family,
    TaxonomyEntry,
    is_part_label,
    label_matches_family,
    map_label_to_category,
    map_label_to_taxonomy,
    tokenize,
)


@pytest.mark.parametrize("label", ["sleeve", "collar", "Neckline", " pocket ", "zipper"])
def test_part_labels_never_map(label: str) -> None:
    assert is_part_label(label)
    assert map_label_to_category(label) is None


@pytest.mark.parametrize("label", [None, "", "   "])
def test_empty_labels_never_map(label: str | None) -> None:
    assert map_label_to_taxonomy(label) is None


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("t-shirt", TaxonomyEntry(Family.TOPS, "t-shirt")),
        ("T Shirt", TaxonomyEntry(Family.TOPS, "t-shirt")),
        ("shirt, blouse", TaxonomyEntry(Family.TOPS, "shirt")),
        ("pants", TaxonomyEntry(Family.BOTTOMS, "trousers")),
        ("skirt", TaxonomyEntry(Family.BOTTOMS, "skirt")),
        ("jumpsuit", TaxonomyEntry(Family.DRESS, "jumpsuit")),
        ("jacket", TaxonomyEntry(Family.OUTERWEAR, "jacket")),
        ("coat", TaxonomyEntry(Family.OUTERWEAR, "coat")),
        ("shoe", TaxonomyEntry(Family.SHOES, "shoes")),
        ("ankle boots", TaxonomyEntry(Family.SHOES, "boots")),
        ("bag, wallet", TaxonomyEntry(Family.BAGS, "handbag")),
        ("tote bag", TaxonomyEntry(Family.BAGS, "tote")),
        ("sling bag", TaxonomyEntry(Family.BAGS, "shoulder")),
        ("sling top", TaxonomyEntry(Family.TOPS, "top")),
        ("glasses", TaxonomyEntry(Family.ACCESSORIES, "sunglasses")),
        ("belt", TaxonomyEntry(Family.ACCESSORIES, "belt")),
    ],
)
def test_known_labels_map_to_family_and_subcategory(label: str, expected: TaxonomyEntry) -> None:
    assert map_label_to_taxonomy(label) == expected


def test_family_priority_decides_mixed_labels() -> None:
    assert map_label_to_category("tops/dress") is Family.DRESS
    assert map_label_to_category("jacket, pants") is Family.BOTTOMS


def test_unknown_label_falls_back_to_clothing() -> None:
    assert map_label_to_taxonomy("mannequin") == TaxonomyEntry(Family.CLOTHING, "item")


def test_tokenize_splits_and_rewrites_compounds() -> None:
    assert tokenize("Shirt, Blouse") == ["shirt", "blouse"]
    assert tokenize("top/t-shirt/sweatshirt") == ["top", "tshirt", "sweatshirt"]


def test_label_matches_family() -> None:
    assert label_matches_family("handbag", Family.BAGS)
    assert label_matches_family("bag, wallet", Family.BAGS)
    assert label_matches_family("sling bag", Family.BAGS)
    assert not label_matches_family("sling bag", Family.TOPS)
    assert not label_matches_family("shirt", Family.BAGS)
    assert not label_matches_family("sleeve", Family.TOPS)


def test_family_parse() -> None:
    assert Family.parse("bags") is Family.BAGS
    assert Family.parse(" Outerwear ") is Family.OUTERWEAR
    assert Family.parse("robot") is None
    assert Family.parse(None) is None


def test_classifier_labels_cover_every_concrete_family() -> None:
    assert set(CLASSIFIER_LABELS) == {
        "Dress",
        "Bottoms",
        "Tops",
        "Outerwear",
        "Shoes",
        "Bags",
        "Accessories",
    }
