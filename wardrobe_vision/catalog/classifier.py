"""Category decision from detector votes and the whole-image classifier."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from wardrobe_vision.catalog.taxonomy import (
    BAG_PATTERN,
    GARMENT_FAMILIES,
    SHOE_PATTERN,
    SMALL_FAMILIES,
    Family,
    label_matches_family,
    map_label_to_category,
)
from wardrobe_vision.detection.filters import DEFAULT_THRESHOLDS, FilterThresholds, is_valid_item_box
from wardrobe_vision.detection.geometry import area
from wardrobe_vision.detection.schemas import BBox, Detection

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VoteSettings:
    """Tuning constants for the category decision."""

    request_threshold: float = 0.12
    vote_min_score: float = 0.20
    small_family_boost: float = 1.35
    bag_force_min: float = 0.18
    shoe_force_min: float = 0.20


DEFAULT_VOTE_SETTINGS = VoteSettings()


@dataclass(frozen=True, slots=True)
class FamilyVote:
    """Outcome of the weighted family vote."""

    winner: Family
    totals: dict[Family, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CategoryDecision:
    """Final family together with the rule that produced it."""

    category: Family
    rule: str
    vote: FamilyVote
    primary: Detection | None


@dataclass(frozen=True, slots=True)
class VoteContext:
    """Inputs shared by every decision rule."""

    detections: Sequence[Detection]
    vote: FamilyVote
    primary: Detection | None
    classifier_family: Family | None
    settings: VoteSettings


def pick_primary(
    detections: Iterable[Detection],
    threshold: float = DEFAULT_VOTE_SETTINGS.request_threshold,
    thresholds: FilterThresholds = DEFAULT_THRESHOLDS,
) -> Detection | None:
    """Return the main garment: best score, larger box on ties."""

    candidates = [
        det
        for det in detections
        if det.score >= threshold
        and is_valid_item_box(det, thresholds)
        and map_label_to_category(det.label) is not None
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda det: (det.score, area(det.box) if det.box else 0.0))


def weighted_family_vote(
    detections: Iterable[Detection],
    settings: VoteSettings = DEFAULT_VOTE_SETTINGS,
) -> FamilyVote:
    """Sum scores per family, boosting small-object families.

    Detectors trained on area-biased data under-score bags, shoes and
    accessories, hence the boost. Ties go to the family listed first in
    ``Family``.
    """

    totals: dict[Family, float] = {}
    for det in detections:
        if det.score < settings.vote_min_score:
            continue
        family = map_label_to_category(det.label)
        if family is None:
            continue
        totals[family] = totals.get(family, 0.0) + det.score

    if not totals:
        return FamilyVote(winner=Family.CLOTHING, totals={})

    boosted = {
        family: total * settings.small_family_boost if family in SMALL_FAMILIES else total
        for family, total in totals.items()
    }
    winner = Family.CLOTHING
    best = float("-inf")
    for family in Family:
        score = boosted.get(family)
        if score is not None and score > best:
            winner, best = family, score
    return FamilyVote(winner=winner, totals=boosted)


def _present(detections: Sequence[Detection], pattern: re.Pattern[str], minimum: float) -> bool:
    return any(det.score >= minimum and pattern.search(det.label or "") for det in detections)


def _bag_presence(ctx: VoteContext) -> Family | None:
    if _present(ctx.detections, BAG_PATTERN, ctx.settings.bag_force_min):
        return Family.BAGS
    return None


def _shoe_presence(ctx: VoteContext) -> Family | None:
    if _present(ctx.detections, SHOE_PATTERN, ctx.settings.shoe_force_min):
        return Family.SHOES
    return None


def _classifier_small_override(ctx: VoteContext) -> Family | None:
    if ctx.vote.winner in GARMENT_FAMILIES and ctx.classifier_family in SMALL_FAMILIES:
        return ctx.classifier_family
    return None


def _classifier_without_primary(ctx: VoteContext) -> Family | None:
    if ctx.primary is None and ctx.classifier_family is not None:
        return ctx.classifier_family
    return None


# Highest precedence first; the first rule returning a family wins.
DECISION_RULES: tuple[tuple[str, Callable[[VoteContext], Family | None]], ...] = (
    ("bag_presence", _bag_presence),
    ("shoe_presence", _shoe_presence),
    ("classifier_small_override", _classifier_small_override),
    ("classifier_without_primary", _classifier_without_primary),
)


def decide_category(
    detections: Sequence[Detection],
    classifier_family: Family | None = None,
    *,
    settings: VoteSettings = DEFAULT_VOTE_SETTINGS,
    thresholds: FilterThresholds = DEFAULT_THRESHOLDS,
) -> CategoryDecision:
    """Combine presence rules, the family vote and the classifier signal.

    ``classifier_family`` is ``None`` when the classifier was unavailable;
    the detector signals then decide alone.
    """

    primary = pick_primary(detections, settings.request_threshold, thresholds)
    vote = weighted_family_vote(detections, settings)
    ctx = VoteContext(
        detections=detections,
        vote=vote,
        primary=primary,
        classifier_family=classifier_family,
        settings=settings,
    )

    for rule_name, rule in DECISION_RULES:
        family = rule(ctx)
        if family is not None:
            logger.debug("Category %s decided by %s", family.value, rule_name)
            return CategoryDecision(category=family, rule=rule_name, vote=vote, primary=primary)

    return CategoryDecision(category=vote.winner, rule="vote", vote=vote, primary=primary)


def box_for_family(family: Family, detections: Iterable[Detection]) -> BBox | None:
    """Return the best-scoring box whose label names the decided family."""

    matching = [
        det for det in detections if det.box is not None and label_matches_family(det.label, family)
    ]
    if not matching:
        return None
    return max(matching, key=lambda det: det.score).box


def primary_box_if_consistent(primary: Detection | None, family: Family) -> BBox | None:
    """Use the primary garment's box only when its own label agrees with ``family``."""

    if primary is None or primary.box is None:
        return None
    if map_label_to_category(primary.label) is not family:
        return None
    return primary.box


def needs_small_item_retry(detections: Iterable[Detection], primary: Detection | None) -> bool:
    """Return True when a lower-threshold pass may rescue a missed small item."""

    if primary is not None:
        return False
    return any(map_label_to_category(det.label) in SMALL_FAMILIES for det in detections)


def top_labels(detections: Iterable[Detection], limit: int = 3) -> tuple[str, ...]:
    """Return up to ``limit`` distinct labels by descending score."""

    labels: list[str] = []
    for det in sorted(detections, key=lambda det: det.score, reverse=True):
        label = (det.label or "").strip()
        if label and label not in labels:
            labels.append(label)
        if len(labels) == limit:
            break
    return tuple(labels)
