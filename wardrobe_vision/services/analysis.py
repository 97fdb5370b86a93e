"""Orchestrates one item analysis: detection, category, box, colour and title."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from wardrobe_vision.catalog.classifier import (
    CategoryDecision,
    box_for_family,
    decide_category,
    needs_small_item_retry,
    pick_primary,
    primary_box_if_consistent,
    top_labels,
)
from wardrobe_vision.catalog.taxonomy import (
    CLASSIFIER_LABELS,
    SMALL_FAMILIES,
    Family,
    TaxonomyEntry,
    family_keywords,
    map_label_to_taxonomy,
)
from wardrobe_vision.catalog.titles import build_title, humanize_file_name
from wardrobe_vision.config.settings import Settings
from wardrobe_vision.detection.geometry import normalize_detections
from wardrobe_vision.detection.nms import nms_same_label
from wardrobe_vision.detection.schemas import BBox, Detection, NormalizedResult, parse_detections
from wardrobe_vision.imgproc.color_extract import ColorExtractor, ImageLoadError, load_image
from wardrobe_vision.integrations.inference_client import (
    InferenceClient,
    InferenceRequestError,
    decode_data_url,
    to_data_url,
    top_classifier_label,
)
from wardrobe_vision.metrics.prometheus_exporter import (
    analysis_fallbacks_total,
    analysis_latency_seconds,
    analysis_requests_total,
    upstream_failures_total,
)

logger = logging.getLogger(__name__)


class AnalysisError(RuntimeError):
    """Raised when a request cannot produce an analysis at all."""

    def __init__(self, message: str, stop: str) -> None:
        self.stop = stop
        super().__init__(message)


@dataclass(slots=True)
class AnalysisRequest:
    image_url: str | None = None
    base64_image: str | None = None
    threshold: float | None = None
    file_name: str | None = None


@dataclass(slots=True)
class AnalysisReport:
    """Everything the ``/detect`` response carries for a successful request."""

    result: NormalizedResult
    proposed_title: str
    detections: list[Detection] = field(default_factory=list)
    decision_rule: str = "vote"
    box_source: str | None = None
    latency_ms: int = 0
    model: str = ""
    build: str = ""

    def to_payload(self) -> dict[str, Any]:
        record = self.result.as_record()
        return {
            "status": "success",
            "category": record["category"],
            "bbox": record["bbox"],
            "colorName": record["color_name"],
            "colorHex": record["color_hex"],
            "proposedTitle": self.proposed_title,
            "yolosTopLabels": record["yolos_top_labels"],
            "result": [
                {"score": det.score, "label": det.label, "box": det.box.to_xywh()}
                for det in self.detections
                if det.box is not None
            ],
            "latencyMs": self.latency_ms,
            "model": self.model,
            "build": self.build,
        }


BoxStrategy = Callable[[], Awaitable[BBox | None]]


class ItemAnalyzer:
    """Runs the full pipeline for one photo against the inference endpoints."""

    def __init__(
        self,
        settings: Settings,
        client: InferenceClient,
        extractor: ColorExtractor | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._extractor = extractor or ColorExtractor(sample_size=settings.color_sample_size)

    async def analyze(self, request: AnalysisRequest) -> AnalysisReport:
        start = time.perf_counter()
        try:
            report = await self._analyze(request, start)
        except AnalysisError as exc:
            analysis_requests_total.labels(status="fail").inc()
            logger.error("Analysis failed (%s): %s", exc.stop, exc)
            raise
        analysis_requests_total.labels(status="success").inc()
        analysis_latency_seconds.observe(time.perf_counter() - start)
        return report

    async def _analyze(self, request: AnalysisRequest, start: float) -> AnalysisReport:
        settings = self._settings
        threshold = request.threshold if request.threshold is not None else settings.default_threshold

        image_bytes, mime = await self._acquire_image(request)
        try:
            image = load_image(image_bytes)
        except ImageLoadError as exc:
            raise AnalysisError(str(exc), stop="no_image") from exc
        img_w, img_h = image.size
        data_url = to_data_url(image_bytes, mime)

        detector_payload, classifier_payload = await asyncio.gather(
            self._client.detect(data_url, threshold),
            self._client.classify(data_url, CLASSIFIER_LABELS),
            return_exceptions=True,
        )
        detector_ok = self._signal_ok("detector", detector_payload)
        classifier_ok = self._signal_ok("classifier", classifier_payload)
        if not detector_ok and not classifier_ok:
            raise AnalysisError("Detector and classifier are both unavailable.", stop="upstream")

        detections = self._prepare(detector_payload if detector_ok else [], img_w, img_h)
        thresholds = settings.filter_thresholds()
        primary = pick_primary(detections, threshold, thresholds)
        if detector_ok and needs_small_item_retry(detections, primary):
            detections = await self._second_pass(data_url, detections, img_w, img_h)

        classifier_family = None
        if classifier_ok:
            classifier_family = Family.parse(top_classifier_label(classifier_payload))

        decision = decide_category(
            detections,
            classifier_family,
            settings=settings.vote_settings(),
            thresholds=thresholds,
        )
        if decision.rule != "vote":
            analysis_fallbacks_total.labels(rung=decision.rule).inc()

        bbox, box_source = await self._select_box(data_url, decision, detections, img_w, img_h)
        entry = self._extractor.dominant_palette_entry(image)
        mapped = self._mapped_entry(decision, detections)
        fallback_title = humanize_file_name(request.file_name) if request.file_name else None

        result = NormalizedResult(
            category=decision.category.value,
            bbox=bbox,
            color_name=entry.name,
            color_hex=entry.hex,
            top_labels=top_labels(detections),
        )
        ranked = sorted(detections, key=lambda det: det.score, reverse=True)
        boxed = [det for det in ranked if det.box is not None][: settings.max_result_entries]
        latency_ms = round((time.perf_counter() - start) * 1000)
        logger.info(
            "Analysed image %sx%s: %s via %s, box from %s, colour %s (%s) in %sms",
            img_w,
            img_h,
            result.category,
            decision.rule,
            box_source,
            entry.name,
            entry.hex,
            latency_ms,
        )
        return AnalysisReport(
            result=result,
            proposed_title=build_title(entry.name, mapped, fallback_title),
            detections=boxed,
            decision_rule=decision.rule,
            box_source=box_source,
            latency_ms=latency_ms,
            model=settings.detector_model,
            build=settings.build_id,
        )

    async def _acquire_image(self, request: AnalysisRequest) -> tuple[bytes, str]:
        if request.base64_image:
            try:
                return decode_data_url(request.base64_image)
            except ValueError as exc:
                raise AnalysisError(str(exc), stop="no_image") from exc
        if request.image_url:
            try:
                return await self._client.fetch_image(request.image_url)
            except InferenceRequestError as exc:
                raise AnalysisError(str(exc), stop="image_fetch") from exc
        raise AnalysisError("Provide imageUrl or base64Image.", stop="no_image")

    def _signal_ok(self, signal: str, outcome: Any) -> bool:
        if isinstance(outcome, InferenceRequestError):
            upstream_failures_total.labels(signal=signal).inc()
            logger.warning("%s unavailable: %s", signal.capitalize(), outcome)
            return False
        if isinstance(outcome, BaseException):
            raise outcome
        return True

    def _prepare(self, payload: Any, img_w: int, img_h: int) -> list[Detection]:
        detections = normalize_detections(parse_detections(payload), img_w, img_h)
        return nms_same_label(detections, self._settings.nms_iou_threshold)

    async def _second_pass(
        self,
        data_url: str,
        detections: list[Detection],
        img_w: int,
        img_h: int,
    ) -> list[Detection]:
        """Re-run the detector at a lower threshold and merge the extra hits."""

        analysis_fallbacks_total.labels(rung="second_pass").inc()
        try:
            payload = await self._client.detect(data_url, self._settings.second_pass_threshold)
        except InferenceRequestError as exc:
            upstream_failures_total.labels(signal="detector").inc()
            logger.warning("Second detector pass failed: %s", exc)
            return detections
        extra = normalize_detections(parse_detections(payload), img_w, img_h)
        # Both passes usually repeat the same hits; count each one once.
        merged = list(dict.fromkeys([*detections, *extra]))
        return nms_same_label(merged, self._settings.nms_iou_threshold)

    async def _select_box(
        self,
        data_url: str,
        decision: CategoryDecision,
        detections: Sequence[Detection],
        img_w: int,
        img_h: int,
    ) -> tuple[BBox | None, str | None]:
        family = decision.category

        async def label_match() -> BBox | None:
            return box_for_family(family, detections)

        async def grounding() -> BBox | None:
            if family not in SMALL_FAMILIES or decision.primary is not None:
                return None
            return await self._ground_family(data_url, family, img_w, img_h)

        async def consistent_primary() -> BBox | None:
            return primary_box_if_consistent(decision.primary, family)

        strategies: tuple[tuple[str, BoxStrategy], ...] = (
            ("label_match", label_match),
            ("grounding", grounding),
            ("primary", consistent_primary),
        )
        for name, strategy in strategies:
            box = await strategy()
            if box is not None:
                if name != "label_match":
                    analysis_fallbacks_total.labels(rung=f"box_{name}").inc()
                return box, name
        return None, None

    async def _ground_family(self, data_url: str, family: Family, img_w: int, img_h: int) -> BBox | None:
        if not self._settings.grounding_url:
            return None
        phrases = list(family_keywords(family))
        try:
            payload = await self._client.detect_phrases(
                data_url, phrases, self._settings.second_pass_threshold
            )
        except InferenceRequestError as exc:
            upstream_failures_total.labels(signal="grounding").inc()
            logger.warning("Grounding detector failed for %s: %s", family.value, exc)
            return None
        grounded = normalize_detections(parse_detections(payload), img_w, img_h)
        # Phrases were scoped to the family, so any boxed hit stands for it.
        boxed = [det for det in grounded if det.box is not None]
        if not boxed:
            return None
        return max(boxed, key=lambda det: det.score).box

    @staticmethod
    def _mapped_entry(decision: CategoryDecision, detections: Sequence[Detection]) -> TaxonomyEntry | None:
        """Pick the subcategory from the best label agreeing with the decided family.

        A generic Clothing decision with no agreeing label maps to nothing so the
        title can fall back to the upload file name.
        """

        for det in sorted(detections, key=lambda det: det.score, reverse=True):
            entry = map_label_to_taxonomy(det.label)
            if entry is not None and entry.category is decision.category:
                return entry
        if decision.category is Family.CLOTHING:
            return None
        return TaxonomyEntry(category=decision.category, subcategory=_DEFAULT_SUBCATEGORY[decision.category])


_DEFAULT_SUBCATEGORY = {
    Family.DRESS: "dress",
    Family.BOTTOMS: "trousers",
    Family.TOPS: "top",
    Family.OUTERWEAR: "jacket",
    Family.SHOES: "shoes",
    Family.BAGS: "handbag",
    Family.ACCESSORIES: "accessory",
}
