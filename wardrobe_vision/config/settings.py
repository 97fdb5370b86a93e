"""Service configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from wardrobe_vision.catalog.classifier import VoteSettings
from wardrobe_vision.detection.filters import FilterThresholds


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"
    build_id: str = "dev"

    hf_token: str = ""
    detector_url: str = ""
    detector_model: str = "valentinafeve/yolos-fashionpedia"
    classifier_url: str = ""
    classifier_model: str = "openai/clip-vit-base-patch32"
    grounding_url: str = ""
    grounding_model: str = "IDEA-Research/grounding-dino-tiny"
    request_timeout: float = 60.0

    # Empirically tuned defaults; change them together with a re-evaluation.
    default_threshold: float = 0.12
    second_pass_threshold: float = 0.05
    min_box_area: float = 0.06
    min_aspect_ratio: float = 0.2
    max_aspect_ratio: float = 4.5
    nms_iou_threshold: float = 0.5
    vote_min_score: float = 0.20
    small_family_boost: float = 1.35
    bag_force_min: float = 0.18
    shoe_force_min: float = 0.20
    color_sample_size: int = 64
    max_result_entries: int = 8

    def filter_thresholds(self) -> FilterThresholds:
        """Return box validity bounds for the detection filter."""

        return FilterThresholds(
            min_area=self.min_box_area,
            min_aspect_ratio=self.min_aspect_ratio,
            max_aspect_ratio=self.max_aspect_ratio,
        )

    def vote_settings(self) -> VoteSettings:
        """Return tuning constants for the category voter."""

        return VoteSettings(
            request_threshold=self.default_threshold,
            vote_min_score=self.vote_min_score,
            small_family_boost=self.small_family_boost,
            bag_force_min=self.bag_force_min,
            shoe_force_min=self.shoe_force_min,
        )


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        build_id=os.getenv("BUILD_ID", "dev"),
        hf_token=os.getenv("HF_TOKEN", ""),
        detector_url=os.getenv("DETECTOR_URL", ""),
        detector_model=os.getenv("DETECTOR_MODEL", "valentinafeve/yolos-fashionpedia"),
        classifier_url=os.getenv("CLASSIFIER_URL", ""),
        classifier_model=os.getenv("CLASSIFIER_MODEL", "openai/clip-vit-base-patch32"),
        grounding_url=os.getenv("GROUNDING_URL", ""),
        grounding_model=os.getenv("GROUNDING_MODEL", "IDEA-Research/grounding-dino-tiny"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
        default_threshold=float(os.getenv("DEFAULT_THRESHOLD", "0.12")),
        second_pass_threshold=float(os.getenv("SECOND_PASS_THRESHOLD", "0.05")),
        min_box_area=float(os.getenv("MIN_BOX_AREA", "0.06")),
        min_aspect_ratio=float(os.getenv("MIN_ASPECT_RATIO", "0.2")),
        max_aspect_ratio=float(os.getenv("MAX_ASPECT_RATIO", "4.5")),
        nms_iou_threshold=float(os.getenv("NMS_IOU_THRESHOLD", "0.5")),
        vote_min_score=float(os.getenv("VOTE_MIN_SCORE", "0.20")),
        small_family_boost=float(os.getenv("SMALL_FAMILY_BOOST", "1.35")),
        bag_force_min=float(os.getenv("BAG_FORCE_MIN", "0.18")),
        shoe_force_min=float(os.getenv("SHOE_FORCE_MIN", "0.20")),
        color_sample_size=int(os.getenv("COLOR_SAMPLE_SIZE", "64")),
        max_result_entries=int(os.getenv("MAX_RESULT_ENTRIES", "8")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
