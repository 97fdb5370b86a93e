"""Inference endpoint client and connectivity checks."""

from .checks import (
    IntegrationCheckResult,
    check_classifier,
    check_detector,
    check_grounding,
    run_all_checks,
)
from .inference_client import InferenceClient, InferenceRequestError

__all__ = [
    "InferenceClient",
    "InferenceRequestError",
    "IntegrationCheckResult",
    "check_classifier",
    "check_detector",
    "check_grounding",
    "run_all_checks",
]
