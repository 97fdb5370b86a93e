"""Connectivity checks for the inference endpoints."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

from wardrobe_vision.config.settings import get_settings
from wardrobe_vision.integrations.inference_client import InferenceClient


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[tuple[bool, int]]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        alive, status_code = await factory()
    except httpx.HTTPError as exc:
        return IntegrationCheckResult(name=name, success=False, message=str(exc) or type(exc).__name__)

    if alive:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message=f"Service responded with non-success status {status_code}.",
    )


async def _check_endpoint(name: str, url: str, *, accept_bad_request: bool = False) -> IntegrationCheckResult:
    client = InferenceClient(get_settings())

    async def _ping() -> tuple[bool, int]:
        try:
            return await client.probe(url, accept_bad_request=accept_bad_request)
        finally:
            await client.close()

    return await _run_check(name=name, factory=_ping, success_message=f"{name} endpoint is reachable.")


async def check_detector() -> IntegrationCheckResult:
    """Probe the object detector; a 400 for the probe image still means alive."""

    return await _check_endpoint("Detector", get_settings().detector_url, accept_bad_request=True)


async def check_classifier() -> IntegrationCheckResult:
    return await _check_endpoint("Classifier", get_settings().classifier_url)


async def check_grounding() -> IntegrationCheckResult:
    return await _check_endpoint("Grounding", get_settings().grounding_url, accept_bad_request=True)


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute checks for every configured endpoint concurrently."""

    settings = get_settings()
    checks = []
    if settings.detector_url:
        checks.append(check_detector())
    if settings.classifier_url:
        checks.append(check_classifier())
    if settings.grounding_url:
        checks.append(check_grounding())
    return list(await asyncio.gather(*checks))
