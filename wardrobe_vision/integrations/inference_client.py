"""Async wrapper around the hosted inference endpoints."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Mapping, Sequence

import httpx

from wardrobe_vision.config.settings import Settings

logger = logging.getLogger(__name__)

# 1x1 transparent PNG used to check that an endpoint is alive.
PROBE_IMAGE = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


class InferenceRequestError(RuntimeError):
    """Raised when an inference endpoint responds with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def to_data_url(image_bytes: bytes, mime: str = "image/png") -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def decode_data_url(value: str) -> tuple[bytes, str]:
    """Return ``(bytes, mime)`` for a data URL or bare base64 string."""

    mime = "image/png"
    payload = value.strip()
    if payload.startswith("data:") and "," in payload:
        header, payload = payload.split(",", 1)
        mime = header[5:].split(";", 1)[0] or mime
    try:
        return base64.b64decode(payload, validate=False), mime
    except (ValueError, binascii.Error) as exc:
        raise ValueError("Image payload is not valid base64.") from exc


class InferenceClient:
    """Calls the detector, zero-shot classifier and grounding endpoints."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        headers = {"Accept": "application/json"}
        if settings.hf_token:
            headers["Authorization"] = f"Bearer {settings.hf_token}"
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout, headers=headers)

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def _post_json(self, url: str, body: Mapping[str, Any]) -> Any:
        if not url:
            raise InferenceRequestError("Inference endpoint is not configured.")
        try:
            response = await self._client.post(url, json=body)
            response.raise_for_status()
            if not response.content:
                return []
            return response.json()
        except ValueError as exc:
            raise InferenceRequestError(f"Endpoint {url} returned a non-JSON body.") from exc
        except httpx.TimeoutException as exc:
            raise InferenceRequestError(f"Timed out waiting for {url}.") from exc
        except httpx.HTTPStatusError as exc:
            raise InferenceRequestError(
                f"Endpoint returned {exc.response.status_code}: {exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise InferenceRequestError(f"Could not reach {url}: {exc}") from exc

    async def fetch_image(self, url: str) -> tuple[bytes, str]:
        """Download an image and return ``(bytes, mime)``."""

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise InferenceRequestError(
                f"Fetch image failed: {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise InferenceRequestError(f"Fetch image failed: {exc}") from exc
        mime = response.headers.get("content-type", "image/png").split(";", 1)[0]
        return response.content, mime

    async def detect(self, data_url: str, threshold: float) -> Any:
        """Run the object detector and return its raw prediction list."""

        return await self._post_json(
            self._settings.detector_url,
            {"inputs": data_url, "parameters": {"threshold": threshold}},
        )

    async def classify(self, data_url: str, labels: Sequence[str]) -> Any:
        """Run zero-shot image classification over ``labels``."""

        return await self._post_json(
            self._settings.classifier_url,
            {"inputs": data_url, "parameters": {"candidate_labels": list(labels)}},
        )

    async def detect_phrases(self, data_url: str, phrases: Sequence[str], threshold: float) -> Any:
        """Run open-vocabulary detection scoped to ``phrases``."""

        return await self._post_json(
            self._settings.grounding_url,
            {
                "inputs": data_url,
                "parameters": {"candidate_labels": list(phrases), "threshold": threshold},
            },
        )

    async def probe(self, url: str, *, accept_bad_request: bool = False) -> tuple[bool, int]:
        """POST the probe image to ``url`` and return ``(alive, status_code)``.

        Detectors reject the 1x1 probe with 400, which still proves the
        endpoint is up when ``accept_bad_request`` is set.
        """

        response = await self._client.post(url, json={"inputs": PROBE_IMAGE})
        alive = response.is_success or (accept_bad_request and response.status_code == 400)
        logger.info("Probe %s -> %s", url.split("?", 1)[0], response.status_code)
        return alive, response.status_code


def top_classifier_label(payload: Any) -> str | None:
    """Return the best label of a zero-shot classification response."""

    if isinstance(payload, Mapping):
        labels = payload.get("labels")
        if isinstance(labels, list) and labels:
            return str(labels[0])
        return None
    if not isinstance(payload, list) or not payload:
        return None
    entries = [entry for entry in payload if isinstance(entry, Mapping)]
    if not entries:
        return None
    best = max(entries, key=_entry_score)
    label = best.get("label")
    return str(label) if label is not None else None


def _entry_score(entry: Mapping[str, Any]) -> float:
    score = entry.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return float(score)
    return 0.0
