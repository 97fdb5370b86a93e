"""Tests for the inference endpoint client."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from wardrobe_vision.config.settings import Settings
from wardrobe_vision.integrations.inference_client import (
    PROBE_IMAGE,
    InferenceClient,
    InferenceRequestError,
    decode_data_url,
    to_data_url,
    top_classifier_label,
)

SETTINGS = Settings(
    hf_token="hf-test",
    detector_url="https://detector.test/model",
    classifier_url="https://classifier.test/model",
    grounding_url="https://grounding.test/model",
)


def _client(handler) -> InferenceClient:
    transport = httpx.MockTransport(handler)
    return InferenceClient(SETTINGS, client=httpx.AsyncClient(transport=transport))


def test_data_url_round_trip() -> None:
    data_url = to_data_url(b"\x89PNG", "image/jpeg")

    assert data_url.startswith("data:image/jpeg;base64,")
    assert decode_data_url(data_url) == (b"\x89PNG", "image/jpeg")
    assert decode_data_url(base64.b64encode(b"raw").decode()) == (b"raw", "image/png")


def test_default_client_sends_bearer_token() -> None:
    client = InferenceClient(SETTINGS)

    assert client._client.headers["Authorization"] == "Bearer hf-test"


@pytest.mark.asyncio
async def test_detect_posts_image_and_threshold() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"label": "shirt", "score": 0.9, "box": {}}])

    client = _client(handler)
    payload = await client.detect("data:image/png;base64,AAAA", 0.12)
    await client.close()

    assert payload[0]["label"] == "shirt"
    assert seen["url"] == "https://detector.test/model"
    assert seen["body"] == {"inputs": "data:image/png;base64,AAAA", "parameters": {"threshold": 0.12}}


@pytest.mark.asyncio
async def test_classify_and_grounding_send_candidate_labels() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=[])

    client = _client(handler)
    await client.classify("data:x", ["Bags", "Shoes"])
    await client.detect_phrases("data:x", ["bag"], 0.05)

    assert bodies[0]["parameters"] == {"candidate_labels": ["Bags", "Shoes"]}
    assert bodies[1]["parameters"] == {"candidate_labels": ["bag"], "threshold": 0.05}


@pytest.mark.asyncio
async def test_error_status_is_wrapped() -> None:
    client = _client(lambda request: httpx.Response(503, text="model loading"))

    with pytest.raises(InferenceRequestError) as excinfo:
        await client.detect("data:x", 0.12)

    assert excinfo.value.status_code == 503
    assert "model loading" in str(excinfo.value)


@pytest.mark.asyncio
async def test_timeout_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client = _client(handler)

    with pytest.raises(InferenceRequestError) as excinfo:
        await client.classify("data:x", ["Tops"])

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_non_json_success_body_is_wrapped() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>loading</html>"))

    with pytest.raises(InferenceRequestError) as excinfo:
        await client.detect("data:x", 0.12)

    assert excinfo.value.status_code is None
    assert "non-JSON" in str(excinfo.value)


@pytest.mark.asyncio
async def test_unconfigured_endpoint_raises() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    client = InferenceClient(Settings(), client=httpx.AsyncClient(transport=transport))

    with pytest.raises(InferenceRequestError):
        await client.detect("data:x", 0.12)


@pytest.mark.asyncio
async def test_fetch_image_returns_bytes_and_mime() -> None:
    client = _client(
        lambda request: httpx.Response(
            200, content=b"jpegdata", headers={"content-type": "image/jpeg; charset=binary"}
        )
    )

    assert await client.fetch_image("https://cdn.test/a.jpg") == (b"jpegdata", "image/jpeg")


@pytest.mark.asyncio
async def test_fetch_image_failure() -> None:
    client = _client(lambda request: httpx.Response(404))

    with pytest.raises(InferenceRequestError) as excinfo:
        await client.fetch_image("https://cdn.test/missing.jpg")

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_probe_accepts_bad_request_when_asked() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(400)

    client = _client(handler)

    assert await client.probe(SETTINGS.detector_url, accept_bad_request=True) == (True, 400)
    assert await client.probe(SETTINGS.classifier_url) == (False, 400)
    assert bodies[0] == {"inputs": PROBE_IMAGE}


def test_top_classifier_label_shapes() -> None:
    assert top_classifier_label([{"label": "Tops", "score": 0.2}, {"label": "Bags", "score": 0.7}]) == "Bags"
    assert top_classifier_label({"labels": ["Shoes", "Tops"], "scores": [0.8, 0.2]}) == "Shoes"
    assert top_classifier_label([{"label": "Dress", "score": "bad"}]) == "Dress"
    assert top_classifier_label([]) is None
    assert top_classifier_label({"error": "loading"}) is None
