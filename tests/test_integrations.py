"""Tests for inference endpoint connectivity helpers."""

from __future__ import annotations

import httpx
import pytest
import pytest_mock

from wardrobe_vision.config.settings import get_settings
from wardrobe_vision.integrations.checks import check_classifier, check_detector, run_all_checks


@pytest.fixture(autouse=True)
def _setup_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DETECTOR_URL", "https://detector.test/model")
    monkeypatch.setenv("CLASSIFIER_URL", "https://classifier.test/model")
    monkeypatch.setenv("GROUNDING_URL", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_check_detector_success(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("wardrobe_vision.integrations.checks.InferenceClient", autospec=True)
    instance = client_mock.return_value
    instance.probe = mocker.AsyncMock(return_value=(True, 400))
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_detector()

    assert result.success
    instance.probe.assert_awaited_once_with("https://detector.test/model", accept_bad_request=True)
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_check_classifier_failure(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("wardrobe_vision.integrations.checks.InferenceClient", autospec=True)
    instance = client_mock.return_value
    instance.probe = mocker.AsyncMock(return_value=(False, 503))
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_classifier()

    assert not result.success
    assert "non-success" in result.message.lower()


@pytest.mark.asyncio
async def test_check_reports_transport_errors(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("wardrobe_vision.integrations.checks.InferenceClient", autospec=True)
    instance = client_mock.return_value
    instance.probe = mocker.AsyncMock(side_effect=httpx.ConnectError("connection refused"))
    instance.close = mocker.AsyncMock(return_value=None)

    result = await check_detector()

    assert not result.success
    assert result.message == "connection refused"
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_all_checks_skips_unconfigured(mocker: pytest_mock.MockerFixture) -> None:
    client_mock = mocker.patch("wardrobe_vision.integrations.checks.InferenceClient", autospec=True)
    instance = client_mock.return_value
    instance.probe = mocker.AsyncMock(return_value=(True, 200))
    instance.close = mocker.AsyncMock(return_value=None)

    results = await run_all_checks()

    assert [result.name for result in results] == ["Detector", "Classifier"]
    assert all(result.success for result in results)
