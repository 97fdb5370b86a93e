"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any, AsyncIterator

from fastapi import Depends, FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from wardrobe_vision.api.schemas import DetectFailure, DetectRequest, ProbeReport
from wardrobe_vision.config.settings import get_settings
from wardrobe_vision.integrations import InferenceClient, run_all_checks
from wardrobe_vision.monitoring.logging import configure_logging
from wardrobe_vision.services.analysis import AnalysisError, AnalysisRequest, ItemAnalyzer


async def get_analyzer() -> AsyncIterator[ItemAnalyzer]:
    """Yield an analyzer whose HTTP client is closed after the request."""

    settings = get_settings()
    client = InferenceClient(settings)
    try:
        yield ItemAnalyzer(settings, client)
    finally:
        await client.close()


def create_app() -> FastAPI:
    """Initialise the FastAPI application."""

    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Wardrobe Vision API",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
    )

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/probe", tags=["system"], response_model=ProbeReport)
    async def probe() -> dict[str, Any]:
        """Check that every configured inference endpoint answers."""

        results = await run_all_checks()
        healthy = all(result.success for result in results)
        return {
            "status": "healthy" if healthy else "degraded",
            "checks": [asdict(result) for result in results],
        }

    @app.get("/metrics", tags=["system"])
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.post("/detect", tags=["items"])
    async def detect(
        body: DetectRequest,
        analyzer: ItemAnalyzer = Depends(get_analyzer),
    ) -> dict[str, Any]:
        """Classify the garment in a photo and propose its catalog fields."""

        start = time.perf_counter()
        request = AnalysisRequest(
            image_url=body.image_url,
            base64_image=body.base64_image,
            threshold=body.threshold,
            file_name=body.file_name,
        )
        try:
            report = await analyzer.analyze(request)
        except AnalysisError as exc:
            failure = DetectFailure(
                error=str(exc),
                stop=exc.stop,
                latency_ms=round((time.perf_counter() - start) * 1000),
            )
            return failure.model_dump(by_alias=True)
        return report.to_payload()

    return app


app = create_app()
