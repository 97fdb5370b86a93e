"""Request and response bodies of the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DetectRequest(BaseModel):
    """Body of ``POST /detect``; one of the two image fields must be set."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str | None = Field(default=None, alias="imageUrl")
    base64_image: str | None = Field(default=None, alias="base64Image")
    threshold: float = Field(default=0.12, ge=0.0, le=1.0)
    file_name: str | None = Field(default=None, alias="fileName")


class DetectFailure(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "fail"
    error: str
    stop: str
    latency_ms: int = Field(alias="latencyMs")


class ProbeCheck(BaseModel):
    name: str
    success: bool
    message: str


class ProbeReport(BaseModel):
    status: str
    checks: list[ProbeCheck]
