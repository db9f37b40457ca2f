"""Liveness check; needs no API key and never touches providers."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])

API_VERSION = "1.0.0"
SERVICE_NAME = "deep-archive"
_STARTED_AT = time.monotonic()


@router.get("/health", response_model=HealthResponseDTO)
async def health_check():
    return HealthResponseDTO(
        status="healthy",
        service=SERVICE_NAME,
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        uptime_s=round(time.monotonic() - _STARTED_AT, 3),
    )
