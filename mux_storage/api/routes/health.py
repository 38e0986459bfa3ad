"""
Health check endpoint.

A liveness check only: it reports whether the process is up and whether
Mux credentials are configured, without calling Mux.
"""

import logging
from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel

from ... import __version__
from ..dependencies import SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    details: dict[str, Any] = {}


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not call Mux.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    missing = settings.validate_required_fields()

    return HealthResponse(
        status="ok" if not missing else "degraded",
        version=__version__,
        details={
            "encoding_tier": settings.encoding_tier,
            "missing_config": missing,
        }
    )
