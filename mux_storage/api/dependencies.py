"""
FastAPI dependency injection.

Routes never build their own adapter. Tests replace get_storage through
app.dependency_overrides.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status

from ..adapter import MuxStorage
from ..config.settings import Settings, get_settings
from ..core.errors import MissingCredential

logger = logging.getLogger(__name__)


def get_storage(
    settings: Annotated[Settings, Depends(get_settings)],
) -> MuxStorage:
    """
    Provide a MuxStorage adapter built from settings.

    The adapter holds no connections between calls, so a fresh one per
    request costs nothing. Missing credentials make the service unable to
    store anything, which we report as 503 rather than a generic 500.
    """
    try:
        return MuxStorage(settings.storage_config())
    except MissingCredential as e:
        logger.error("Storage adapter not configured", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is not configured",
        )


SettingsDep = Annotated[Settings, Depends(get_settings)]
StorageDep = Annotated[MuxStorage, Depends(get_storage)]
