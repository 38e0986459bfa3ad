"""
Media storage endpoints.

These expose the adapter to a host that runs out of process:
- POST /media: store a file, get back its reference URL
- DELETE /media/{name}: always succeeds
- GET /media/{name}/exists: always false

Uploads are spooled to a temporary file chunk by chunk, then handed to
the adapter exactly as an in-process host would hand over a local file.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Annotated, Optional

import aiofiles
from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from ...core.errors import AssetNotReady, RemoteServiceError, TransferFailed
from ...core.models import AssetDescriptor
from ..dependencies import SettingsDep, StorageDep

logger = logging.getLogger(__name__)

router = APIRouter()

# Used when the client sends no usable filename.
DEFAULT_UPLOAD_NAME = "upload"


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class SaveResponse(BaseModel):
    """Reference URL for a stored file."""
    url: str = Field(description="Manifest or thumbnail reference URL")


class DeleteResponse(BaseModel):
    deleted: bool


class ExistsResponse(BaseModel):
    exists: bool


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=SaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Store a media file",
    description="Videos are uploaded to Mux; thumbnails are mapped to an existing asset.",
)
async def save_media(
    file: Annotated[UploadFile, File(description="Media file")],
    storage: StorageDep,
    settings: SettingsDep,
    target_dir: Annotated[Optional[str], Form()] = None,
) -> SaveResponse:
    """
    Store an uploaded file and return its reference.

    Remote failures map to 502, an asset Mux has not attached yet to 503.
    """
    filename = Path(file.filename or "").name
    if filename in ("", ".", ".."):
        filename = DEFAULT_UPLOAD_NAME
    content_type = file.content_type or "application/octet-stream"

    temp_dir = tempfile.mkdtemp(prefix="mux_storage_")
    temp_path = Path(temp_dir) / filename

    try:
        async with aiofiles.open(temp_path, "wb") as out:
            while True:
                chunk = await file.read(settings.upload_chunk_size)
                if not chunk:
                    break
                await out.write(chunk)

        asset = AssetDescriptor(
            path=str(temp_path),
            name=filename,
            type=content_type,
            target_dir=target_dir,
        )

        reference = await storage.save(asset, target_dir=target_dir)

    except AssetNotReady as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    except (RemoteServiceError, TransferFailed) as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    logger.info(
        "Media stored",
        extra={"media_filename": filename, "content_type": content_type, "reference": reference}
    )

    return SaveResponse(url=reference)


@router.delete(
    "/{name}",
    response_model=DeleteResponse,
    summary="Delete a media file",
)
async def delete_media(
    name: str,
    storage: StorageDep,
    target_dir: Optional[str] = None,
) -> DeleteResponse:
    return DeleteResponse(deleted=await storage.delete(name, target_dir))


@router.get(
    "/{name}/exists",
    response_model=ExistsResponse,
    summary="Check whether a media file exists",
)
async def media_exists(
    name: str,
    storage: StorageDep,
    target_dir: Optional[str] = None,
) -> ExistsResponse:
    return ExistsResponse(exists=await storage.exists(name, target_dir))
