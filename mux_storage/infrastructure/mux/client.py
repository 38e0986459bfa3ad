"""
Mux Video API client.

A thin async wrapper around the two Direct Upload endpoints the pipeline
needs. It implements the VideoHostClient protocol and knows about Mux's
JSON envelope, but nothing about references or the host.

Authentication is HTTP basic auth with an access token id and secret.
"""

import logging
from typing import Any, Optional

import httpx

from ...core.errors import MissingCredential, RemoteServiceError, SessionCreationFailed
from ...core.models import EncodingTier, PlaybackPolicy, UploadSession, UploadStatus

logger = logging.getLogger(__name__)

MUX_API_BASE_URL = "https://api.mux.com"
UPLOADS_PATH = "/video/v1/uploads"


class MuxClient:
    """
    Async client for Mux Direct Uploads.

    Use as an async context manager, or call close() when done.
    """

    def __init__(
        self,
        token_id: str,
        token_secret: str,
        base_url: str = MUX_API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=httpx.BasicAuth(token_id, token_secret),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "MuxClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def create_upload(
        self,
        cors_origin: str,
        encoding_tier: EncodingTier,
        playback_policy: PlaybackPolicy,
    ) -> UploadSession:
        """
        Create a direct upload.

        Mux answers with a one-time URL that accepts a single PUT of the
        file, and creates the asset once that PUT completes.

        Raises:
            SessionCreationFailed: Mux rejected the request or was unreachable
        """
        payload = {
            "cors_origin": cors_origin,
            "new_asset_settings": {
                "playback_policy": [playback_policy.value],
                "encoding_tier": encoding_tier.value,
            },
        }

        try:
            response = await self._client.post(UPLOADS_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.error("Failed to create upload", extra={"error": str(e)})
            raise SessionCreationFailed(f"Upload creation failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Mux rejected upload creation",
                extra={"status": response.status_code, "body": response.text[:240]}
            )
            raise SessionCreationFailed(
                f"Upload creation failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = self._unwrap(response)
            return UploadSession(id=data["id"], url=data["url"])
        except (RemoteServiceError, KeyError, ValueError) as e:
            raise SessionCreationFailed(
                f"Malformed upload response: {e}",
                status_code=response.status_code,
            ) from e

    async def retrieve_upload(self, upload_id: str) -> UploadStatus:
        """
        Fetch an upload's current status and asset id, if any.

        Raises:
            RemoteServiceError: Mux answered with an error or was unreachable
        """
        try:
            response = await self._client.get(f"{UPLOADS_PATH}/{upload_id}")
        except httpx.HTTPError as e:
            logger.error(
                "Failed to retrieve upload",
                extra={"upload_id": upload_id, "error": str(e)}
            )
            raise RemoteServiceError(f"Upload retrieval failed: {e}") from e

        if not response.is_success:
            raise RemoteServiceError(
                f"Upload retrieval failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        data = self._unwrap(response)
        return UploadStatus(
            upload_id=data.get("id", upload_id),
            status=data.get("status", "unknown"),
            asset_id=data.get("asset_id") or None,
        )

    def _unwrap(self, response: httpx.Response) -> dict[str, Any]:
        """Mux wraps every payload in {"data": ...}."""
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteServiceError(
                "Mux returned a non-JSON response",
                status_code=response.status_code,
            ) from e

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise RemoteServiceError(
                "Mux response has no data object",
                status_code=response.status_code,
            )
        return data


def create_mux_client(
    token_id: Optional[str],
    token_secret: Optional[str],
    base_url: str = MUX_API_BASE_URL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> MuxClient:
    """
    Build an authenticated Mux client.

    Raises:
        MissingCredential: either secret is empty
    """
    if not token_id:
        raise MissingCredential("No Mux Token ID provided")
    if not token_secret:
        raise MissingCredential("No Mux Token Secret provided")

    return MuxClient(token_id, token_secret, base_url=base_url, transport=transport)
