"""
The storage adapter handed to the host.

MuxStorage is the capability set a host storage layer expects:
save, delete, exists, read and serve. Only save does real work; the
adapter is write-only, so the others are fixed answers.
"""

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional
from urllib.parse import urlparse

import httpx
from starlette.requests import Request
from starlette.responses import Response

from .config.settings import StorageConfig
from .core.errors import Unreadable
from .core.models import AssetDescriptor
from .core.pipeline import UploadPipeline
from .core.references import ReferenceMapper
from .infrastructure.mux.client import MuxClient, create_mux_client
from .infrastructure.transfer.stream import HttpxStreamTransfer, open_local_stream

logger = logging.getLogger(__name__)

RequestHandler = Callable[[Request], Awaitable[Response]]


class MuxStorage:
    """
    Write-only storage backed by Mux Video.

    Construction resolves the configuration once and fails with
    MissingCredential if either Mux secret is absent, so an adapter that
    exists is always usable.

    `transport` replaces the httpx network layer for both the Mux API and
    the upload PUT. It exists for tests and proxies; leave it unset
    otherwise.
    """

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **options: Any,
    ) -> None:
        self.config = config if config is not None else StorageConfig.resolve(**options)
        self._transport = transport
        self._transfer = HttpxStreamTransfer(transport=transport)
        self._references = ReferenceMapper(
            manifest_route_base=self.config.manifest_route_base,
            thumbnail_route_base=self.config.thumbnail_route_base,
        )
        self._pipeline = UploadPipeline(
            client_factory=self._create_client,
            transfer=self._transfer,
            open_stream=self._open_stream,
            references=self._references,
            cors_origin=self.config.cors_origin,
            encoding_tier=self.config.encoding_tier,
            playback_policy=self.config.playback_policy,
            resolve_policy=self.config.resolve_policy,
        )

        logger.info(
            "Initialized Mux storage adapter",
            extra={
                "encoding_tier": self.config.encoding_tier.value,
                "playback_policy": self.config.playback_policy.value,
                "resolve_attempts": self.config.resolve_policy.attempts,
            }
        )

    async def save(self, asset: AssetDescriptor, target_dir: Optional[str] = None) -> str:
        """
        Store an asset and return its reference URL.

        Videos are uploaded to Mux; anything else is assumed to be a
        thumbnail of an earlier upload and mapped without a remote call.
        The caller gets either a fully resolved reference or an error.
        """
        logger.debug(
            "Saving asset",
            extra={
                "asset_name": asset.name,
                "content_type": asset.type,
                "target_dir": target_dir or asset.target_dir,
            }
        )

        return await self._pipeline.save(asset)

    async def delete(self, name: str, target_dir: Optional[str] = None) -> bool:
        """Nothing to delete locally; assets live on in Mux."""
        return True

    async def exists(self, name: str, target_dir: Optional[str] = None) -> bool:
        """Always False, so the host never skips an upload."""
        return False

    async def read(self, options: Optional[Mapping[str, Any]] = None) -> bytes:
        path = (options or {}).get("path", "")
        raise Unreadable(f"{path} not readable")

    def serve(self) -> RequestHandler:
        """Return a request handler that serves nothing."""

        async def handler(request: Request) -> Response:
            return Response(status_code=404)

        return handler

    def url_to_path(self, url: str) -> str:
        """Path component of a stored URL, used by hosts for non-image media."""
        return urlparse(url).path

    def _create_client(self) -> MuxClient:
        # A fresh client per video upload; closed by the pipeline.
        return create_mux_client(
            self.config.token_id,
            self.config.token_secret,
            base_url=self.config.api_base_url,
            transport=self._transport,
        )

    def _open_stream(self, path: str):
        return open_local_stream(path, chunk_size=self.config.chunk_size)
