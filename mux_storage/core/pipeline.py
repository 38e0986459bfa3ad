"""
The upload pipeline.

This module is the part of the adapter with real control flow. It decides
which branch an asset takes, drives a video through Mux's direct upload
flow, and maps the result to a reference URL. It is framework-agnostic:
the Mux client and the byte transfer are injected through protocols, so
tests can supply fakes and the HTTP backend can be swapped in one place.

The video path is strictly linear:

    open stream -> create session -> transfer -> resolve asset -> map manifest

Any failure ends the call with that error. Nothing is retried unless a
ResolvePolicy explicitly asks for more than one asset lookup.
"""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import AsyncIterator, Callable, Protocol

from .classify import classify_media_type
from .errors import AssetNotReady
from .models import (
    AssetDescriptor,
    EncodingTier,
    MediaKind,
    PlaybackPolicy,
    RemoteAsset,
    ResolvePolicy,
    UploadSession,
    UploadStatus,
)
from .references import ReferenceMapper

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class VideoHostClient(Protocol):
    """
    Interface for the remote video service.

    Only the two calls the pipeline makes: provision an upload target,
    and look it up again afterwards.
    """

    async def create_upload(
        self,
        cors_origin: str,
        encoding_tier: EncodingTier,
        playback_policy: PlaybackPolicy,
    ) -> UploadSession:
        """Provision a single-use upload target."""
        ...

    async def retrieve_upload(self, upload_id: str) -> UploadStatus:
        """Fetch the current state of an upload."""
        ...


class ByteStream(Protocol):
    """A local file exposed as an async sequence of chunks."""

    def __aiter__(self) -> AsyncIterator[bytes]:
        ...


class StreamTransfer(Protocol):
    """Sends a byte stream as the body of one PUT to an upload URL."""

    async def transfer(
        self,
        session: UploadSession,
        stream: ByteStream,
        content_type: str,
    ) -> None:
        """Upload the stream. Raises TransferFailed on any non-success."""
        ...


StreamOpener = Callable[[str], AbstractAsyncContextManager]

# Returns an async context manager yielding a VideoHostClient.
ClientFactory = Callable[[], AbstractAsyncContextManager]


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------

async def create_upload_session(
    client: VideoHostClient,
    cors_origin: str,
    encoding_tier: EncodingTier,
    playback_policy: PlaybackPolicy,
) -> UploadSession:
    """Ask Mux for an upload target. Exactly one call, errors propagate."""
    session = await client.create_upload(
        cors_origin=cors_origin,
        encoding_tier=encoding_tier,
        playback_policy=playback_policy,
    )

    logger.info(
        "Upload created",
        extra={"upload_id": session.id, "upload_url": session.url}
    )

    return session


async def resolve_asset(
    client: VideoHostClient,
    session: UploadSession,
    policy: ResolvePolicy = ResolvePolicy(),
    playback_policy: PlaybackPolicy = PlaybackPolicy.PUBLIC,
) -> RemoteAsset:
    """
    Look up the asset Mux created from a completed upload.

    With the default policy this is a single retrieval call. Additional
    attempts only happen while the upload is still waiting; an upload
    that errored, was cancelled or timed out will never get an asset.

    Raises:
        AssetNotReady: no asset id was observed
    """
    upload = None

    for attempt in range(1, policy.attempts + 1):
        upload = await client.retrieve_upload(session.id)

        if upload.asset_id:
            logger.info(
                "Asset resolved",
                extra={
                    "upload_id": session.id,
                    "asset_id": upload.asset_id,
                    "attempt": attempt,
                }
            )
            return RemoteAsset(
                id=upload.asset_id,
                status=upload.status,
                playback_policy=playback_policy,
            )

        if upload.is_terminal or attempt == policy.attempts:
            break

        logger.debug(
            "Asset not attached yet, polling again",
            extra={"upload_id": session.id, "status": upload.status, "attempt": attempt}
        )
        await asyncio.sleep(policy.interval_seconds)

    status = upload.status if upload is not None else None
    logger.error(
        "No asset ID found",
        extra={"upload_id": session.id, "status": status}
    )
    raise AssetNotReady(session.id, status)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

class UploadPipeline:
    """
    Turns one AssetDescriptor into one reference URL.

    Holds configuration and collaborators only. The Mux client is opened
    per video upload and never for thumbnails; each save() call is an
    independent sequence with no shared mutable state, so concurrent calls
    need no coordination. Two calls for the same file create two sessions.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        transfer: StreamTransfer,
        open_stream: StreamOpener,
        references: ReferenceMapper,
        cors_origin: str,
        encoding_tier: EncodingTier = EncodingTier.SMART,
        playback_policy: PlaybackPolicy = PlaybackPolicy.PUBLIC,
        resolve_policy: ResolvePolicy = ResolvePolicy(),
    ) -> None:
        self._client_factory = client_factory
        self._transfer = transfer
        self._open_stream = open_stream
        self._references = references
        self._cors_origin = cors_origin
        self._encoding_tier = encoding_tier
        self._playback_policy = playback_policy
        self._resolve_policy = resolve_policy

    async def save(self, asset: AssetDescriptor) -> str:
        """Store an asset and return its reference URL."""
        if classify_media_type(asset.type) is MediaKind.NON_VIDEO:
            reference = self._references.thumbnail(asset.name)
            logger.debug(
                "Mapped non-video asset to thumbnail",
                extra={"asset_name": asset.name, "reference": reference}
            )
            return reference

        return await self._save_video(asset)

    async def _save_video(self, asset: AssetDescriptor) -> str:
        async with self._client_factory() as client:
            # The local file stays open for the session and transfer steps
            # only, and is closed whichever way they end.
            async with self._open_stream(asset.path) as stream:
                session = await create_upload_session(
                    client,
                    cors_origin=self._cors_origin,
                    encoding_tier=self._encoding_tier,
                    playback_policy=self._playback_policy,
                )

                await self._transfer.transfer(session, stream, asset.type)

            logger.info("Upload completed", extra={"upload_id": session.id})

            remote_asset = await resolve_asset(
                client,
                session,
                policy=self._resolve_policy,
                playback_policy=self._playback_policy,
            )

        return self._references.manifest(remote_asset.id)
