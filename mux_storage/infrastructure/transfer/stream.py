"""
Streamed PUT of a local file to a direct upload URL.

The file is never read whole. LocalFileStream hands out one chunk each
time it is asked, and httpx only asks for the next chunk once the
previous one has been written to the socket. A slow network therefore
stalls the disk read instead of filling memory.

Any non-success response fails the transfer: the pipeline must not go on
to look up an asset for an upload that never completed.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import aiofiles
import aiofiles.os
import httpx

from ...core.errors import TransferFailed
from ...core.models import UploadSession

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class LocalFileStream:
    """
    An open local file read as async chunks.

    Iterating pulls from disk on demand. The stream can be iterated once;
    the handle belongs to whoever opened it.
    """

    def __init__(self, handle: Any, size: Optional[int] = None, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._handle = handle
        self._chunk_size = chunk_size
        self.size = size
        self.bytes_read = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._handle.read(self._chunk_size)
            if not chunk:
                return
            self.bytes_read += len(chunk)
            yield chunk


@asynccontextmanager
async def open_local_stream(path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[LocalFileStream]:
    """Open a file for streaming. The handle is closed when the block exits."""
    stat = await aiofiles.os.stat(path)

    async with aiofiles.open(path, "rb") as handle:
        logger.debug(
            "Opened local file for streaming",
            extra={"path": path, "size_bytes": stat.st_size, "chunk_size": chunk_size}
        )
        yield LocalFileStream(handle, size=stat.st_size, chunk_size=chunk_size)


class HttpxStreamTransfer:
    """
    StreamTransfer backed by httpx.

    The transport is pluggable so tests (or a proxying host) can swap the
    network layer without a second code path. No timeout is set: uploads
    of large files take as long as they take.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._transport = transport
        self._timeout = timeout

    async def transfer(self, session: UploadSession, stream: Any, content_type: str) -> None:
        """
        PUT the stream to the session URL, once.

        Raises:
            TransferFailed: the request failed or got a non-success status
        """
        headers = {"Content-Type": content_type}
        size = getattr(stream, "size", None)
        if size is not None:
            # A known length avoids chunked transfer encoding.
            headers["Content-Length"] = str(size)

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.put(session.url, content=stream, headers=headers)
        except httpx.HTTPError as e:
            logger.error(
                "Upload transfer failed",
                extra={"upload_id": session.id, "error": str(e)}
            )
            raise TransferFailed(f"Upload {session.id} transfer failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Upload target rejected transfer",
                extra={"upload_id": session.id, "status": response.status_code}
            )
            raise TransferFailed(
                f"Upload {session.id} transfer failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.info(
            "Upload transfer finished",
            extra={
                "upload_id": session.id,
                "status": response.status_code,
                "bytes_sent": getattr(stream, "bytes_read", None),
            }
        )
