"""
Unit tests for chunked file reading and the streamed PUT.
"""

import httpx
import pytest

from mux_storage.core.errors import TransferFailed
from mux_storage.core.models import UploadSession
from mux_storage.infrastructure.transfer.stream import HttpxStreamTransfer, open_local_stream

SESSION = UploadSession(id="s1", url="https://u")


class TestLocalFileStream:

    @pytest.mark.asyncio
    async def test_reads_in_bounded_chunks(self, video_file):
        """No chunk is larger than the configured size."""
        chunks = []
        async with open_local_stream(str(video_file), chunk_size=1000) as stream:
            async for chunk in stream:
                chunks.append(chunk)

        assert b"".join(chunks) == video_file.read_bytes()
        assert all(len(chunk) <= 1000 for chunk in chunks)
        assert len(chunks) > 1

    @pytest.mark.asyncio
    async def test_reports_size_and_bytes_read(self, video_file):
        """Size comes from the file, bytes_read grows with each chunk."""
        async with open_local_stream(str(video_file), chunk_size=4096) as stream:
            assert stream.size == video_file.stat().st_size
            assert stream.bytes_read == 0
            async for _ in stream:
                pass
            assert stream.bytes_read == stream.size

    @pytest.mark.asyncio
    async def test_reads_lazily(self, video_file):
        """Only what has been asked for is read from disk."""
        async with open_local_stream(str(video_file), chunk_size=100) as stream:
            iterator = stream.__aiter__()
            await iterator.__anext__()
            assert stream.bytes_read == 100
            await iterator.aclose()

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        """A missing file fails on open, before any read."""
        with pytest.raises(FileNotFoundError):
            async with open_local_stream(str(tmp_path / "missing.mp4")):
                pass

    @pytest.mark.asyncio
    async def test_handle_closed_after_error(self, video_file):
        """The file handle is closed when the body raises."""
        with pytest.raises(RuntimeError):
            async with open_local_stream(str(video_file)) as stream:
                handle = stream._handle
                raise RuntimeError("boom")

        assert handle.closed


class TestHttpxStreamTransfer:

    @pytest.mark.asyncio
    async def test_puts_file_with_content_type(self, fake_mux, video_file):
        """One PUT with the file as body and the asset type as Content-Type."""
        transfer = HttpxStreamTransfer(transport=fake_mux.transport)

        async with open_local_stream(str(video_file), chunk_size=512) as stream:
            await transfer.transfer(SESSION, stream, "video/mp4")

        request = fake_mux.put_request
        assert request.method == "PUT"
        assert request.url.host == "u"
        assert request.headers["Content-Type"] == "video/mp4"
        assert request.headers["Content-Length"] == str(video_file.stat().st_size)
        assert "Transfer-Encoding" not in request.headers
        assert request.content == video_file.read_bytes()

    @pytest.mark.asyncio
    async def test_unknown_size_streams_chunked(self, fake_mux):
        """A stream without a size is sent chunked."""
        async def chunks():
            yield b"abc"
            yield b"def"

        transfer = HttpxStreamTransfer(transport=fake_mux.transport)
        await transfer.transfer(SESSION, chunks(), "video/webm")

        assert fake_mux.put_request.content == b"abcdef"
        assert fake_mux.put_request.headers["Transfer-Encoding"] == "chunked"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 403, 500, 502])
    async def test_non_success_status_raises(self, fake_mux, video_file, status_code):
        """A rejected upload must surface, not just be logged."""
        fake_mux.put_status = status_code
        transfer = HttpxStreamTransfer(transport=fake_mux.transport)

        async with open_local_stream(str(video_file)) as stream:
            with pytest.raises(TransferFailed) as exc_info:
                await transfer.transfer(SESSION, stream, "video/mp4")

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_network_error_raises(self, video_file):
        """A connection failure becomes TransferFailed."""
        def handler(request):
            raise httpx.WriteError("connection reset", request=request)

        transfer = HttpxStreamTransfer(transport=httpx.MockTransport(handler))

        async with open_local_stream(str(video_file)) as stream:
            with pytest.raises(TransferFailed):
                await transfer.transfer(SESSION, stream, "video/mp4")
