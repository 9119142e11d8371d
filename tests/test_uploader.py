"""Test suite for Uploader class."""

import asyncio
import io

import pytest

from tus_client.client import TusClient, Uploader, UploadState
from tus_client.exceptions import (
    TusConfigError,
    TusNotFoundError,
    TusOffsetMismatchError,
    TusStreamError,
    TusTransportError,
)
from tus_client.http import TUS_PROTOCOL_VERSION, HttpMethod


class FailingStream(io.BytesIO):
    """Stream whose reads fail."""

    def read(self, size=-1):
        raise OSError("disk error")


class AsyncStream:
    """Stream exposing coroutine read/seek/tell."""

    def __init__(self, data):
        self._buffer = io.BytesIO(data)

    async def read(self, size=-1):
        return self._buffer.read(size)

    async def seek(self, offset, whence=0):
        return self._buffer.seek(offset, whence)

    async def tell(self):
        return self._buffer.tell()


class BrokenHandler:
    """Handler whose transport always fails."""

    async def handle_request(self, request):
        raise ConnectionResetError("connection reset by peer")


class TestUploader:
    """Tests for Uploader class."""

    @pytest.fixture
    def data(self):
        return bytes(range(256)) * 40

    def test_init_invalid_chunk_size(self, make_handler, data):
        """Test chunk sizes below one byte are rejected."""
        for chunk_size in (0, -1, 0.5):
            with pytest.raises(TusConfigError):
                Uploader(
                    make_handler(), "/files/a", io.BytesIO(data), len(data), chunk_size=chunk_size
                )

    def test_init_offset_outside_upload(self, make_handler, data):
        """Test an offset past the upload length is rejected."""
        with pytest.raises(TusConfigError):
            Uploader(
                make_handler(), "/files/a", io.BytesIO(data), len(data), offset=len(data) + 1
            )

    @pytest.mark.parametrize("total_size", [-1, 10.0, None])
    def test_init_invalid_total_size(self, make_handler, data, total_size):
        """Test upload lengths that are not non-negative integers are rejected."""
        with pytest.raises(TusConfigError):
            Uploader(make_handler(), "/files/a", io.BytesIO(data), total_size)

    def test_declare_length_on_first_chunk(self, make_handler, data):
        """Test declare_length adds Upload-Length to the first PATCH only."""
        handler = make_handler(status_code=204)
        uploader = Uploader(
            handler, "/files/a", io.BytesIO(data), len(data), chunk_size=4096, declare_length=True
        )
        asyncio.run(uploader.upload())

        lengths = [headers.get("Upload-Length") for _, _, headers, _ in handler.requests]
        assert lengths == [str(len(data)), None, None]

    def test_float_chunk_size(self, make_handler, data):
        """Test float chunk sizes are truncated."""
        uploader = Uploader(
            make_handler(), "/files/a", io.BytesIO(data), len(data), chunk_size=1024.7
        )
        assert uploader.chunk_size == 1024

    def test_upload_chunk_by_chunk(self, make_handler, data):
        """Test upload_chunk sends one chunk and reports whether more remain."""
        handler = make_handler(status_code=204)
        uploader = Uploader(handler, "/files/a", io.BytesIO(data), len(data), chunk_size=4096)
        assert uploader.state is UploadState.CREATED

        assert asyncio.run(uploader.upload_chunk()) is True
        assert uploader.offset == 4096
        assert uploader.state is UploadState.TRANSFERRING

        assert asyncio.run(uploader.upload_chunk()) is True
        assert asyncio.run(uploader.upload_chunk()) is False
        assert uploader.offset == len(data)
        assert uploader.state is UploadState.COMPLETED
        assert uploader.is_complete

        # Completed uploads send nothing more
        assert asyncio.run(uploader.upload_chunk()) is False
        assert handler.patch_offsets == [4096, 8192, len(data)]

    def test_upload_sends_protocol_headers(self, make_handler, data):
        """Test each PATCH carries offset, content type and custom headers."""
        handler = make_handler(status_code=204)
        uploader = Uploader(
            handler,
            "/files/a",
            io.BytesIO(data),
            len(data),
            chunk_size=8192,
            headers={"Authorization": "Bearer token"},
        )
        asyncio.run(uploader.upload())

        offsets = []
        for method, url, headers, body_length in handler.requests:
            assert method is HttpMethod.PATCH
            assert url == "/files/a"
            assert headers["Tus-Resumable"] == TusClient.TUS_VERSION == TUS_PROTOCOL_VERSION
            assert headers["Content-Type"] == "application/offset+octet-stream"
            assert headers["Content-Length"] == str(body_length)
            assert headers["Authorization"] == "Bearer token"
            assert "Upload-Checksum" not in headers
            offsets.append(int(headers["Upload-Offset"]))
        assert offsets == [0, 8192]

    def test_upload_with_checksum(self, make_handler, data):
        """Test checksum headers are added when enabled."""
        handler = make_handler(status_code=204)
        uploader = Uploader(handler, "/files/a", io.BytesIO(data), len(data), checksum=True)
        asyncio.run(uploader.upload())
        headers = handler.requests[0][2]
        assert headers["Upload-Checksum"].startswith("sha1 ")

    def test_upload_offsets_strictly_increase(self, make_handler, temp_stream):
        """Test acknowledged offsets grow by the size of every chunk."""
        total = len(temp_stream.getvalue())
        handler = make_handler(status_code=204)
        uploader = Uploader(handler, "/files/a", temp_stream, total, chunk_size=100_000)
        asyncio.run(uploader.upload())

        sizes = [body_length for _, _, _, body_length in handler.requests]
        assert handler.patch_offsets[-1] == total
        assert all(b > a for a, b in zip(handler.patch_offsets, handler.patch_offsets[1:]))
        assert [b - a for a, b in zip([0] + handler.patch_offsets, handler.patch_offsets)] == sizes
        assert sizes[-1] == total % 100_000

    def test_resume_from_offset(self, make_handler, data):
        """Test an uploader started mid-way sends only the remaining bytes."""
        handler = make_handler(status_code=204)
        stream = io.BytesIO(data)
        stream.seek(6000)
        uploader = Uploader(handler, "/files/a", stream, len(data), offset=6000, chunk_size=4096)
        asyncio.run(uploader.upload())
        assert handler.patch_offsets == [10096, len(data)]
        assert uploader.stats.sent_bytes == len(data) - 6000

    def test_already_complete(self, make_handler, data):
        """Test an uploader at the upload length starts completed."""
        handler = make_handler(status_code=204)
        uploader = Uploader(handler, "/files/a", io.BytesIO(data), len(data), offset=len(data))
        assert uploader.state is UploadState.COMPLETED
        assert asyncio.run(uploader.upload()) == "/files/a"
        assert handler.requests == []

    def test_progress_callback(self, make_handler, data):
        """Test the progress callback receives stats after every chunk."""
        handler = make_handler(status_code=204)
        uploader = Uploader(handler, "/files/a", io.BytesIO(data), len(data), chunk_size=4096)
        progress = []
        asyncio.run(uploader.upload(progress_callback=lambda stats: progress.append(stats)))

        assert [stats.uploaded_bytes for stats in progress] == [4096, 8192, len(data)]
        assert progress[-1].chunks_completed == 3
        assert progress[-1].progress_percent == 100.0

    def test_offset_mismatch_fails(self, make_handler, data):
        """Test an unexpected acknowledged offset fails without retrying."""
        handler = make_handler(status_code=204, offset_drift=-1)
        uploader = Uploader(handler, "/files/a", io.BytesIO(data), len(data), chunk_size=4096)

        with pytest.raises(TusOffsetMismatchError) as exc_info:
            asyncio.run(uploader.upload())
        assert exc_info.value.expected == 4096
        assert exc_info.value.actual == 4095
        assert uploader.state is UploadState.FAILED
        assert uploader.offset == 0
        assert len(handler.requests) == 1

    def test_failed_uploader_cannot_continue(self, make_handler, data):
        """Test a failed uploader refuses further chunks."""
        handler = make_handler(status_code=404)
        uploader = Uploader(handler, "/files/a", io.BytesIO(data), len(data))
        with pytest.raises(TusNotFoundError):
            asyncio.run(uploader.upload_chunk())
        with pytest.raises(RuntimeError):
            asyncio.run(uploader.upload_chunk())

    def test_short_stream_fails(self, make_handler, data):
        """Test a stream ending before the upload length is a stream error."""
        handler = make_handler(status_code=204)
        uploader = Uploader(handler, "/files/a", io.BytesIO(data), len(data) + 10)
        with pytest.raises(TusStreamError):
            asyncio.run(uploader.upload())
        assert uploader.state is UploadState.FAILED
        assert handler.patch_offsets == [len(data)]

    def test_read_error_fails(self, make_handler, data):
        """Test read errors are wrapped as stream errors."""
        uploader = Uploader(make_handler(status_code=204), "/files/a", FailingStream(data), 10)
        with pytest.raises(TusStreamError):
            asyncio.run(uploader.upload())
        assert uploader.state is UploadState.FAILED

    def test_transport_error_fails(self, data):
        """Test handler exceptions are wrapped as transport errors."""
        uploader = Uploader(BrokenHandler(), "/files/a", io.BytesIO(data), len(data))
        with pytest.raises(TusTransportError) as exc_info:
            asyncio.run(uploader.upload())
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)
        assert uploader.state is UploadState.FAILED

    def test_async_stream(self, make_handler, data):
        """Test coroutine based streams are supported."""
        handler = make_handler(status_code=204)
        uploader = Uploader(handler, "/files/a", AsyncStream(data), len(data), chunk_size=5000)
        asyncio.run(uploader.upload())
        assert handler.patch_offsets == [5000, 10000, len(data)]

    def test_cancellation_marks_failed(self, data):
        """Test cancelling an in-flight chunk leaves the uploader failed."""

        class SlowHandler:
            async def handle_request(self, request):
                await asyncio.sleep(10)

        uploader = Uploader(SlowHandler(), "/files/a", io.BytesIO(data), len(data))

        async def run():
            task = asyncio.ensure_future(uploader.upload())
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())
        assert uploader.state is UploadState.FAILED
        assert uploader.offset == 0
