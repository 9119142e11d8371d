"""TUS protocol uploader driving the chunked PATCH transfer."""

import asyncio
import base64
import hashlib
import logging
from enum import Enum
from typing import Callable, Optional, Union

from tus_client.client.stats import UploadStats
from tus_client.exceptions import TusConfigError, TusOffsetMismatchError, TusStreamError
from tus_client.http import (
    TUS_PROTOCOL_VERSION,
    HttpHandler,
    HttpMethod,
    HttpRequest,
    send_request,
)
from tus_client.responses import interpret_response
from tus_client.stream import read_stream

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024


class UploadState(Enum):
    """Lifecycle of one upload call."""

    CREATED = "created"
    TRANSFERRING = "transferring"
    COMPLETED = "completed"
    FAILED = "failed"


def validate_chunk_size(chunk_size: Union[int, float]) -> int:
    """Check a chunk size and convert it to int.

    Raises:
        TusConfigError: If chunk_size is less than 1
    """
    if chunk_size < 1:
        raise TusConfigError(f"chunk_size must be at least 1 byte, got {chunk_size}")
    return int(chunk_size)


def validate_total_size(total_size: int) -> int:
    """Check an upload length.

    Raises:
        TusConfigError: If total_size is not a non-negative integer
    """
    if isinstance(total_size, bool) or not isinstance(total_size, int) or total_size < 0:
        raise TusConfigError(f"total_size must be a non-negative integer, got {total_size!r}")
    return total_size


class Uploader:
    """Sends the bytes of a stream to an existing upload, one chunk at a time.

    The stream must already be positioned at ``offset``. Every PATCH carries
    the offset acknowledged by the previous one, and the server must answer
    with exactly ``offset + len(chunk)``. Nothing is retried: the first error
    moves the uploader to ``FAILED`` and is raised to the caller, who can
    inspect the upload again and start a new uploader from the reported
    offset.

    Example:
        >>> uploader = Uploader(handler, "/files/abc123", stream, total_size=4096)
        >>> while await uploader.upload_chunk():
        ...     print(uploader.offset)
    """

    def __init__(
        self,
        handler: HttpHandler,
        url: str,
        file_stream,
        total_size: int,
        offset: int = 0,
        chunk_size: Union[int, float] = DEFAULT_CHUNK_SIZE,
        checksum: bool = False,
        headers: Optional[dict[str, str]] = None,
        declare_length: bool = False,
    ):
        """Initialize TUS uploader.

        Args:
            handler: Transport used for the PATCH requests
            url: Upload URL (must already exist on server)
            file_stream: Readable binary stream positioned at ``offset``
            total_size: Upload length in bytes
            offset: Offset already acknowledged by the server (default: 0)
            chunk_size: Size of upload chunks in bytes (default: 5MB)
            checksum: Send a SHA1 Upload-Checksum with each chunk (default: False)
            headers: Optional custom headers to include in all requests
            declare_length: Send Upload-Length with the first PATCH, for uploads
                created without a length (default: False)

        Raises:
            TusConfigError: If chunk_size < 1 or offset is outside the upload
        """
        self.chunk_size = validate_chunk_size(chunk_size)
        validate_total_size(total_size)
        if not 0 <= offset <= total_size:
            raise TusConfigError(f"offset {offset} is outside upload of {total_size} bytes")

        self.handler = handler
        self.url = url
        self.file_stream = file_stream
        self.total_size = total_size
        self.offset = offset
        self.checksum = checksum
        self.headers = headers or {}
        self.declare_length = declare_length

        self._stats = UploadStats(
            total_bytes=total_size, uploaded_bytes=offset, start_offset=offset
        )
        self.state = UploadState.COMPLETED if offset == total_size else UploadState.CREATED

    @property
    def is_complete(self) -> bool:
        return self.state is UploadState.COMPLETED

    @property
    def stats(self) -> UploadStats:
        """Get a copy of the upload statistics."""
        return UploadStats(
            total_bytes=self._stats.total_bytes,
            uploaded_bytes=self._stats.uploaded_bytes,
            start_offset=self._stats.start_offset,
            chunks_completed=self._stats.chunks_completed,
            start_time=self._stats.start_time,
        )

    async def upload_chunk(self) -> bool:
        """Upload a single chunk.

        Returns:
            True if more chunks remain, False if upload is complete

        Raises:
            TusError: If reading the stream or sending the chunk fails
        """
        if self.state is UploadState.COMPLETED:
            return False
        if self.state is UploadState.FAILED:
            raise RuntimeError(f"Upload to {self.url} already failed at offset {self.offset}")

        self.state = UploadState.TRANSFERRING
        try:
            chunk = await self._read_chunk()
            self.offset = await self._send_chunk(chunk)
        except asyncio.CancelledError:
            self.state = UploadState.FAILED
            logger.info(f"Upload to {self.url} cancelled at offset {self.offset}")
            raise
        except Exception as e:
            self.state = UploadState.FAILED
            logger.error(f"Upload to {self.url} failed at offset {self.offset}: {e}")
            raise

        self._stats.uploaded_bytes = self.offset
        self._stats.chunks_completed += 1
        logger.debug(f"Chunk of {len(chunk)} bytes acknowledged, offset {self.offset}")

        if self.offset == self.total_size:
            self.state = UploadState.COMPLETED
            return False
        return True

    async def upload(
        self, progress_callback: Optional[Callable[[UploadStats], None]] = None
    ) -> str:
        """Upload the remaining chunks.

        Args:
            progress_callback: Optional callback receiving UploadStats after each chunk

        Returns:
            Upload URL

        Raises:
            TusError: If any chunk fails
        """
        while not self.is_complete:
            await self.upload_chunk()
            if progress_callback:
                progress_callback(self.stats)

        logger.info(
            f"Upload to {self.url} completed: {self._stats.sent_bytes} bytes in "
            f"{self._stats.chunks_completed} chunks ({self._stats.upload_speed_mbps:.2f} MB/s)"
        )
        return self.url

    async def _read_chunk(self) -> bytes:
        size = min(self.chunk_size, self.total_size - self.offset)
        chunk = await read_stream(self.file_stream, size)
        if not chunk:
            raise TusStreamError(
                f"Stream ended at offset {self.offset} before reaching {self.total_size} bytes"
            )
        return bytes(chunk)

    async def _send_chunk(self, data: bytes) -> int:
        headers = {
            "Tus-Resumable": TUS_PROTOCOL_VERSION,
            "Upload-Offset": str(self.offset),
            "Content-Type": "application/offset+octet-stream",
            "Content-Length": str(len(data)),
            **self.headers,
        }

        if self.declare_length:
            headers["Upload-Length"] = str(self.total_size)

        if self.checksum:
            checksum_bytes = hashlib.sha1(data).digest()
            checksum_b64 = base64.b64encode(checksum_bytes).decode("ascii")
            headers["Upload-Checksum"] = f"sha1 {checksum_b64}"

        request = HttpRequest(HttpMethod.PATCH, self.url, headers=headers, body=data)
        response = await send_request(self.handler, request)
        try:
            offset = interpret_response(
                HttpMethod.PATCH, response, expected_offset=self.offset + len(data)
            )
        except TusOffsetMismatchError as e:
            logger.warning(
                f"Server at {self.url} acknowledged offset {e.actual}, expected {e.expected}"
            )
            raise

        self.declare_length = False
        return offset
