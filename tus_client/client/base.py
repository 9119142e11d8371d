"""TUS protocol client implementation."""

import logging
from collections.abc import Mapping
from typing import Callable, Optional, Union

from tus_client.client.stats import UploadStats
from tus_client.client.uploader import (
    DEFAULT_CHUNK_SIZE,
    Uploader,
    validate_chunk_size,
    validate_total_size,
)
from tus_client.exceptions import TusSizeMismatchError, TusStreamError
from tus_client.http import (
    TUS_PROTOCOL_VERSION,
    HttpHandler,
    HttpMethod,
    HttpRequest,
    send_request,
)
from tus_client.metadata import encode_metadata
from tus_client.models import ServerInfo, UploadInfo
from tus_client.responses import interpret_response
from tus_client.stream import seek_stream, stream_length

logger = logging.getLogger(__name__)


class TusClient:
    """TUS protocol client.

    This client implements TUS protocol version 1.0.0 on top of an injected
    :class:`HttpHandler`. It keeps no state between calls: an interrupted
    upload is resumed by calling :meth:`upload` again with the same stream,
    which asks the server for its offset and continues from there.

    Version Handling:
        - Sends "Tus-Resumable: 1.0.0" header with all requests except OPTIONS

    Example:
        >>> client = TusClient(UrllibHandler(base_url="http://localhost:8080"))
        >>> path = await client.create_with_metadata(
        ...     "/files", total_size=1024, metadata={"filename": "large_file.bin"}
        ... )
        >>> with open("large_file.bin", "rb") as f:
        ...     await client.upload(path, f)
        >>> await client.delete(path)
    """

    TUS_VERSION = TUS_PROTOCOL_VERSION

    def __init__(
        self,
        handler: HttpHandler,
        chunk_size: Union[int, float] = DEFAULT_CHUNK_SIZE,
        headers: Optional[dict[str, str]] = None,
        checksum: bool = False,
    ):
        """Initialize TUS client.

        Args:
            handler: Transport performing the HTTP exchanges
            chunk_size: Size of upload chunks in bytes (default: 5MB). Can be int or float.
            headers: Optional custom headers to include in all requests
            checksum: Send a SHA1 Upload-Checksum with each chunk (default: False)

        Raises:
            TusConfigError: If chunk_size is less than 1
        """
        self.handler = handler
        self.chunk_size = validate_chunk_size(chunk_size)
        self.headers = headers or {}
        self.checksum = checksum

    async def get_info(self, url: str) -> UploadInfo:
        """Get offset, length and metadata of an upload.

        Raises:
            TusNotFoundError: If the server answers with any non-success status
            TusParseError: If a header is malformed
        """
        response = await self._request(HttpMethod.HEAD, url)
        return interpret_response(HttpMethod.HEAD, response)

    async def get_server_info(self, url: str) -> ServerInfo:
        """Get server capabilities via OPTIONS request.

        Example:
            >>> info = await client.get_server_info("/files")
            >>> TusExtension.TERMINATION in info.extensions
            True
        """
        response = await self._request(HttpMethod.OPTIONS, url, resumable=False)
        return interpret_response(HttpMethod.OPTIONS, response)

    async def create(self, url: str, total_size: int) -> str:
        """Create a new upload and return its path."""
        return await self.create_with_metadata(url, total_size, {})

    async def create_with_metadata(
        self, url: str, total_size: int, metadata: Mapping[str, str]
    ) -> str:
        """Create a new upload carrying metadata.

        Args:
            url: Creation endpoint
            total_size: Upload length in bytes
            metadata: Metadata key-value pairs, sent only when not empty

        Returns:
            Value of the Location header, unmodified

        Raises:
            TusConfigError: If a metadata entry cannot be encoded
            TusServerError: If the server does not answer 201 Created
        """
        total_size = validate_total_size(total_size)
        headers = {"Upload-Length": str(total_size)}
        if metadata:
            headers["Upload-Metadata"] = encode_metadata(metadata)

        response = await self._request(HttpMethod.POST, url, headers=headers)
        location = interpret_response(HttpMethod.POST, response)
        logger.info(f"Upload created: {location} ({total_size} bytes)")
        return location

    async def upload(
        self,
        url: str,
        file_stream,
        progress_callback: Optional[Callable[[UploadStats], None]] = None,
    ) -> None:
        """Upload a stream to an existing upload, resuming from the server offset."""
        await self.upload_with_chunk_size(
            url, file_stream, self.chunk_size, progress_callback=progress_callback
        )

    async def upload_with_chunk_size(
        self,
        url: str,
        file_stream,
        chunk_size: Union[int, float],
        progress_callback: Optional[Callable[[UploadStats], None]] = None,
    ) -> None:
        """Upload a stream using a specific chunk size.

        The upload is inspected first; the stream is then moved to the offset
        the server reports and the remaining bytes are sent in order. When the
        server reports no upload length, the stream length is declared with
        the first PATCH.

        Args:
            url: Upload URL
            file_stream: Seekable binary stream holding the whole upload
            chunk_size: Size of upload chunks in bytes
            progress_callback: Optional callback receiving UploadStats after each chunk

        Raises:
            TusConfigError: If chunk_size is less than 1
            TusSizeMismatchError: If the stream length differs from the upload length
            TusError: If any request or stream operation fails
        """
        chunk_size = validate_chunk_size(chunk_size)
        info = await self.get_info(url)

        file_size = await stream_length(file_stream)
        total_size = info.total_size if info.total_size is not None else file_size
        if total_size != file_size:
            raise TusSizeMismatchError(total_size, file_size)

        position = await seek_stream(file_stream, info.bytes_uploaded)
        if position != info.bytes_uploaded:
            raise TusStreamError(f"Stream could not be positioned at {info.bytes_uploaded}")

        logger.info(
            f"Uploading {url}: {total_size} bytes from offset {info.bytes_uploaded}, "
            f"chunk size {chunk_size}"
        )
        uploader = Uploader(
            self.handler,
            url,
            file_stream,
            total_size=total_size,
            offset=info.bytes_uploaded,
            chunk_size=chunk_size,
            checksum=self.checksum,
            headers=self.get_headers(),
            declare_length=info.total_size is None,
        )
        await uploader.upload(progress_callback=progress_callback)

    async def delete(self, url: str) -> None:
        """Delete an upload from the server (Termination extension).

        Raises:
            TusNotFoundError: If the upload does not exist
            TusServerError: If the server answers with another non-204 status
        """
        response = await self._request(HttpMethod.DELETE, url)
        interpret_response(HttpMethod.DELETE, response)

    def update_headers(self, headers: dict[str, str]) -> None:
        """Update custom headers for all requests.

        Example:
            >>> client.update_headers({"Authorization": "Bearer token"})
        """
        self.headers.update(headers)

    def get_headers(self) -> dict[str, str]:
        """Get a copy of the current custom headers."""
        return self.headers.copy()

    async def _request(
        self,
        method: HttpMethod,
        url: str,
        headers: Optional[dict[str, str]] = None,
        resumable: bool = True,
    ):
        request_headers = {"Tus-Resumable": self.TUS_VERSION} if resumable else {}
        request_headers.update(headers or {})
        request_headers.update(self.headers)

        request = HttpRequest(method, url, headers=request_headers)
        return await send_request(self.handler, request)
