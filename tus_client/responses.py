"""Interpretation of server responses.

Each protocol operation accepts its own set of success statuses and reads its
own headers. The functions here turn an :class:`HttpResponse` into the typed
result of the operation or raise the matching :class:`TusError`.
"""

import re
from typing import Optional

from tus_client.exceptions import (
    TusNotFoundError,
    TusOffsetMismatchError,
    TusParseError,
    TusServerError,
)
from tus_client.extensions import parse_extensions
from tus_client.http import HttpMethod, HttpResponse
from tus_client.metadata import decode_metadata
from tus_client.models import ServerInfo, UploadInfo

INFO_SUCCESS = frozenset({200, 204})
SERVER_INFO_SUCCESS = frozenset({200, 204})
CREATED = 201
NO_CONTENT = 204

# Statuses treated as "the resource is gone" for PATCH and DELETE
RESOURCE_MISSING = frozenset({403, 404, 410})

_UNSIGNED = re.compile(r"[0-9]+")


def parse_unsigned(response: HttpResponse, name: str, required: bool = False) -> Optional[int]:
    """Read a header holding a decimal unsigned integer.

    Raises:
        TusParseError: If the value is not numeric, or missing while required
    """
    value = response.get_header(name)
    if value is None:
        if required:
            raise TusParseError(name, f"Server did not return {name} header")
        return None

    value = value.strip()
    if not _UNSIGNED.fullmatch(value):
        raise TusParseError(name, f"Invalid {name} header: {value!r}")
    return int(value)


def parse_token_list(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [token.strip() for token in value.split(",") if token.strip()]


def _communication_error(error_class, response: HttpResponse, action: str):
    return error_class(
        f"Failed to {action}: server responded with status {response.status_code}",
        status_code=response.status_code,
        response_headers=response.headers,
    )


def parse_info_response(response: HttpResponse) -> UploadInfo:
    """Interpret the response to a HEAD request.

    Any status outside the success set is reported as not found, whether it
    is a client or a server error.
    """
    if response.status_code not in INFO_SUCCESS:
        raise _communication_error(TusNotFoundError, response, "get upload info")

    total_size = parse_unsigned(response, "upload-length")
    bytes_uploaded = parse_unsigned(response, "upload-offset", required=True)
    if total_size is not None and bytes_uploaded > total_size:
        raise TusParseError(
            "upload-offset",
            f"Upload-Offset {bytes_uploaded} exceeds Upload-Length {total_size}",
        )

    metadata = None
    encoded_metadata = response.get_header("upload-metadata")
    if encoded_metadata is not None:
        metadata = decode_metadata(encoded_metadata)

    return UploadInfo(bytes_uploaded=bytes_uploaded, total_size=total_size, metadata=metadata)


def parse_server_info_response(response: HttpResponse) -> ServerInfo:
    """Interpret the response to an OPTIONS request."""
    if response.status_code not in SERVER_INFO_SUCCESS:
        raise _communication_error(TusServerError, response, "get server info")

    return ServerInfo(
        supported_versions=parse_token_list(response.get_header("tus-version")),
        extensions=parse_extensions(response.get_header("tus-extension") or ""),
        max_upload_size=parse_unsigned(response, "tus-max-size"),
    )


def parse_create_response(response: HttpResponse) -> str:
    """Interpret the response to a POST request and return the new upload path."""
    if response.status_code != CREATED:
        raise _communication_error(TusServerError, response, "create upload")

    location = response.get_header("location")
    if not location:
        raise TusParseError("location", "Server did not return Location header")
    return location


def parse_patch_response(response: HttpResponse, expected_offset: int) -> int:
    """Interpret the response to a PATCH request.

    Args:
        response: Response to the PATCH request
        expected_offset: Offset the chunk should have advanced the upload to

    Returns:
        Offset acknowledged by the server

    Raises:
        TusOffsetMismatchError: If the acknowledged offset is not the expected one
    """
    if response.status_code != NO_CONTENT:
        error_class = (
            TusNotFoundError if response.status_code in RESOURCE_MISSING else TusServerError
        )
        raise _communication_error(error_class, response, "upload chunk")

    offset = parse_unsigned(response, "upload-offset", required=True)
    if offset != expected_offset:
        raise TusOffsetMismatchError(
            expected_offset,
            offset,
            status_code=response.status_code,
            response_headers=response.headers,
        )
    return offset


def parse_delete_response(response: HttpResponse) -> None:
    """Interpret the response to a DELETE request."""
    if response.status_code == NO_CONTENT:
        return
    if response.status_code in RESOURCE_MISSING:
        raise _communication_error(TusNotFoundError, response, "delete upload")
    raise _communication_error(TusServerError, response, "delete upload")


_PARSERS = {
    HttpMethod.HEAD: parse_info_response,
    HttpMethod.OPTIONS: parse_server_info_response,
    HttpMethod.POST: parse_create_response,
    HttpMethod.DELETE: parse_delete_response,
}


def interpret_response(
    method: HttpMethod, response: HttpResponse, expected_offset: Optional[int] = None
):
    """Interpret a response according to the method of the request that produced it.

    Args:
        method: Method of the request
        response: Response returned by the transport
        expected_offset: Required for PATCH, the offset the chunk should reach

    Returns:
        UploadInfo, ServerInfo, the upload path, the acknowledged offset or
        None, depending on the method
    """
    if method is HttpMethod.PATCH:
        if expected_offset is None:
            raise TypeError("expected_offset is required to interpret a PATCH response")
        return parse_patch_response(response, expected_offset)
    return _PARSERS[method](response)
