"""TUS Client Library

An asyncio client engine for the TUS resumable upload protocol.
The transport is injected, so any HTTP library can carry the requests.
"""

__version__ = "0.1.0"

from tus_client.client import DEFAULT_CHUNK_SIZE, TusClient, Uploader, UploadState, UploadStats
from tus_client.exceptions import (
    TusCommunicationError,
    TusConfigError,
    TusError,
    TusNotFoundError,
    TusOffsetMismatchError,
    TusParseError,
    TusServerError,
    TusSizeMismatchError,
    TusStreamError,
    TusTransportError,
)
from tus_client.extensions import TusExtension, parse_extensions
from tus_client.http import HttpHandler, HttpMethod, HttpRequest, HttpResponse, UrllibHandler
from tus_client.metadata import decode_metadata, encode_metadata
from tus_client.models import ServerInfo, UploadInfo

__all__ = [
    "TusClient",
    "Uploader",
    "UploadState",
    "UploadStats",
    "DEFAULT_CHUNK_SIZE",
    "UploadInfo",
    "ServerInfo",
    "TusExtension",
    "parse_extensions",
    "encode_metadata",
    "decode_metadata",
    "HttpHandler",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "UrllibHandler",
    "TusError",
    "TusCommunicationError",
    "TusNotFoundError",
    "TusServerError",
    "TusOffsetMismatchError",
    "TusParseError",
    "TusTransportError",
    "TusStreamError",
    "TusConfigError",
    "TusSizeMismatchError",
]
