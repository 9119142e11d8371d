"""Typed results returned by the client."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

from tus_client.extensions import TusExtension


@dataclass(frozen=True)
class UploadInfo:
    """State of one upload resource at inspection time.

    Attributes:
        bytes_uploaded: Offset acknowledged by the server
        total_size: Upload length, None if the server did not report it
        metadata: Decoded upload metadata as a read-only mapping, None if the
            server sent none
    """

    bytes_uploaded: int
    total_size: Optional[int] = None
    metadata: Optional[Mapping[str, str]] = field(default=None, hash=False)

    def __post_init__(self):
        if self.metadata is not None:
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def is_complete(self) -> bool:
        """Check whether every byte of the upload has been received."""
        return self.total_size is not None and self.bytes_uploaded >= self.total_size


@dataclass(frozen=True)
class ServerInfo:
    """Capabilities advertised by a server in response to OPTIONS.

    Attributes:
        supported_versions: Protocol versions in server preference order
        extensions: Known extensions in the order the server listed them
        max_upload_size: Maximum upload size in bytes, None if unlimited
    """

    supported_versions: list[str] = field(default_factory=list)
    extensions: list[TusExtension] = field(default_factory=list)
    max_upload_size: Optional[int] = None

    def supports(self, extension: TusExtension) -> bool:
        return extension in self.extensions
