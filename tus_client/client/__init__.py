"""TUS protocol client implementations."""

from tus_client.client.base import TusClient
from tus_client.client.stats import UploadStats
from tus_client.client.uploader import DEFAULT_CHUNK_SIZE, Uploader, UploadState

__all__ = ["TusClient", "UploadStats", "Uploader", "UploadState", "DEFAULT_CHUNK_SIZE"]
