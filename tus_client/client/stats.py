"""Upload progress statistics."""

import time
from dataclasses import dataclass, field


@dataclass
class UploadStats:
    """Statistics for upload progress.

    Attributes:
        total_bytes: Upload length in bytes
        uploaded_bytes: Offset acknowledged by the server so far
        start_offset: Offset the current upload call started from
        chunks_completed: Number of chunks acknowledged during this call
        start_time: Monotonic timestamp when the upload call started
    """

    total_bytes: int
    uploaded_bytes: int = 0
    start_offset: int = 0
    chunks_completed: int = 0
    start_time: float = field(default_factory=time.monotonic)

    @property
    def sent_bytes(self) -> int:
        """Get bytes sent during this call, excluding the resumed prefix."""
        return self.uploaded_bytes - self.start_offset

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        return time.monotonic() - self.start_time

    @property
    def upload_speed(self) -> float:
        """Get upload speed in bytes/second."""
        elapsed = self.elapsed_time
        if elapsed > 0:
            return self.sent_bytes / elapsed
        return 0.0

    @property
    def upload_speed_mbps(self) -> float:
        return self.upload_speed / (1024 * 1024)

    @property
    def progress_percent(self) -> float:
        """Get progress as percentage (0-100)."""
        if self.total_bytes > 0:
            return (self.uploaded_bytes / self.total_bytes) * 100
        return 100.0

    @property
    def eta_seconds(self) -> float:
        """Get estimated time to completion in seconds."""
        speed = self.upload_speed
        if speed > 0:
            return (self.total_bytes - self.uploaded_bytes) / speed
        return 0.0
