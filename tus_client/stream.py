"""Helpers for the local byte stream being uploaded.

Streams are binary file-like objects. ``read``, ``seek`` and ``tell`` may be
plain methods or coroutine functions, so both ``io.BytesIO`` and async file
objects are accepted.
"""

import inspect
import os

from tus_client.exceptions import TusStreamError


async def _resolve(value):
    if inspect.isawaitable(value):
        return await value
    return value


async def read_stream(stream, size: int) -> bytes:
    """Read up to ``size`` bytes from ``stream``."""
    try:
        return await _resolve(stream.read(size))
    except OSError as e:
        raise TusStreamError(f"Failed to read from stream: {e}") from e


async def seek_stream(stream, offset: int, whence: int = os.SEEK_SET) -> int:
    """Move the stream position and return the new absolute position."""
    try:
        await _resolve(stream.seek(offset, whence))
        return await _resolve(stream.tell())
    except OSError as e:
        raise TusStreamError(f"Failed to seek stream to {offset}: {e}") from e


async def stream_length(stream) -> int:
    """Get the byte length of ``stream`` without moving its position."""
    try:
        current_pos = await _resolve(stream.tell())
        await _resolve(stream.seek(0, os.SEEK_END))
        size = await _resolve(stream.tell())
        await _resolve(stream.seek(current_pos))
    except OSError as e:
        raise TusStreamError(f"Failed to measure stream: {e}") from e
    return size
