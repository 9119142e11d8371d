"""Shared fixtures for tus_client tests."""

import base64
import io
import os

import pytest

from tus_client.http import HttpMethod, HttpResponse


class FakeTusHandler:
    """In-memory handler answering every method with canned headers.

    PATCH responses echo ``Upload-Offset + len(body)`` unless
    ``offset_drift`` is set, in which case the drift is added to the echo.
    Only the length of each body is recorded.
    """

    def __init__(
        self,
        status_code=200,
        upload_progress=1234,
        total_upload_size=2345,
        tus_version="1.0.0",
        extensions="",
        max_upload_size=12345,
        metadata="key_one:value_one;key_two:value_two;k",
        offset_drift=0,
    ):
        self.status_code = status_code
        self.upload_progress = upload_progress
        self.total_upload_size = total_upload_size
        self.tus_version = tus_version
        self.extensions = extensions
        self.max_upload_size = max_upload_size
        self.metadata = metadata
        self.offset_drift = offset_drift
        self.requests = []
        self.patch_offsets = []

    async def handle_request(self, request):
        body_length = len(request.body) if request.body is not None else None
        self.requests.append((request.method, request.url, dict(request.headers), body_length))

        headers = {"tus-version": self.tus_version}
        if request.method is HttpMethod.HEAD:
            headers = {"upload-offset": str(self.upload_progress)}
            if self.total_upload_size is not None:
                headers["upload-length"] = str(self.total_upload_size)
            if self.metadata is not None:
                headers["upload-metadata"] = base64.b64encode(self.metadata.encode()).decode()
        elif request.method is HttpMethod.OPTIONS:
            headers["tus-extension"] = self.extensions
            headers["tus-max-size"] = str(self.max_upload_size)
        elif request.method is HttpMethod.PATCH:
            offset = int(request.headers["Upload-Offset"]) + body_length + self.offset_drift
            self.patch_offsets.append(offset)
            headers["upload-offset"] = str(offset)
        elif request.method is HttpMethod.POST:
            headers["location"] = "/something_else"

        return HttpResponse(status_code=self.status_code, headers=headers)

    def methods(self):
        return [method for method, _, _, _ in self.requests]


@pytest.fixture
def make_handler():
    """Build a FakeTusHandler with overridden defaults."""
    return FakeTusHandler


@pytest.fixture
def temp_stream():
    """Create a 781,312 byte stream of random data."""
    return io.BytesIO(os.urandom(1024 * 763))
