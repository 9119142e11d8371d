"""Transport capability used by the client.

The client never talks to the network itself. It hands an :class:`HttpRequest`
to an :class:`HttpHandler` and interprets the :class:`HttpResponse` it gets
back. :class:`UrllibHandler` is the default handler built on ``urllib``.
"""

import asyncio
import logging
import ssl
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin, urlparse
from urllib.request import Request, urlopen

from tus_client.exceptions import TusError, TusTransportError

logger = logging.getLogger(__name__)

# The version of the tus protocol we implement.
TUS_PROTOCOL_VERSION = "1.0.0"


class HttpMethod(Enum):
    """Request methods used by the protocol."""

    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PATCH = "PATCH"
    POST = "POST"
    DELETE = "DELETE"


@dataclass
class HttpRequest:
    """One request handed to the transport.

    The body is only valid for the duration of the ``handle_request`` call.
    """

    method: HttpMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass
class HttpResponse:
    """Status code and headers of a response. Bodies are not used."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)

    def get_header(self, name: str) -> Optional[str]:
        """Look up a header case-insensitively."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class HttpHandler(Protocol):
    """Performs one request/response exchange."""

    async def handle_request(self, request: HttpRequest) -> HttpResponse: ...


class UrllibHandler:
    """HTTP handler backed by ``urllib.request``.

    Requests run in a worker thread so the event loop is not blocked. Error
    statuses are returned as responses; only connection level failures raise.

    Example:
        >>> handler = UrllibHandler(base_url="http://localhost:8080")
        >>> client = TusClient(handler)
        >>> path = asyncio.run(client.create("/files", total_size=1024))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        verify_tls_cert: bool = True,
    ):
        """Initialize the handler.

        Args:
            base_url: URL that relative request URLs are resolved against
            timeout: Socket timeout in seconds (default: no timeout)
            verify_tls_cert: Verify TLS certificates (default: True)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.verify_tls_cert = verify_tls_cert

    async def handle_request(self, request: HttpRequest) -> HttpResponse:
        return await asyncio.to_thread(self._send, request)

    def resolve_url(self, url: str) -> str:
        if self.base_url and not urlparse(url).scheme:
            return urljoin(self.base_url, url)
        return url

    def _send(self, request: HttpRequest) -> HttpResponse:
        url = self.resolve_url(request.url)
        context = None
        if not self.verify_tls_cert:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        logger.debug(f"{request.method.value} {url}")
        try:
            req = Request(
                url,
                data=request.body,
                headers=request.headers,
                method=request.method.value,
            )
            with urlopen(req, timeout=self.timeout, context=context) as response:
                return HttpResponse(
                    status_code=response.status,
                    headers={k.lower(): v for k, v in response.headers.items()},
                )
        except HTTPError as e:
            headers = {k.lower(): v for k, v in e.headers.items()} if e.headers else {}
            e.close()
            return HttpResponse(status_code=e.code, headers=headers)
        except (URLError, OSError, ValueError) as e:
            raise TusTransportError(f"{request.method.value} {url} failed: {e}") from e


async def send_request(handler: HttpHandler, request: HttpRequest) -> HttpResponse:
    """Run one exchange through ``handler``.

    Exceptions raised by the handler that are not already :class:`TusError`
    instances are wrapped in :class:`TusTransportError`.
    """
    try:
        return await handler.handle_request(request)
    except TusError:
        raise
    except Exception as e:
        raise TusTransportError(f"{request.method.value} {request.url} failed: {e}") from e
