"""
Global tus_client exception classes.

Every failure surfaced by the client derives from :class:`TusError`. Errors
that come from a server response also derive from
:class:`TusCommunicationError` and carry the status code and headers.
"""


class TusError(Exception):
    """Base class for all errors raised by tus_client.

    Attributes:
        message (str): Main message of the exception
    """

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class TusCommunicationError(TusError):
    """
    Exception raised when communication with TUS server behaves unexpectedly.

    Attributes:
        message (str): Main message of the exception
        status_code (int): HTTP status code of response indicating an error
        response_headers (dict): Headers of response indicating an error
    """

    def __init__(self, message=None, status_code=None, response_headers=None):
        default_message = f"Communication with TUS server failed with status {status_code}"
        super().__init__(message or default_message)
        self.status_code = status_code
        self.response_headers = response_headers or {}


class TusNotFoundError(TusCommunicationError):
    """The upload resource is missing or access to it was denied."""


class TusServerError(TusCommunicationError):
    """The server answered with a status the operation does not accept."""


class TusOffsetMismatchError(TusCommunicationError):
    """The server acknowledged a different offset than the one expected.

    Attributes:
        expected (int): Offset the client expected after the chunk
        actual (int): Offset reported in the ``Upload-Offset`` response header
    """

    def __init__(self, expected, actual, status_code=None, response_headers=None):
        super().__init__(
            f"Server acknowledged offset {actual}, expected {expected}",
            status_code=status_code,
            response_headers=response_headers,
        )
        self.expected = expected
        self.actual = actual


class TusParseError(TusError):
    """A header value could not be parsed.

    Attributes:
        context (str): Name of the header (or payload) that failed to parse
    """

    def __init__(self, context, message=None):
        super().__init__(message or f"Could not parse {context}")
        self.context = context


class TusTransportError(TusError):
    """The transport failed to complete a request/response exchange."""


class TusStreamError(TusError):
    """Reading from or seeking the local stream failed."""


class TusConfigError(TusError, ValueError):
    """A caller supplied parameter is invalid."""


class TusSizeMismatchError(TusError):
    """The local stream length differs from the upload length on the server.

    Attributes:
        expected (int): Upload length reported by the server
        actual (int): Byte length of the local stream
    """

    def __init__(self, expected, actual):
        super().__init__(f"Stream holds {actual} bytes but the upload expects {expected}")
        self.expected = expected
        self.actual = actual
