"""TUS protocol extensions advertised by servers."""

from enum import Enum


class TusExtension(Enum):
    """Protocol extensions known to the client."""

    CREATION = "creation"
    EXPIRATION = "expiration"
    CHECKSUM = "checksum"
    TERMINATION = "termination"
    CONCATENATION = "concatenation"


_BY_TOKEN = {extension.value: extension for extension in TusExtension}


def parse_extensions(value: str) -> list[TusExtension]:
    """Parse a ``Tus-Extension`` header value.

    Tokens are trimmed and matched in order. Duplicates are kept and unknown
    tokens are dropped.

    Example:
        >>> parse_extensions("creation, termination")
        [<TusExtension.CREATION: 'creation'>, <TusExtension.TERMINATION: 'termination'>]
    """
    extensions = []
    for token in value.split(","):
        extension = _BY_TOKEN.get(token.strip())
        if extension is not None:
            extensions.append(extension)
    return extensions
