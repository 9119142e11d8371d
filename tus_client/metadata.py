"""Upload metadata codec.

The metadata travels in a single ``Upload-Metadata`` header: the pairs are
joined as ``key:value`` separated by ``;`` and the whole string is base64
encoded once.

Example:
    >>> encode_metadata({"filename": "a.bin"})
    'ZmlsZW5hbWU6YS5iaW4='
    >>> decode_metadata("ZmlsZW5hbWU6YS5iaW4=")
    {'filename': 'a.bin'}
"""

import base64
import binascii
from collections.abc import Mapping

from tus_client.exceptions import TusConfigError, TusParseError

PAIR_SEPARATOR = ";"
KEY_VALUE_SEPARATOR = ":"


def encode_metadata(metadata: Mapping[str, str], encoding: str = "utf-8") -> str:
    """Encode metadata into an ``Upload-Metadata`` header value.

    Args:
        metadata: Mapping of metadata keys to values
        encoding: Text encoding applied before base64 (default: utf-8)

    Returns:
        Base64 encoded header value

    Raises:
        TusConfigError: If a key is empty or a key/value contains ``:`` or ``;``
    """
    pairs = []
    for key, value in metadata.items():
        key_str = str(key)
        value_str = str(value)

        if not key_str:
            raise TusConfigError("Upload-metadata key cannot be empty")
        for part in (key_str, value_str):
            if KEY_VALUE_SEPARATOR in part or PAIR_SEPARATOR in part:
                raise TusConfigError(
                    f'Upload-metadata entry "{key_str}" cannot contain '
                    f'"{KEY_VALUE_SEPARATOR}" or "{PAIR_SEPARATOR}"'
                )

        pairs.append(f"{key_str}{KEY_VALUE_SEPARATOR}{value_str}")

    joined = PAIR_SEPARATOR.join(pairs)
    return base64.b64encode(joined.encode(encoding)).decode("ascii")


def decode_metadata(value: str, encoding: str = "utf-8") -> dict[str, str]:
    """Decode an ``Upload-Metadata`` header value.

    Segments without a ``:`` (for example a truncated trailing fragment) are
    skipped. Each kept segment is split on its first ``:``.

    Args:
        value: Base64 encoded header value
        encoding: Text encoding of the decoded payload (default: utf-8)

    Returns:
        Dictionary of metadata key-value pairs

    Raises:
        TusParseError: If the value is not valid base64 text
    """
    try:
        payload = base64.b64decode(value.strip(), validate=True).decode(encoding)
    except (binascii.Error, UnicodeDecodeError) as e:
        raise TusParseError("upload-metadata", f"Invalid upload-metadata: {e}") from e

    metadata = {}
    for segment in payload.split(PAIR_SEPARATOR):
        if KEY_VALUE_SEPARATOR not in segment:
            continue
        key, item = segment.split(KEY_VALUE_SEPARATOR, 1)
        metadata[key] = item

    return metadata
