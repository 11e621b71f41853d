"""Percent-encoding for stored metadata values.

Values are kept form-urlencoded in memory and on disk so that the
properties text never carries raw caller-supplied content. The encoding
matches files written by earlier releases byte for byte.
"""

from __future__ import annotations

import re
from urllib.parse import quote_plus, unquote_plus

from core.constants import METADATA_TEXT_ENCODING
from core.errors import MetadataEncodeError, MetadataMalformedError

# quote_plus keeps "~" unescaped; stored files always carry it as %7E.
_FORM_SAFE_CHARACTERS = "*"
_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_value(value: str) -> str:
    """Encode a metadata value for storage.

    Args:
        value: Caller-supplied text.

    Returns:
        Form-urlencoded UTF-8 representation.

    Raises:
        MetadataEncodeError: If value is not text or not encodable as UTF-8.
    """
    if not isinstance(value, str):
        raise MetadataEncodeError(
            f"Metadata values must be strings, got {type(value).__name__}. "
            "Convert the value to text before storing it."
        )
    try:
        encoded = quote_plus(
            value,
            safe=_FORM_SAFE_CHARACTERS,
            encoding=METADATA_TEXT_ENCODING,
            errors="strict",
        )
    except UnicodeEncodeError as error:
        raise MetadataEncodeError(
            f"Failed to encode metadata value as {METADATA_TEXT_ENCODING}: {error.reason}. "
            "Remove unpaired surrogate characters from the value."
        ) from error
    return encoded.replace("~", "%7E")


def decode_value(encoded: str) -> str:
    """Decode a stored metadata value.

    Args:
        encoded: Form-urlencoded value as held in the record mapping.

    Returns:
        Original text.

    Raises:
        MetadataMalformedError: If the stored value has a broken percent escape.
    """
    invalid = _INVALID_ESCAPE.search(encoded)
    if invalid is not None:
        raise MetadataMalformedError(
            f"Invalid percent escape at offset {invalid.start()} in stored value '{encoded}'. "
            "Rewrite the entry through put_entry to repair it."
        )
    # invalid UTF-8 byte sequences decode to U+FFFD, as earlier releases did
    return unquote_plus(encoded, encoding=METADATA_TEXT_ENCODING, errors="replace")
