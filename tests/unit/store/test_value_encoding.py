"""Unit tests for stored value percent-encoding."""

from __future__ import annotations

import pytest

from core.errors import MetadataEncodeError, MetadataMalformedError
from store.value_encoding import decode_value, encode_value


def test_encode_value_matches_form_encoding() -> None:
    """Spaces become plus signs and reserved characters are escaped."""
    encoded = encode_value("a b=c&d~e*f")

    assert encoded == "a+b%3Dc%26d%7Ee*f"


def test_encode_value_escapes_newline_and_non_ascii() -> None:
    """Newlines and non-ASCII text are encoded as UTF-8 escapes."""
    encoded = encode_value("été\n")

    assert encoded == "%C3%A9t%C3%A9%0A"


def test_decode_value_reverses_encoding() -> None:
    """Decoding should restore the original text exactly."""
    original = "k=v\nline two ünïcödé 🎉 + plus"

    assert decode_value(encode_value(original)) == original


def test_encode_value_rejects_non_text() -> None:
    """Only strings can be stored as metadata values."""
    with pytest.raises(MetadataEncodeError):
        encode_value(42)  # type: ignore[arg-type]


def test_encode_value_rejects_lone_surrogate() -> None:
    """Unpaired surrogates cannot be encoded as UTF-8."""
    with pytest.raises(MetadataEncodeError):
        encode_value("bad\ud800")


@pytest.mark.parametrize("stored", ["100%", "%zz", "a%2"])
def test_decode_value_rejects_malformed_input(stored: str) -> None:
    """Broken percent escapes should surface as malformed data."""
    with pytest.raises(MetadataMalformedError):
        decode_value(stored)


@pytest.mark.parametrize(("stored", "expected"), [("%FF", "\ufffd"), ("a%C3+b", "a\ufffd b")])
def test_decode_value_replaces_invalid_utf8(stored: str, expected: str) -> None:
    """Escaped bytes that are not UTF-8 decode to the replacement character."""
    assert decode_value(stored) == expected
