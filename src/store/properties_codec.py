"""Properties text format parsing and rendering.

This module implements the ``key=value`` properties dialect used by the
metadata files: comment lines, three separator styles, backslash line
continuation, and backslash escapes including ``\\uXXXX``. It works on
decoded text; compression and byte encoding live in the file codec.
"""

from __future__ import annotations

from datetime import datetime, timezone
import re
from typing import Iterator, Mapping

_NATURAL_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_WHITESPACE = " \t\f"
_COMMENT_PREFIXES = "#!"
_SEPARATORS = "=:"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_LOAD_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SAVE_ESCAPES = {
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
    "#": "\\#",
    "!": "\\!",
}
_TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Z %Y"


def parse_properties(text: str) -> dict[str, str]:
    """Parse properties text into a mapping.

    Args:
        text: Decoded file content.

    Returns:
        Parsed key/value pairs; later duplicate keys win.

    Raises:
        ValueError: If a ``\\uXXXX`` escape is malformed.
    """
    properties: dict[str, str] = {}
    for line in _logical_lines(text):
        raw_key, raw_value = _split_key_value(line)
        properties[_unescape(raw_key)] = _unescape(raw_value)
    return properties


def format_properties(
    properties: Mapping[str, str],
    comment: str | None = None,
    timestamp: datetime | None = None,
) -> str:
    """Render a mapping as properties text.

    Args:
        properties: Key/value pairs to render.
        comment: Optional header comment, one ``#`` line per text line.
        timestamp: Header timestamp; current UTC time when omitted.

    Returns:
        Properties text with entries sorted by key.
    """
    lines: list[str] = []
    if comment:
        lines.extend(f"#{comment_line}" for comment_line in comment.splitlines())
    stamp = timestamp or datetime.now(timezone.utc)
    lines.append(f"#{stamp.strftime(_TIMESTAMP_FORMAT)}")
    for key in sorted(properties):
        escaped_key = _escape(key, escape_all_spaces=True)
        escaped_value = _escape(properties[key], escape_all_spaces=False)
        lines.append(f"{escaped_key}={escaped_value}")
    return "\n".join(lines) + "\n"


def _logical_lines(text: str) -> Iterator[str]:
    """Yield logical lines with comments dropped and continuations joined."""
    pending: str | None = None
    for natural_line in _NATURAL_LINE_BREAK.split(text):
        line = natural_line.lstrip(_WHITESPACE)
        if pending is None:
            if not line or line[0] in _COMMENT_PREFIXES:
                continue
            current = line
        else:
            current = pending + line
        trailing_backslashes = len(current) - len(current.rstrip("\\"))
        if trailing_backslashes % 2 == 1:
            pending = current[:-1]
            continue
        pending = None
        yield current
    # continuation on the last line of the file
    if pending:
        yield pending


def _split_key_value(line: str) -> tuple[str, str]:
    """Split one logical line into raw (still escaped) key and value."""
    key_end = len(line)
    value_start = len(line)
    has_separator = False
    preceding_backslash = False
    for index, character in enumerate(line):
        if not preceding_backslash and character in _SEPARATORS:
            key_end = index
            value_start = index + 1
            has_separator = True
            break
        if not preceding_backslash and character in _WHITESPACE:
            key_end = index
            value_start = index + 1
            break
        preceding_backslash = character == "\\" and not preceding_backslash
    while value_start < len(line):
        character = line[value_start]
        if character in _WHITESPACE:
            value_start += 1
            continue
        if not has_separator and character in _SEPARATORS:
            has_separator = True
            value_start += 1
            continue
        break
    return line[:key_end], line[value_start:]


def _unescape(text: str) -> str:
    """Resolve backslash escapes in a raw key or value."""
    if "\\" not in text:
        return text
    characters: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        character = text[index]
        index += 1
        if character != "\\":
            characters.append(character)
            continue
        if index >= length:
            break
        character = text[index]
        index += 1
        if character == "u":
            digits = text[index : index + 4]
            if len(digits) != 4 or not _HEX_DIGITS.issuperset(digits):
                raise ValueError(f"Malformed \\uxxxx encoding: '\\u{digits}'")
            characters.append(chr(int(digits, 16)))
            index += 4
            continue
        characters.append(_LOAD_ESCAPES.get(character, character))
    return _join_surrogates("".join(characters))


def _join_surrogates(text: str) -> str:
    """Combine UTF-16 surrogate pairs produced by ``\\u`` escapes."""
    if not any("\ud800" <= character <= "\udfff" for character in text):
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def _escape(text: str, escape_all_spaces: bool) -> str:
    """Escape a key or value for a single properties line."""
    escaped: list[str] = []
    for index, character in enumerate(text):
        if character == " ":
            escaped.append("\\ " if escape_all_spaces or index == 0 else " ")
            continue
        escaped.append(_SAVE_ESCAPES.get(character, character))
    return "".join(escaped)
