"""Small utility helpers used across the vcfstream package.

This module intentionally keeps a tiny surface area of pure-Python helpers that
are easy to unit-test and have no heavy dependencies: a cursor-based column
tokenizer, FORMAT tag lookup, bounded field copies and a gzip-aware opener.
"""
from __future__ import annotations

import gzip
import re
from typing import Iterator, Optional, TextIO

from .config import FIELD_DELIMITERS, FORMAT_DELIMITER

GZIP_MAGIC = b"\x1f\x8b"

_DELIM_PATTERNS = {}


def _delimiter_pattern(delimiters: str):
    pat = _DELIM_PATTERNS.get(delimiters)
    if pat is None:
        pat = re.compile("[" + re.escape(delimiters) + "]")
        _DELIM_PATTERNS[delimiters] = pat
    return pat


class FieldCursor:
    """Lazy, one-pass splitter over an immutable line.

    Each call to ``next_token`` returns the text up to the next delimiter and
    moves past exactly one delimiter, so consecutive delimiters yield empty
    tokens. Once the unconsumed text is empty the cursor returns ``None``.

    Example: ``FieldCursor("a\\t\\tb")`` yields ``'a'``, ``''``, ``'b'``.
    """

    __slots__ = ("_text", "_pos", "_delimiters", "_pattern")

    def __init__(self, text: str, delimiters: str = FIELD_DELIMITERS, start: int = 0):
        self._text = text
        self._pos = start
        self._delimiters = delimiters
        self._pattern = _delimiter_pattern(delimiters)

    @property
    def position(self) -> int:
        return self._pos

    def exhausted(self) -> bool:
        return self._pos >= len(self._text)

    def next_token(self) -> Optional[str]:
        text = self._text
        pos = self._pos
        if pos >= len(text):
            return None
        m = self._pattern.search(text, pos)
        if m is None:
            self._pos = len(text)
            return text[pos:]
        self._pos = m.end()
        return text[pos:m.start()]

    def remainder(self) -> str:
        """Return the unconsumed text without advancing."""
        return self._text[self._pos:]

    def fork(self) -> "FieldCursor":
        """Independent cursor at the current position over the same text."""
        return FieldCursor(self._text, self._delimiters, self._pos)

    def __iter__(self) -> Iterator[str]:
        while True:
            tok = self.next_token()
            if tok is None:
                return
            yield tok


def get_format_index(format_spec: str, tag: str) -> Optional[int]:
    """Return the zero-based position of ``tag`` in a ':'-delimited FORMAT string.

    Example: ``get_format_index('GT:AD:GL', 'GL') -> 2``. Returns None if the
    tag is not present.
    """
    for i, key in enumerate(format_spec.split(FORMAT_DELIMITER)):
        if key == tag:
            return i
    return None


def get_subfield(sample: str, index: int) -> Optional[str]:
    """Return the ``index``-th ':'-delimited subfield of a sample column, or None."""
    parts = sample.split(FORMAT_DELIMITER, index + 1)
    if index >= len(parts):
        return None
    return parts[index]


def bounded_copy(text: str, capacity: int) -> str:
    """Copy at most ``capacity`` characters of ``text``."""
    if len(text) <= capacity:
        return text
    return text[:capacity]


def open_text(path: str) -> TextIO:
    """Open text file; auto-detect gzip by magic bytes (suffix not required)."""
    with open(path, "rb") as fh:
        magic = fh.read(2)
    if magic == GZIP_MAGIC:
        return gzip.open(path, "rt", encoding="utf-8", errors="replace")
    return open(path, "r", encoding="utf-8", errors="replace")


__all__ = [
    "FieldCursor",
    "get_format_index",
    "get_subfield",
    "bounded_copy",
    "open_text",
]
