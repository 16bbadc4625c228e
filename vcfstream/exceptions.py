"""Fatal decode errors.

Every error that stops a stream derives from ``VCFDecodeError`` (itself a
``ValueError``) and carries the context needed for a precise diagnostic.
Recoverable anomalies are logged as warnings instead and never raised.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    "VCFDecodeError",
    "HeaderError",
    "MalformedLineError",
    "MissingFormatTagError",
    "SampleCountError",
    "LikelihoodParseError",
    "BufferSizeError",
]


class VCFDecodeError(ValueError):
    """Base class for errors that abort decoding of a stream."""

    def __init__(self, message: str, *, line_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class HeaderError(VCFDecodeError):
    """Header is missing, truncated or does not end with the #CHROM line."""


class MalformedLineError(VCFDecodeError):
    """A data line lacks one of the fixed columns or has an unusable value."""

    def __init__(self, message: str, *, field: str, line_number: Optional[int] = None):
        super().__init__(message, line_number=line_number)
        self.field = field


class MissingFormatTagError(VCFDecodeError):
    """A requested FORMAT tag (GT / GL) is not declared for the record."""

    def __init__(self, tag: str, format_spec: str, *, line_number: Optional[int] = None):
        super().__init__(
            f"FORMAT '{format_spec}' does not specify {tag} token, cannot decode {tag} values",
            line_number=line_number,
        )
        self.tag = tag
        self.format = format_spec


class SampleCountError(VCFDecodeError):
    """More or fewer per-sample values than declared by the header."""

    def __init__(self, tag: str, expected: int, actual: int, *, line_number: Optional[int] = None):
        if actual > expected:
            msg = f"more {tag} values per line than expected: expected {expected}, got at least {actual}"
        else:
            msg = f"expected {expected} {tag} values per line, but got {actual}"
        super().__init__(msg, line_number=line_number)
        self.tag = tag
        self.expected = expected
        self.actual = actual


class LikelihoodParseError(VCFDecodeError):
    """A GL subfield could not be turned into a probability triplet."""

    def __init__(self, message: str, *, sample_index: int, value: str, line_number: Optional[int] = None):
        super().__init__(message, line_number=line_number)
        self.sample_index = sample_index
        self.value = value


class BufferSizeError(VCFDecodeError):
    """A caller-supplied output array does not match the header's sample count."""

    def __init__(self, name: str, expected: int, actual: object):
        super().__init__(f"{name} buffer must be a writeable 1-D array of length {expected}, got {actual}")
        self.name = name
        self.expected = expected
        self.actual = actual
