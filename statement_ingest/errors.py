"""Exception types and structured error classification.

Two severities exist in this package. Fatal problems (empty input, broken file
structure, no usable column mapping, unreadable path) raise an
:class:`IngestError` subclass and abort the call. Row-level problems never
raise; they become :class:`~statement_ingest.models.RowSkip` outcomes with a
warning, so a caller can tell "nothing parsed because the file is broken"
apart from "some rows were incomplete".

``to_structured_error`` maps any exception onto a small JSON-friendly shape
used by the CLI for error output.
"""

from __future__ import annotations

from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict


class IngestError(Exception):
    """Base class for fatal ingestion failures."""


class ParseError(IngestError):
    """The input could not be parsed at all.

    ``line`` optionally points at the offending source line and ``detail``
    carries extra context (e.g. the underlying parser message).
    """

    def __init__(self, message: str, line: int | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.detail = detail


class FileAccessError(ParseError):
    """The source path does not exist or is not readable."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found or not readable: {path}")
        self.path = path


class UnsupportedFormatError(IngestError):
    """Format detection classified the file as ``unknown``."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Could not detect file format for: {path}. Supported formats: CSV, OFX, QFX."
        )
        self.path = path


ErrorCode: TypeAlias = Literal[
    "PARSE_ERROR",
    "FILE_NOT_FOUND",
    "UNSUPPORTED_FORMAT",
    "INVALID_INPUT",
    "INTERNAL_ERROR",
]


class StructuredError(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    retryable: bool = False


def to_structured_error(exc: BaseException) -> StructuredError:
    """Classify ``exc`` into a :class:`StructuredError`.

    Nothing produced by this package is retryable: the inputs are local files
    and a second attempt would fail the same way.
    """

    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, FileAccessError):
        return StructuredError(code="FILE_NOT_FOUND", message=message)
    if isinstance(exc, ParseError):
        return StructuredError(code="PARSE_ERROR", message=message)
    if isinstance(exc, UnsupportedFormatError):
        return StructuredError(code="UNSUPPORTED_FORMAT", message=message)
    if isinstance(exc, FileNotFoundError | PermissionError | IsADirectoryError):
        return StructuredError(code="FILE_NOT_FOUND", message=f"File not found: {message}")
    if isinstance(exc, ValueError):
        return StructuredError(code="INVALID_INPUT", message=message)
    return StructuredError(code="INTERNAL_ERROR", message=f"Unexpected error: {message}")


__all__ = [
    "ErrorCode",
    "FileAccessError",
    "IngestError",
    "ParseError",
    "StructuredError",
    "UnsupportedFormatError",
    "to_structured_error",
]
