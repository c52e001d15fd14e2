"""File format detection by extension and content inspection.

Detection order:

1. The path must name a readable file; otherwise :class:`FileAccessError`.
2. A recognized extension (``.ofx``, ``.qfx``, ``.csv``) decides immediately.
3. Otherwise the content is sniffed: an ``OFXHEADER`` or ``<?OFX`` prefix
   means OFX; an embedded ``<OFX>``/``<OFX `` tag means OFX, or QFX when the
   text mentions "qfx" anywhere; at least two non-blank lines with two or
   more commas on the first means CSV.

Anything else is ``"unknown"``, which is a classification rather than an
error; callers typically report it as an unsupported format.
"""

from __future__ import annotations

import os
from os import PathLike
from pathlib import Path

from .errors import FileAccessError
from .logging_setup import get_logger
from .models import FileFormat

logger = get_logger("statement_ingest.detect")

_EXTENSIONS: dict[str, FileFormat] = {
    ".ofx": "ofx",
    ".qfx": "qfx",
    ".csv": "csv",
}


def _require_readable(path: str | PathLike[str]) -> Path:
    p = Path(path)
    if not p.is_file() or not os.access(p, os.R_OK):
        raise FileAccessError(os.fspath(path))
    return p


def read_file_content(path: str | PathLike[str]) -> str:
    """Read ``path`` as UTF-8 text (a leading BOM is dropped).

    Bytes that are not valid UTF-8 (a Windows-1252 export, say) are replaced
    with U+FFFD and a warning is logged; the file is still parsed.
    """

    p = _require_readable(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise FileAccessError(os.fspath(path)) from exc
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        logger.warning("%s is not valid UTF-8 (%s); undecodable bytes replaced", p.name, exc.reason)
        return data.decode("utf-8-sig", errors="replace")


def sniff_format(content: str) -> FileFormat:
    """Classify raw text content without consulting a file name."""

    trimmed = content.lstrip()

    if trimmed.startswith("OFXHEADER") or trimmed.startswith("<?OFX"):
        return "ofx"

    if "<OFX>" in trimmed or "<OFX " in trimmed:
        return "qfx" if "qfx" in trimmed.lower() else "ofx"

    lines = [line for line in trimmed.split("\n") if line.strip()]
    if len(lines) >= 2 and lines[0].count(",") >= 2:
        return "csv"

    return "unknown"


def detect_format(path: str | PathLike[str]) -> FileFormat:
    """Detect the format of the file at ``path``.

    Raises :class:`FileAccessError` when the path is missing or unreadable.
    """

    p = _require_readable(path)

    by_ext = _EXTENSIONS.get(p.suffix.lower())
    if by_ext is not None:
        logger.debug("format %s from extension: %s", by_ext, p.name)
        return by_ext

    fmt = sniff_format(read_file_content(p))
    logger.debug("format %s from content: %s", fmt, p.name)
    return fmt


__all__ = ["detect_format", "read_file_content", "sniff_format"]
