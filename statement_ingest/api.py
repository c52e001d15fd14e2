"""Public orchestration for ``statement_ingest``.

:func:`parse_bank_export` is the single entry point used by callers that
start from a file path: it resolves the format, reads the file, and
dispatches to the CSV or OFX ingestor. Callers holding raw text can use
:func:`parse_content` directly.
"""

from __future__ import annotations

from os import PathLike
from typing import Literal

from .detect import detect_format, read_file_content
from .errors import UnsupportedFormatError
from .ingest.csv_ingest import parse_csv_content
from .ingest.ofx_ingest import parse_ofx_content
from .logging_setup import get_logger, log_timing
from .models import ColumnMapping, CsvParseOptions, DateFormatHint, FileFormat, ParseResult
from .money import describe_amount

logger = get_logger("statement_ingest.api")


async def parse_content(
    content: str,
    format: FileFormat,
    *,
    options: CsvParseOptions | None = None,
) -> ParseResult:
    """Parse already-loaded text as ``format``.

    ``options`` only applies to CSV. Raises :class:`UnsupportedFormatError`
    for ``"unknown"``.
    """

    if format == "csv":
        return parse_csv_content(content, options)
    if format in ("ofx", "qfx"):
        return await parse_ofx_content(content, format)
    raise UnsupportedFormatError("<content>")


async def parse_bank_export(
    path: str | PathLike[str],
    *,
    format_hint: FileFormat | Literal["auto"] | None = None,
    date_format_hint: DateFormatHint | None = None,
    column_mapping: ColumnMapping | None = None,
    invert_amounts: bool | None = None,
) -> ParseResult:
    """Detect, read and parse the bank export at ``path``.

    Parameters
    ----------
    format_hint:
        ``"csv"``, ``"ofx"`` or ``"qfx"`` skips detection; ``None`` or
        ``"auto"`` detects by extension and content.
    date_format_hint, column_mapping, invert_amounts:
        CSV overrides; explicit values beat bank-profile and inferred ones.

    Raises
    ------
    FileAccessError
        The path is missing or unreadable.
    UnsupportedFormatError
        Detection classified the file as ``"unknown"``.
    ParseError
        The file could not be parsed at all.
    """

    path_str = str(path)
    with log_timing(logger, "parse_bank_export completed", path=path_str) as ctx:
        if format_hint in (None, "auto", "unknown"):
            fmt = detect_format(path)
        else:
            fmt = format_hint
        if fmt == "unknown":
            logger.warning("unsupported format: %s", path_str)
            raise UnsupportedFormatError(path_str)

        content = read_file_content(path)
        options = CsvParseOptions(
            column_mapping=column_mapping,
            date_format_hint=date_format_hint,
            invert_amounts=invert_amounts,
        )
        result = await parse_content(content, fmt, options=options)
        ctx.update(
            format=result.format,
            transactions=result.transaction_count,
            total=describe_amount(result.total_amount),
            warnings=len(result.warnings),
        )
    return result


__all__ = ["parse_bank_export", "parse_content"]
