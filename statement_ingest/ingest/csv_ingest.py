"""CSV → NormalizedTransaction ingestion.

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module (quoted fields
with embedded commas and newlines, doubled quotes). The first row is the
header; header names and cells are trimmed, empty lines are ignored (a line of
empty cells such as ``,,`` is a data row and gets a warning), and ragged
rows are tolerated (missing cells read as empty, extra cells are dropped).

Column mapping resolution, highest precedence first:

1. explicit ``CsvParseOptions`` values;
2. the first matching :data:`~statement_ingest.ingest.profiles.KNOWN_PROFILES`
   entry;
3. :func:`~statement_ingest.ingest.profiles.infer_mapping`.

Each data row is normalized into either a transaction or a
:class:`~statement_ingest.models.RowSkip`; skips add exactly one warning and
never abort the file.
"""

from __future__ import annotations

import csv
from collections.abc import Mapping
from io import StringIO

from ..dates import is_valid_date, parse_date
from ..errors import ParseError
from ..import_id import OccurrenceCounter
from ..logging_setup import get_logger
from ..models import (
    ColumnMapping,
    CsvParseOptions,
    DateFormatHint,
    NormalizedTransaction,
    ParseResult,
    RowOutcome,
    RowSkip,
)
from ..money import is_amount, parse_amount
from .profiles import detect_profile, infer_mapping

logger = get_logger("statement_ingest.ingest.csv")

# Debit/credit cells with these values count as "no amount in this column".
_ZERO_VALUES = frozenset({"", "0", "0.00"})


def _read_csv_rows(content: str) -> tuple[list[str], list[dict[str, str]]]:
    with StringIO(content.removeprefix("\ufeff"), newline="") as f:
        reader = csv.DictReader(f)
        try:
            if reader.fieldnames is None:
                return [], []
            headers = [h.strip() for h in reader.fieldnames]
            reader.fieldnames = headers
            rows: list[dict[str, str]] = []
            for row in reader:
                # DictReader gathers surplus cells under a ``None`` key and
                # fills missing ones with ``None``; keep the plain str shape.
                normalized = {
                    k: (v.strip() if isinstance(v, str) else "")
                    for k, v in row.items()
                    if k is not None
                }
                rows.append(normalized)
        except csv.Error as exc:
            raise ParseError(
                f"Failed to parse CSV: {exc}", line=reader.line_num, detail=str(exc)
            ) from exc
    return headers, rows


def _cell(row: Mapping[str, str], column: str | None) -> str:
    if not column:
        return ""
    return row.get(column, "")


def _resolve_amount_text(row: Mapping[str, str], mapping: ColumnMapping) -> str:
    """Return the raw amount text for ``row`` (``""`` when none resolves).

    A mapped single ``amount`` column always wins. Otherwise a non-zero debit
    becomes a negative amount, else a non-zero credit a positive one.
    """

    if mapping.amount:
        return _cell(row, mapping.amount)
    if mapping.debit or mapping.credit:
        debit = _cell(row, mapping.debit)
        credit = _cell(row, mapping.credit)
        if debit not in _ZERO_VALUES:
            return "-" + debit.removeprefix("-")
        if credit not in _ZERO_VALUES:
            return credit.removeprefix("-")
    return ""


def _normalize_row(
    row: Mapping[str, str],
    line_num: int,
    *,
    mapping: ColumnMapping,
    date_hint: DateFormatHint,
    invert_amounts: bool,
    occurrences: OccurrenceCounter,
) -> RowOutcome:
    raw_date = _cell(row, mapping.date)
    if not raw_date:
        return RowSkip(f"Row {line_num}: missing date, skipping")
    date = parse_date(raw_date, date_hint)
    if date is None or not is_valid_date(date):
        return RowSkip(f'Row {line_num}: could not parse date "{raw_date}", skipping')

    amount_text = _resolve_amount_text(row, mapping)
    if not amount_text.strip():
        return RowSkip(f"Row {line_num}: missing amount, skipping")
    if not is_amount(amount_text):
        return RowSkip(f'Row {line_num}: could not parse amount "{amount_text}", skipping')
    amount = parse_amount(amount_text)
    if invert_amounts:
        amount = -amount

    payee = _cell(row, mapping.payee).strip()
    if not payee:
        return RowSkip(f"Row {line_num}: missing payee/description, skipping")

    memo = _cell(row, mapping.memo).strip()

    return NormalizedTransaction(
        date=date,
        amount=amount,
        payee=payee,
        memo=memo,
        import_id=occurrences.import_id_for(date, amount, payee),
    )


def parse_csv_content(content: str, options: CsvParseOptions | None = None) -> ParseResult:
    """Parse CSV text into a :class:`ParseResult`.

    Raises
    ------
    ParseError
        When the content is blank, structurally unreadable, has no data rows,
        or no usable date/payee columns can be inferred.
    """

    opts = options or CsvParseOptions()

    if not content.strip():
        raise ParseError("CSV file is empty")

    headers, rows = _read_csv_rows(content)
    if not rows:
        raise ParseError("CSV file contains no data rows")

    profile = detect_profile(headers)
    if opts.column_mapping is not None:
        mapping = opts.column_mapping
    elif profile is not None:
        mapping = profile.mapping
    else:
        mapping = infer_mapping(headers)

    date_hint: DateFormatHint = opts.date_format_hint or (
        profile.date_hint if profile and profile.date_hint else "auto"
    )
    if opts.invert_amounts is not None:
        invert = opts.invert_amounts
    else:
        invert = profile.invert_amounts if profile is not None else False

    warnings: list[str] = []
    if profile is not None:
        warnings.append(f"Detected bank format: {profile.name}")
        logger.debug("matched CSV profile %r", profile.name)

    occurrences = OccurrenceCounter()
    transactions: list[NormalizedTransaction] = []
    for i, row in enumerate(rows):
        outcome = _normalize_row(
            row,
            i + 2,  # 1-based, plus the header row
            mapping=mapping,
            date_hint=date_hint,
            invert_amounts=invert,
            occurrences=occurrences,
        )
        if isinstance(outcome, RowSkip):
            warnings.append(outcome.warning)
        else:
            transactions.append(outcome)

    logger.debug(
        "parsed CSV: %d rows -> %d transactions, %d warnings",
        len(rows),
        len(transactions),
        len(warnings),
    )
    return ParseResult(
        format="csv",
        transactions=tuple(transactions),
        warnings=tuple(warnings),
    )


__all__ = ["parse_csv_content"]
