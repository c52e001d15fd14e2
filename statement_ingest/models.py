"""Data models and type aliases for ``statement_ingest``.

The canonical output unit is :class:`NormalizedTransaction`: a calendar date
in ``YYYY-MM-DD`` form, a signed integer amount in milliunits (1/1000 of the
currency unit, negative = money leaving the account), a trimmed payee, an
optional memo, and a deterministic ``import_id`` used by the ledger as its
dedup key.

Ingestion runs return a :class:`ParseResult`. Row-level problems never raise;
each skipped row is represented by a :class:`RowSkip` and contributes exactly
one warning string to the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

FileFormat: TypeAlias = Literal["csv", "ofx", "qfx", "unknown"]
"""Closed set of classifications produced by format detection."""

StatementFormat: TypeAlias = Literal["csv", "ofx", "qfx"]
"""Formats a :class:`ParseResult` can carry (``unknown`` never parses)."""

DateFormatHint: TypeAlias = Literal["MM/DD/YYYY", "DD/MM/YYYY", "auto"]
"""Disambiguation hint for day/month-ambiguous date strings."""

DATE_FORMAT_HINTS: tuple[str, ...] = ("MM/DD/YYYY", "DD/MM/YYYY", "auto")


# ---------------------------------------------------------------------------
# Transactions and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """A single normalized transaction ready for ledger import.

    Attributes
    ----------
    date:
        ISO calendar date ``YYYY-MM-DD``.
    amount:
        Signed milliunits. Negative values are outflows after any
        format-specific sign inversion has been applied.
    payee:
        Non-empty display string, trimmed.
    memo:
        Possibly empty descriptive string.
    import_id:
        Deterministic identity derived from ``(date, amount, payee,
        occurrence)``; stable across re-parses of identical input.
    """

    date: str
    amount: int
    payee: str
    memo: str
    import_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "amount": self.amount,
            "payee": self.payee,
            "memo": self.memo,
            "import_id": self.import_id,
        }


@dataclass(frozen=True, slots=True)
class RowSkip:
    """Outcome for a source row that could not be normalized.

    ``warning`` is the single human-readable line reported for the row; it
    names the 1-based row (or transaction) index and the field at fault.
    """

    warning: str


RowOutcome: TypeAlias = NormalizedTransaction | RowSkip


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Aggregate of a single ingestion run.

    ``transactions`` preserves source order (relevant for display and for
    occurrence indexing). ``warnings`` holds one line per skipped or
    problematic row, preceded by an informational bank-profile line when a
    CSV profile was recognized.
    """

    format: StatementFormat
    transactions: tuple[NormalizedTransaction, ...]
    warnings: tuple[str, ...] = ()
    account_name: str | None = None

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def total_amount(self) -> int:
        """Exact milliunit sum over all transactions."""

        return sum(t.amount for t in self.transactions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "transaction_count": self.transaction_count,
            "total_amount": self.total_amount,
            "account_name": self.account_name,
            "transactions": [t.to_dict() for t in self.transactions],
            "warnings": list(self.warnings),
        }


# ---------------------------------------------------------------------------
# CSV options
# ---------------------------------------------------------------------------


class ColumnMapping(BaseModel):
    """Maps semantic fields to column names in a CSV header.

    ``date`` and ``payee`` are required. Amounts come either from a single
    ``amount`` column or from separate ``debit``/``credit`` columns; when both
    are mapped the single ``amount`` column wins.
    """

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True, str_strip_whitespace=True)

    date: str
    payee: str
    amount: str | None = None
    debit: str | None = None
    credit: str | None = None
    memo: str | None = None

    @field_validator("date", "payee")
    @classmethod
    def _required_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("column name must be non-empty")
        return v

    @field_validator("amount", "debit", "credit", "memo")
    @classmethod
    def _optional_blank_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v or None


@dataclass(frozen=True, slots=True)
class CsvParseOptions:
    """Caller-supplied overrides for CSV ingestion.

    Every field defaults to ``None`` meaning "not supplied"; explicit values
    always take precedence over a detected bank profile or inferred mapping.
    """

    column_mapping: ColumnMapping | None = None
    date_format_hint: DateFormatHint | None = None
    invert_amounts: bool | None = None


__all__ = [
    "DATE_FORMAT_HINTS",
    "ColumnMapping",
    "CsvParseOptions",
    "DateFormatHint",
    "FileFormat",
    "NormalizedTransaction",
    "ParseResult",
    "RowOutcome",
    "RowSkip",
    "StatementFormat",
]
