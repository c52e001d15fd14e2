"""Known bank CSV column layouts and best-effort column inference.

Profiles are an ordered rule list evaluated first-match-wins against the
exact header names of a CSV export. Each profile carries a column mapping, an
optional date hint, and whether the bank's amount sign must be inverted.

Ordering matters: Bank of America, Wells Fargo and American Express exports
share the ``Date, Description, Amount`` header set, so the Bank of America
rule matches all three and the later two are never reached. They stay in the
table so a future, more specific predicate can be added without reordering.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import ParseError
from ..models import ColumnMapping, DateFormatHint


@dataclass(frozen=True, slots=True)
class BankProfile:
    """Statically known column layout for one bank's CSV export.

    The profile matches when every name in ``required`` is a header and, if
    ``any_of`` is non-empty, at least one of those names is a header too.
    """

    name: str
    required: frozenset[str]
    mapping: ColumnMapping
    any_of: frozenset[str] = frozenset()
    date_hint: DateFormatHint | None = None
    invert_amounts: bool = False

    def matches(self, headers: Sequence[str]) -> bool:
        present = set(headers)
        if not self.required <= present:
            return False
        return not self.any_of or bool(self.any_of & present)


KNOWN_PROFILES: tuple[BankProfile, ...] = (
    BankProfile(
        name="Chase Credit Card",
        required=frozenset({"Transaction Date", "Post Date", "Description", "Amount"}),
        mapping=ColumnMapping(
            date="Transaction Date", amount="Amount", payee="Description", memo="Memo"
        ),
        # Chase card exports report charges with the opposite sign.
        invert_amounts=True,
    ),
    BankProfile(
        name="Chase Checking",
        required=frozenset({"Posting Date", "Description", "Amount"}),
        mapping=ColumnMapping(date="Posting Date", amount="Amount", payee="Description"),
    ),
    BankProfile(
        name="Bank of America",
        required=frozenset({"Date", "Description", "Amount"}),
        mapping=ColumnMapping(date="Date", amount="Amount", payee="Description"),
    ),
    BankProfile(
        name="Wells Fargo",
        required=frozenset({"Date", "Amount", "Description"}),
        mapping=ColumnMapping(date="Date", amount="Amount", payee="Description"),
    ),
    BankProfile(
        name="American Express",
        required=frozenset({"Date", "Description", "Amount"}),
        mapping=ColumnMapping(date="Date", amount="Amount", payee="Description"),
    ),
    BankProfile(
        name="Citi",
        required=frozenset({"Date", "Description"}),
        any_of=frozenset({"Debit", "Credit"}),
        mapping=ColumnMapping(date="Date", debit="Debit", credit="Credit", payee="Description"),
    ),
)


def detect_profile(headers: Sequence[str]) -> BankProfile | None:
    """Return the first profile whose predicate accepts ``headers``."""

    for profile in KNOWN_PROFILES:
        if profile.matches(headers):
            return profile
    return None


def _find(headers: Sequence[str], lowered: Sequence[str], *, exact: str | None = None,
          contains: str | None = None) -> str | None:
    if exact is not None:
        for original, low in zip(headers, lowered, strict=True):
            if low == exact:
                return original
    if contains is not None:
        for original, low in zip(headers, lowered, strict=True):
            if contains in low:
                return original
    return None


def infer_mapping(headers: Sequence[str]) -> ColumnMapping:
    """Infer a column mapping from header names.

    Matching is case-insensitive on trimmed names; for each field an exact
    match beats a substring match. The date column falls back to the first
    header. Raises :class:`ParseError` when no date or payee column exists.
    """

    lowered = [h.lower().strip() for h in headers]

    date_col = _find(headers, lowered, exact="date", contains="date") or (
        headers[0] if headers else None
    )
    amount_col = _find(headers, lowered, exact="amount", contains="amount")
    payee_col = (
        _find(headers, lowered, exact="description", contains="description")
        or _find(headers, lowered, exact="payee", contains="payee")
        or _find(headers, lowered, contains="memo")
    )
    memo_col = _find(headers, lowered, exact="memo", contains="memo")

    if not date_col or not payee_col:
        raise ParseError(
            f"Could not auto-detect CSV columns. Found headers: {', '.join(headers)}. "
            "Expected at least a date and description/payee column."
        )

    return ColumnMapping(date=date_col, amount=amount_col, payee=payee_col, memo=memo_col)


__all__ = ["KNOWN_PROFILES", "BankProfile", "detect_profile", "infer_mapping"]
