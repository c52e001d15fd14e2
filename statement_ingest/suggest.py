"""Best-effort category suggestion by payee lookup against ledger history.

Only exact and substring matching on normalized payee names is attempted; no
fuzzy scoring. History records are plain mappings as returned by a ledger
client (``payee_name``, ``category_id``, ``category_name``, ``date``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from .models import NormalizedTransaction

# Seen this many times in history -> "high" confidence.
HIGH_CONFIDENCE_COUNT = 3


@dataclass(frozen=True, slots=True)
class PayeeCategory:
    category_id: str
    category_name: str
    last_date: str
    count: int


@dataclass(frozen=True, slots=True)
class CategorySuggestion:
    category_id: str
    category_name: str
    confidence: Literal["high", "medium"]


def _norm(payee: str) -> str:
    return payee.strip().lower()


def build_payee_index(history: Iterable[Mapping[str, Any]]) -> dict[str, PayeeCategory]:
    """Map normalized payee names to their most recent category.

    Records without payee or category are ignored. ``count`` accumulates every
    categorized occurrence of the payee; the category follows the latest
    ``date`` (ISO strings compare chronologically).
    """

    index: dict[str, PayeeCategory] = {}
    for record in history:
        payee = record.get("payee_name")
        category_id = record.get("category_id")
        category_name = record.get("category_name")
        if not payee or not category_id or not category_name:
            continue
        key = _norm(str(payee))
        date = str(record.get("date") or "")
        existing = index.get(key)
        count = (existing.count if existing else 0) + 1
        if existing is None or date > existing.last_date:
            index[key] = PayeeCategory(str(category_id), str(category_name), date, count)
        else:
            index[key] = PayeeCategory(
                existing.category_id, existing.category_name, existing.last_date, count
            )
    return index


def suggest_category(
    payee: str, index: Mapping[str, PayeeCategory]
) -> CategorySuggestion | None:
    """Suggest a category for ``payee`` (exact match, then substring)."""

    normalized = _norm(payee)
    if not normalized:
        return None

    match = index.get(normalized)
    if match is None:
        for key, candidate in index.items():
            if key in normalized or normalized in key:
                match = candidate
                break
    if match is None:
        return None

    confidence: Literal["high", "medium"] = (
        "high" if match.count >= HIGH_CONFIDENCE_COUNT else "medium"
    )
    return CategorySuggestion(match.category_id, match.category_name, confidence)


def suggest_categories(
    transactions: Iterable[NormalizedTransaction],
    history: Iterable[Mapping[str, Any]],
) -> list[tuple[NormalizedTransaction, CategorySuggestion | None]]:
    """Pair each transaction with its suggestion, preserving input order."""

    index = build_payee_index(history)
    return [(t, suggest_category(t.payee, index)) for t in transactions]


__all__ = [
    "HIGH_CONFIDENCE_COUNT",
    "CategorySuggestion",
    "PayeeCategory",
    "build_payee_index",
    "suggest_categories",
    "suggest_category",
]
