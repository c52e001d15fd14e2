"""Deterministic import identities for ledger deduplication.

The ledger discards any submitted transaction whose ``import_id`` it has
already seen, so the id must be a pure function of the transaction content.
Rows that share ``(date, amount, payee)`` within one file (two identical
coffees on the same day) are told apart by a zero-based occurrence index.
"""

from __future__ import annotations

import hashlib
from collections import Counter

IMPORT_ID_PREFIX = "YNAB-MCP:"


def generate_import_id(date: str, amount: int, payee: str, occurrence: int) -> str:
    """Return ``IMPORT_ID_PREFIX`` + first 16 hex chars of a SHA-256 digest.

    The digest input is ``"{date}:{amount}:{payee}:{occurrence}"`` encoded as
    UTF-8. Identical inputs yield identical ids across processes and runs.
    """

    payload = f"{date}:{amount}:{payee}:{occurrence}"
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
    return f"{IMPORT_ID_PREFIX}{digest}"


class OccurrenceCounter:
    """Per-run counter of ``(date, amount, payee)`` triples.

    Allocate one per ingestion call; rows must be fed in source order so
    duplicate rows receive indices 0, 1, ... in file order.
    """

    __slots__ = ("_seen",)

    def __init__(self) -> None:
        self._seen: Counter[tuple[str, int, str]] = Counter()

    def next(self, date: str, amount: int, payee: str) -> int:
        key = (date, amount, payee)
        occurrence = self._seen[key]
        self._seen[key] = occurrence + 1
        return occurrence

    def import_id_for(self, date: str, amount: int, payee: str) -> str:
        """Consume the next occurrence for the triple and derive its id."""

        return generate_import_id(date, amount, payee, self.next(date, amount, payee))


__all__ = ["IMPORT_ID_PREFIX", "OccurrenceCounter", "generate_import_id"]
