"""Date detection and normalization for bank exports.

Every accepted input is normalized to ``YYYY-MM-DD``. Unrecognized input
yields ``None``; the caller decides whether that is fatal for the row.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Callable

from .models import DateFormatHint


def _two_digit_year(yy: str) -> int:
    year = int(yy)
    return 1900 + year if year >= 70 else 2000 + year


def _iso(year: int | str, month: str, day: str) -> str:
    return f"{int(year):04d}-{month.zfill(2)}-{day.zfill(2)}"


# Ordered cascade; first match wins. Month-first for slashed/dashed forms.
_PATTERNS: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], str]], ...] = (
    # YYYY-M-D / YYYY-MM-DD
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), lambda m: _iso(m[1], m[2], m[3])),
    # M/D/YYYY
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), lambda m: _iso(m[3], m[1], m[2])),
    # M-D-YYYY
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), lambda m: _iso(m[3], m[1], m[2])),
    # M/D/YY
    (
        re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$"),
        lambda m: _iso(_two_digit_year(m[3]), m[1], m[2]),
    ),
    # YYYYMMDD
    (re.compile(r"^(\d{4})(\d{2})(\d{2})$"), lambda m: f"{m[1]}-{m[2]}-{m[3]}"),
)

_DAY_FIRST = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_CANONICAL = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_date(text: str, hint: DateFormatHint = "auto") -> str | None:
    """Normalize ``text`` to ``YYYY-MM-DD`` or return ``None``.

    With ``hint="DD/MM/YYYY"`` a day-first ``D/M/YYYY`` match is tried before
    the regular cascade. ``"MM/DD/YYYY"`` and ``"auto"`` use the cascade as-is.
    The result is not range-checked; see :func:`is_valid_date`.
    """

    trimmed = text.strip()

    if hint == "DD/MM/YYYY":
        m = _DAY_FIRST.match(trimmed)
        if m:
            return _iso(m[3], m[2], m[1])

    for regex, build in _PATTERNS:
        m = regex.match(trimmed)
        if m:
            return build(m)
    return None


def is_valid_date(iso: str) -> bool:
    """Return True when ``iso`` is a canonical, real calendar date.

    Uses the proleptic Gregorian calendar (``calendar.monthrange``), so
    ``2024-02-29`` is valid while ``2025-02-29`` and ``2026-02-30`` are not.
    """

    m = _CANONICAL.match(iso)
    if not m:
        return False
    year, month, day = int(m[1]), int(m[2]), int(m[3])
    if not 1 <= month <= 12 or year < 1:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


__all__ = ["is_valid_date", "parse_date"]
