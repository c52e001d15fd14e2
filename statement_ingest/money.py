"""Milliunit conversion helpers.

Ledger amounts are integers in milliunits (1 currency unit = 1000
milliunits). Conversion from bank text is done with string and integer
arithmetic only; ``float`` and ``Decimal`` rounding never enter the path, so
``"45.6789"`` becomes ``45678`` (truncated), never ``45679``.
"""

from __future__ import annotations

import re
import unicodedata

_SIGN_RE = re.compile(r"[()\-]")
_AMOUNT_RE = re.compile(r"[-+]?\(?-?[0-9]*(?:\.[0-9]*)?\)?")
_DIGIT_RE = re.compile(r"[0-9]")


def _strip_decoration(text: str) -> str:
    # Currency symbols ($, €, £, ¥, ...), thousands separators and whitespace.
    return "".join(
        ch for ch in text if ch != "," and not ch.isspace() and unicodedata.category(ch) != "Sc"
    )


def is_amount(text: str | None) -> bool:
    """Return True when ``text`` is a decimal amount :func:`parse_amount` accepts.

    Currency symbols, thousands separators and whitespace are ignored. What
    remains must be an optionally signed or parenthesized number with at least
    one ASCII digit, so ``"12.50 CR"`` or ``"N/A"`` are rejected.
    """

    if text is None:
        return False
    cleaned = _strip_decoration(text)
    return _AMOUNT_RE.fullmatch(cleaned) is not None and _DIGIT_RE.search(cleaned) is not None


def parse_amount(text: str) -> int:
    """Convert a decimal currency string into signed milliunits.

    Accepts surrounding whitespace, currency symbols, thousands separators, a
    leading minus, or bank-style parentheses (``"(123.45)"``) for negatives.
    The fractional part is right-padded to three digits or truncated beyond
    three. The function does not validate; callers guard with
    :func:`is_amount` first.
    """

    cleaned = _strip_decoration(text)
    negative = cleaned.startswith("-") or cleaned.startswith("(")
    unsigned = _SIGN_RE.sub("", cleaned).lstrip("+")

    whole_str, _, frac_str = unsigned.partition(".")
    whole = int(whole_str) if whole_str.isascii() and whole_str.isdigit() else 0
    frac_digits = frac_str.ljust(3, "0")[:3]
    frac = int(frac_digits) if frac_digits.isascii() and frac_digits.isdigit() else 0

    milliunits = whole * 1000 + frac
    return -milliunits if negative else milliunits


def format_amount(milliunits: int) -> str:
    """Render milliunits for display, e.g. ``-1234560`` -> ``"-$1,234.56"``.

    The third milliunit digit is dropped, not rounded; display only.
    """

    sign = "-" if milliunits < 0 else ""
    whole, frac = divmod(abs(milliunits), 1000)
    return f"{sign}${whole:,}.{frac // 10:02d}"


def describe_amount(milliunits: int) -> str:
    """Return ``"<milliunits> (<display>)"`` for logs and summaries."""

    return f"{milliunits} ({format_amount(milliunits)})"


__all__ = ["describe_amount", "format_amount", "is_amount", "parse_amount"]
