"""OFX/QFX → NormalizedTransaction ingestion.

Markup is read by :mod:`ofxparse`, which handles both OFX 1.x SGML (leaf
elements without closing tags) and OFX 2.x XML, and decodes the text with the
charset the OFX header declares. Records ofxparse rejects (bad posted date,
missing amount or FITID) land in the statement's ``discarded_entries`` and
are reported as warnings here, keyed by their position in the transaction
list.

Posted dates keep the calendar day as written: ``20260102230000[-5:EST]`` is
2026-01-02, not shifted to UTC.
"""

from __future__ import annotations

import asyncio
import re
from datetime import datetime
from io import BytesIO
from typing import Any

from ofxparse import AccountType, OfxParser

from ..dates import is_valid_date
from ..errors import ParseError
from ..import_id import OccurrenceCounter
from ..logging_setup import get_logger
from ..models import NormalizedTransaction, ParseResult, RowOutcome, RowSkip, StatementFormat
from ..money import is_amount, parse_amount

logger = get_logger("statement_ingest.ingest.ofx")

_OFX_START_RE = re.compile(r"<OFX[\s>]", re.IGNORECASE)
_HEADER_FIELD_RE = re.compile(r"^\s*(ENCODING|CHARSET)\s*:\s*(\S+)", re.IGNORECASE | re.MULTILINE)
_OFX_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})")
_TZ_SUFFIX_RE = re.compile(r"\[.*\]")

_STATEMENT_TYPES = (AccountType.Bank, AccountType.CreditCard)


def parse_ofx_date(raw: Any) -> str:
    """Return ``YYYY-MM-DD`` from an OFX datetime like ``20260115120000[-5:EST]``."""

    cleaned = _TZ_SUFFIX_RE.sub("", raw).strip() if isinstance(raw, str) else ""
    m = _OFX_DATE_RE.match(cleaned)
    if m is None:
        raise ParseError(f"Invalid OFX date format: {raw}")
    date = f"{m[1]}-{m[2]}-{m[3]}"
    if not is_valid_date(date):
        raise ParseError(f"Invalid OFX date format: {raw}")
    return date


class _PostedDateParser(OfxParser):
    """OfxParser that keeps the date as written instead of converting to UTC."""

    @classmethod
    def parseOfxDateTime(cls, ofxDateTime):
        # ofxparse turns ValueError into a discarded entry for STMTTRN dates.
        try:
            date = parse_ofx_date(ofxDateTime)
        except ParseError as exc:
            raise ValueError(str(exc)) from exc
        return datetime.strptime(date, "%Y-%m-%d")


def _encode(content: str) -> bytes:
    # Round-trip the text through the codec ofxparse will pick from the header.
    header = content[: content.find("<")] if "<" in content else content
    fields = {k.upper(): v.upper() for k, v in _HEADER_FIELD_RE.findall(header)}
    if fields.get("ENCODING") == "USASCII":
        charset = fields.get("CHARSET", "1252")
        encoding = "iso-8859-1" if charset == "8859-1" else f"cp{charset}"
    else:
        encoding = "utf-8"
    return content.encode(encoding, errors="replace")


def parse_ofx_markup(content: str):
    """Parse OFX/QFX text (SGML or XML flavor) with ofxparse.

    Raises :class:`ParseError` when no ``<OFX>`` root exists or ofxparse
    rejects the document.
    """

    if _OFX_START_RE.search(content) is None:
        raise ParseError("no <OFX> element found")
    try:
        return _PostedDateParser.parse(BytesIO(_encode(content)), fail_fast=False)
    except Exception as exc:
        # ofxparse raises assorted exception types for malformed documents.
        raise ParseError(str(exc) or type(exc).__name__) from exc


def _statement_account(ofx):
    for account in getattr(ofx, "accounts", []):
        if account.type in _STATEMENT_TYPES and account.statement is not None:
            return account
    return None


def _position_of(entry: dict[str, Any]) -> int:
    return len(entry["content"].find_previous_siblings("stmttrn")) + 1


def _discarded_warning(entry: dict[str, Any], position: int) -> str:
    amount_tag = entry["content"].find("trnamt")
    if amount_tag is None or not amount_tag.get_text(strip=True):
        return f"Transaction {position}: missing amount, skipping"
    return f"Transaction {position}: {entry['error']}, skipping"


def _normalize_transaction(
    txn, position: int, occurrences: OccurrenceCounter, warnings: list[str]
) -> RowOutcome:
    date = txn.date.strftime("%Y-%m-%d")

    amount_text = format(txn.amount, "f")
    if not is_amount(amount_text):
        return RowSkip(f'Transaction {position}: could not parse amount "{amount_text}", skipping')
    amount = parse_amount(amount_text)

    memo = (txn.memo or "").strip()
    payee = (txn.payee or "").strip() or memo
    if not payee:
        warnings.append(f"Transaction {position}: missing payee name, using FITID")
        payee = (txn.id or "").strip() or f"Unknown-{position}"

    return NormalizedTransaction(
        date=date,
        amount=amount,
        payee=payee,
        memo=memo,
        import_id=occurrences.import_id_for(date, amount, payee),
    )


async def parse_ofx_content(content: str, format: StatementFormat = "ofx") -> ParseResult:
    """Parse OFX/QFX text into a :class:`ParseResult`.

    The markup parse runs in a worker thread; that await is the only
    suspension point. Per-transaction problems become warnings. The call only
    fails for structural problems.

    Raises
    ------
    ParseError
        Empty input, unparseable markup, or no bank/credit-card statement.
    """

    if not content.strip():
        raise ParseError("OFX file is empty")

    try:
        ofx = await asyncio.to_thread(parse_ofx_markup, content)
    except ParseError as exc:
        raise ParseError(f"Failed to parse OFX file: {exc}", detail=str(exc)) from exc

    account = _statement_account(ofx)
    if account is None:
        raise ParseError("OFX file does not contain bank or credit card statement data")
    account_name = (account.account_id or "").strip() or None
    statement = account.statement

    # Parsed and discarded records come back in separate lists; restore
    # document order so warnings name the right position.
    skipped = {_position_of(entry): entry for entry in statement.discarded_entries}
    parsed = iter(statement.transactions)
    total = len(statement.transactions) + len(skipped)

    occurrences = OccurrenceCounter()
    transactions: list[NormalizedTransaction] = []
    warnings: list[str] = []
    for position in range(1, total + 1):
        if position in skipped:
            warnings.append(_discarded_warning(skipped[position], position))
            continue
        txn = next(parsed)
        try:
            outcome = _normalize_transaction(txn, position, occurrences, warnings)
        except Exception as exc:
            outcome = RowSkip(f"Transaction {position}: {exc}, skipping")
        if isinstance(outcome, RowSkip):
            warnings.append(outcome.warning)
        else:
            transactions.append(outcome)

    logger.debug(
        "parsed %s: %d records -> %d transactions, account=%s",
        format,
        total,
        len(transactions),
        account_name,
    )
    return ParseResult(
        format="qfx" if format == "qfx" else "ofx",
        transactions=tuple(transactions),
        warnings=tuple(warnings),
        account_name=account_name,
    )


__all__ = ["parse_ofx_content", "parse_ofx_date", "parse_ofx_markup"]
