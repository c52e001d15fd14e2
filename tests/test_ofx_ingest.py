import asyncio
import textwrap

import pytest

from statement_ingest.errors import ParseError
from statement_ingest.import_id import generate_import_id
from statement_ingest.ingest import ofx_ingest
from statement_ingest.ingest.ofx_ingest import parse_ofx_content, parse_ofx_date


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


def _parse(content, fmt="ofx"):
    return asyncio.run(parse_ofx_content(content, fmt))


def _bank_statement(transactions: str, header: str = "") -> str:
    return _dedent(
        """
        OFXHEADER:100
        DATA:OFXSGML
        {header}
        <OFX>
        <BANKMSGSRSV1><STMTTRNRS><STMTRS>
        <BANKACCTFROM><ACCTID>987654</BANKACCTFROM>
        <BANKTRANLIST>
        {transactions}
        </BANKTRANLIST>
        </STMTRS></STMTTRNRS></BANKMSGSRSV1>
        </OFX>
        """
    ).format(header=header, transactions=transactions)


def test_sgml_checking_statement(fixture_path):
    result = _parse(fixture_path("ofx", "checking.ofx").read_text())

    assert result.format == "ofx"
    assert result.account_name == "000111222333"
    assert [(t.date, t.amount, t.payee, t.memo) for t in result.transactions] == [
        ("2026-01-02", 3500000, "DIRECT DEPOSIT EMPLOYER", "PAYROLL"),
        ("2026-01-05", -4850, "STARBUCKS", ""),
        ("2026-01-05", -4850, "STARBUCKS", ""),
        ("2026-01-08", -25500, "POS PURCHASE HARDWARE STORE", "POS PURCHASE HARDWARE STORE"),
        ("2026-01-10", -2000, "FEE-20260110", ""),
    ]
    assert result.warnings == (
        "Transaction 4: Invalid OFX date format: BADDATE, skipping",
        "Transaction 6: missing payee name, using FITID",
    )
    assert result.total_amount == 3462800


def test_reparse_is_deterministic(fixture_path):
    content = fixture_path("ofx", "checking.ofx").read_text()

    first = _parse(content)
    second = _parse(content)

    assert [t.import_id for t in first.transactions] == [t.import_id for t in second.transactions]
    assert first == second


def test_duplicate_statement_lines_get_occurrence_indices(fixture_path):
    result = _parse(fixture_path("ofx", "checking.ofx").read_text())

    starbucks = [t.import_id for t in result.transactions if t.payee == "STARBUCKS"]
    assert starbucks == [
        generate_import_id("2026-01-05", -4850, "STARBUCKS", 0),
        generate_import_id("2026-01-05", -4850, "STARBUCKS", 1),
    ]


def test_xml_credit_card_statement(fixture_path):
    result = _parse(fixture_path("ofx", "creditcard.qfx").read_text(encoding="utf-8"), "qfx")

    assert result.format == "qfx"
    assert result.account_name == "4111222233334444"
    (txn,) = result.transactions
    assert txn.date == "2026-01-15"
    # Truncated to three decimals, not rounded.
    assert txn.amount == -1234567
    assert txn.payee == "Café Lumière"
    assert txn.memo == "Dinner"
    assert result.warnings == ()


def test_single_transaction():
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><TRNTYPE>DEBIT<DTPOSTED>20260201<TRNAMT>-9.99<FITID>1<NAME>Only One</STMTTRN>
            """
        )
    )
    assert [t.payee for t in result.transactions] == ["Only One"]
    assert result.account_name == "987654"


def test_posted_date_keeps_calendar_day():
    # 23:00 EST is already the next day in UTC.
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260102230000[-5:EST]<TRNAMT>-9.99<FITID>1<NAME>Late</STMTTRN>
            """
        )
    )
    assert result.transactions[0].date == "2026-01-02"


def test_declared_charset_is_honored():
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260201<TRNAMT>-3.20<FITID>1<NAME>Café</STMTTRN>
            """,
            header="ENCODING:USASCII\nCHARSET:1252\n",
        )
    )
    assert result.transactions[0].payee == "Café"


def test_no_transactions_is_not_an_error():
    result = _parse(_bank_statement(""))
    assert result.transactions == ()
    assert result.warnings == ()


def test_missing_amount_is_skipped():
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260201<FITID>1<NAME>No Amount</STMTTRN>
            <STMTTRN><DTPOSTED>20260202<TRNAMT>1.00<FITID>2<NAME>Has Amount</STMTTRN>
            """
        )
    )
    assert [t.payee for t in result.transactions] == ["Has Amount"]
    assert result.warnings == ("Transaction 1: missing amount, skipping",)


def test_impossible_posted_date_is_skipped():
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260201<TRNAMT>-1.00<FITID>1<NAME>Real</STMTTRN>
            <STMTTRN><DTPOSTED>20260230<TRNAMT>-1.00<FITID>2<NAME>Ghost</STMTTRN>
            """
        )
    )
    assert [t.payee for t in result.transactions] == ["Real"]
    assert result.warnings == ("Transaction 2: Invalid OFX date format: 20260230, skipping",)


def test_missing_fitid_is_skipped():
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260201<TRNAMT>-1.00<NAME>No Id</STMTTRN>
            """
        )
    )
    assert result.transactions == ()
    (warning,) = result.warnings
    assert warning.startswith("Transaction 1: ")
    assert warning.endswith(", skipping")


def test_missing_payee_uses_fitid():
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260201<TRNAMT>-1.00<FITID>X-1</STMTTRN>
            """
        )
    )
    assert result.transactions[0].payee == "X-1"
    assert result.warnings == ("Transaction 1: missing payee name, using FITID",)


def test_missing_name_falls_back_to_memo():
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260201<TRNAMT>-1.00<FITID>1<MEMO>  Check 1042  </STMTTRN>
            """
        )
    )
    assert result.transactions[0].payee == "Check 1042"
    assert result.transactions[0].memo == "Check 1042"


def test_unexpected_row_error_becomes_warning(monkeypatch):
    def boom(text):
        raise RuntimeError("amount codec exploded")

    monkeypatch.setattr(ofx_ingest, "parse_amount", boom)
    result = _parse(
        _bank_statement(
            """
            <STMTTRN><DTPOSTED>20260201<TRNAMT>-1.00<FITID>1<NAME>A</STMTTRN>
            <STMTTRN><DTPOSTED>20260202<TRNAMT>-2.00<FITID>2<NAME>B</STMTTRN>
            """
        )
    )
    assert result.transactions == ()
    assert result.warnings == (
        "Transaction 1: amount codec exploded, skipping",
        "Transaction 2: amount codec exploded, skipping",
    )


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("", "OFX file is empty"),
        ("  \n ", "OFX file is empty"),
        (
            "OFXHEADER:100\n<OFX><SIGNONMSGSRSV1></SIGNONMSGSRSV1></OFX>",
            "OFX file does not contain bank or credit card statement data",
        ),
    ],
)
def test_structural_errors(content, message):
    with pytest.raises(ParseError) as ei:
        _parse(content)
    assert str(ei.value) == message


def test_document_without_ofx_root():
    with pytest.raises(ParseError) as ei:
        _parse("this is not an ofx document")
    assert str(ei.value) == "Failed to parse OFX file: no <OFX> element found"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("20260115", "2026-01-15"),
        ("20260115120000", "2026-01-15"),
        ("20260115120000.000[-5:EST]", "2026-01-15"),
        ("[0:GMT]20260115", "2026-01-15"),
    ],
)
def test_parse_ofx_date(raw, expected):
    assert parse_ofx_date(raw) == expected


@pytest.mark.parametrize("raw", ["", "2026-01-15", "202601", None, "20261301"])
def test_parse_ofx_date_rejects(raw):
    with pytest.raises(ParseError):
        parse_ofx_date(raw)
