import asyncio
import shutil

import pytest

from statement_ingest import (
    ColumnMapping,
    FileAccessError,
    ParseError,
    UnsupportedFormatError,
    parse_bank_export,
    parse_content,
)


def _run(coro):
    return asyncio.run(coro)


def test_parse_bank_export_csv(fixture_path):
    result = _run(parse_bank_export(fixture_path("csv", "bofa-checking.csv")))

    assert result.format == "csv"
    assert result.transaction_count == 5
    assert result.warnings[0] == "Detected bank format: Bank of America"


def test_parse_bank_export_ofx_and_qfx(fixture_path):
    ofx = _run(parse_bank_export(fixture_path("ofx", "checking.ofx")))
    qfx = _run(parse_bank_export(fixture_path("ofx", "creditcard.qfx")))

    assert (ofx.format, ofx.transaction_count, ofx.account_name) == ("ofx", 5, "000111222333")
    assert (qfx.format, qfx.transaction_count) == ("qfx", 1)


def test_content_detection_without_extension(fixture_path, tmp_path):
    copy = tmp_path / "download"
    shutil.copy(fixture_path("ofx", "checking.ofx"), copy)

    result = _run(parse_bank_export(copy))
    assert result.format == "ofx"
    assert result.transaction_count == 5


def test_format_hint_skips_detection(fixture_path, tmp_path):
    copy = tmp_path / "export.txt"
    shutil.copy(fixture_path("csv", "citi.csv"), copy)

    result = _run(parse_bank_export(copy, format_hint="csv"))
    assert result.format == "csv"
    assert result.transaction_count == 3

    # "auto" behaves like no hint.
    result = _run(parse_bank_export(copy, format_hint="auto"))
    assert result.format == "csv"


def test_csv_overrides_are_forwarded(tmp_path):
    p = tmp_path / "custom.csv"
    p.write_text("Booked,Counterparty,Value\n05/01/2026,Boulangerie,3.20\n")
    mapping = ColumnMapping(date="Booked", payee="Counterparty", amount="Value")

    result = _run(
        parse_bank_export(
            p,
            date_format_hint="DD/MM/YYYY",
            column_mapping=mapping,
            invert_amounts=True,
        )
    )
    (txn,) = result.transactions
    assert (txn.date, txn.payee, txn.amount) == ("2026-01-05", "Boulangerie", -3200)


def test_missing_file(tmp_path):
    with pytest.raises(FileAccessError):
        _run(parse_bank_export(tmp_path / "missing.csv"))


def test_missing_file_with_format_hint(tmp_path):
    with pytest.raises(FileAccessError):
        _run(parse_bank_export(tmp_path / "missing.ofx", format_hint="ofx"))


def test_unknown_format(tmp_path):
    p = tmp_path / "statement.pdf"
    p.write_text("%PDF-1.7 not a bank export\n")

    with pytest.raises(UnsupportedFormatError) as ei:
        _run(parse_bank_export(p))
    assert str(p) in str(ei.value)


def test_fatal_parse_error_propagates(tmp_path):
    p = tmp_path / "empty.csv"
    p.write_text("")
    with pytest.raises(ParseError, match="CSV file is empty"):
        _run(parse_bank_export(p))


def test_parse_content_dispatch(fixture_path):
    text = fixture_path("ofx", "creditcard.qfx").read_text(encoding="utf-8")
    assert _run(parse_content(text, "qfx")).format == "qfx"
    assert _run(parse_content(text, "ofx")).format == "ofx"

    with pytest.raises(UnsupportedFormatError):
        _run(parse_content(text, "unknown"))


def test_completion_is_logged(fixture_path, caplog):
    caplog.set_level("INFO", logger="statement_ingest")
    _run(parse_bank_export(fixture_path("csv", "citi.csv")))

    messages = [r.getMessage() for r in caplog.records if r.name == "statement_ingest.api"]
    assert len(messages) == 1
    assert messages[0].startswith("parse_bank_export completed | path=")
    assert "transactions=3" in messages[0]
    assert "total='246810 ($246.81)'" in messages[0]
