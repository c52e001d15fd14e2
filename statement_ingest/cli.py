"""CLI for the ``statement_ingest`` package.

Typer-based console interface exposing two commands:

- ``parse FILE``: detect, parse and print a bank export (table or JSON);
- ``reconcile``: compare source-file totals against import results.

Environment variables are loaded from a local ``.env`` using
``python-dotenv`` (never overriding variables already set) before logging is
configured. Logs go to stderr; results go to stdout.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .api import parse_bank_export
from .errors import IngestError, to_structured_error
from .logging_setup import configure_logging, get_logger
from .models import DATE_FORMAT_HINTS, ColumnMapping, DateFormatHint, ParseResult
from .money import format_amount
from .reconcile import ReconciliationReport, reconcile_import

logger = get_logger("statement_ingest.cli")

app = typer.Typer(
    name="statement-ingest",
    help="Parse bank exports (CSV, OFX, QFX) into ledger-ready transactions.",
    no_args_is_help=True,
)
console = Console()

# Rows shown in the human-readable table; --json always prints everything.
_TABLE_LIMIT = 50

_FORMAT_CHOICES = ("auto", "csv", "ofx", "qfx")


def _resolve_date_hint(option: str | None) -> DateFormatHint | None:
    """Option value, else ``STATEMENT_INGEST_DATE_FORMAT``; invalid env is ignored."""

    if option is not None:
        if option not in DATE_FORMAT_HINTS:
            raise typer.BadParameter(
                f"must be one of: {', '.join(DATE_FORMAT_HINTS)}", param_hint="--date-format"
            )
        return option  # type: ignore[return-value]
    env_val = (os.getenv("STATEMENT_INGEST_DATE_FORMAT") or "").strip()
    if env_val in DATE_FORMAT_HINTS:
        return env_val  # type: ignore[return-value]
    if env_val:
        logger.warning("ignoring invalid STATEMENT_INGEST_DATE_FORMAT=%r", env_val)
    return None


def _build_mapping(
    date_col: str | None,
    payee_col: str | None,
    amount_col: str | None,
    debit_col: str | None,
    credit_col: str | None,
    memo_col: str | None,
) -> ColumnMapping | None:
    given = (date_col, payee_col, amount_col, debit_col, credit_col, memo_col)
    if all(v is None for v in given):
        return None
    if date_col is None or payee_col is None:
        raise typer.BadParameter("--date-col and --payee-col are required for a custom mapping")
    try:
        return ColumnMapping(
            date=date_col,
            payee=payee_col,
            amount=amount_col,
            debit=debit_col,
            credit=credit_col,
            memo=memo_col,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e


def _fail(exc: BaseException) -> typer.Exit:
    err = to_structured_error(exc)
    typer.echo(err.model_dump_json(), err=True)
    return typer.Exit(1)


def _print_result(result: ParseResult) -> None:
    console.print(f"[bold]Format:[/bold] {result.format.upper()}")
    console.print(f"[bold]Transactions:[/bold] {result.transaction_count}")
    console.print(f"[bold]Total:[/bold] {format_amount(result.total_amount)}")
    if result.account_name:
        console.print(f"[bold]Account:[/bold] {result.account_name}")

    if result.warnings:
        console.print("\n[yellow]Warnings[/yellow]")
        for w in result.warnings:
            console.print(f"- {w}", markup=False)

    table = Table(title="Transactions")
    table.add_column("Date")
    table.add_column("Payee")
    table.add_column("Amount", justify="right")
    table.add_column("Import ID")
    for t in result.transactions[:_TABLE_LIMIT]:
        table.add_row(t.date, t.payee, format_amount(t.amount), t.import_id[:20] + "...")
    console.print(table)
    if result.transaction_count > _TABLE_LIMIT:
        console.print(f"...and {result.transaction_count - _TABLE_LIMIT} more transactions")


def _print_report(report: ReconciliationReport) -> None:
    status = "All checks passed" if report.all_passed else "Mismatches detected"
    console.print(f"[bold]Reconciliation:[/bold] {status}")

    accounted = report.imported_count + report.duplicate_count
    table = Table()
    table.add_column("Check")
    table.add_column("Source", justify="right")
    table.add_column("Import", justify="right")
    table.add_column("Status")
    table.add_row(
        "Transaction count",
        str(report.source_transaction_count),
        f"{report.imported_count} created + {report.duplicate_count} duplicates = {accounted}",
        "MATCH" if report.count_match else "MISMATCH",
    )
    table.add_row(
        "Total amount",
        format_amount(report.source_total_amount),
        format_amount(report.imported_total_amount),
        "MATCH" if report.amount_match else "MISMATCH",
    )
    console.print(table)
    for hint in report.hints:
        console.print(f"- {hint}", markup=False)


@app.command("parse")
def parse_cmd(
    file_path: Annotated[Path, typer.Argument(help="Path to the bank export file")],
    fmt: Annotated[
        str, typer.Option("--format", help="File format: auto, csv, ofx or qfx.")
    ] = "auto",
    date_format: Annotated[
        str | None,
        typer.Option(
            "--date-format",
            help="CSV date hint: MM/DD/YYYY, DD/MM/YYYY or auto "
            "(defaults to STATEMENT_INGEST_DATE_FORMAT).",
        ),
    ] = None,
    date_col: Annotated[str | None, typer.Option(help="CSV column holding the date.")] = None,
    payee_col: Annotated[
        str | None, typer.Option(help="CSV column holding the payee/description.")
    ] = None,
    amount_col: Annotated[str | None, typer.Option(help="CSV column holding the amount.")] = None,
    debit_col: Annotated[str | None, typer.Option(help="CSV column holding debits.")] = None,
    credit_col: Annotated[str | None, typer.Option(help="CSV column holding credits.")] = None,
    memo_col: Annotated[str | None, typer.Option(help="CSV column holding the memo.")] = None,
    invert_amounts: Annotated[
        bool | None,
        typer.Option(
            "--invert-amounts/--no-invert-amounts",
            help="Flip the sign of all CSV amounts (overrides the bank profile).",
        ),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full result as JSON.")] = False,
) -> None:
    """Parse a bank export file and print the normalized transactions."""

    if fmt not in _FORMAT_CHOICES:
        raise typer.BadParameter(
            f"must be one of: {', '.join(_FORMAT_CHOICES)}", param_hint="--format"
        )
    date_hint = _resolve_date_hint(date_format)
    mapping = _build_mapping(date_col, payee_col, amount_col, debit_col, credit_col, memo_col)

    try:
        result = asyncio.run(
            parse_bank_export(
                file_path,
                format_hint=fmt,  # type: ignore[arg-type]
                date_format_hint=date_hint,
                column_mapping=mapping,
                invert_amounts=invert_amounts,
            )
        )
    except IngestError as e:
        logger.error("parse failed: %s", e)
        raise _fail(e) from e

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_result(result)


@app.command("reconcile")
def reconcile_cmd(
    source_count: Annotated[
        int, typer.Option(help="Number of transactions in the source file.", min=0)
    ],
    source_total: Annotated[
        int, typer.Option(help="Sum of source amounts, in milliunits.")
    ],
    imported_count: Annotated[
        int, typer.Option(help="Number of transactions created by the import.", min=0)
    ],
    duplicate_count: Annotated[
        int, typer.Option(help="Number of duplicates skipped by the import.", min=0)
    ],
    imported_total: Annotated[
        int, typer.Option(help="Sum of imported amounts, in milliunits.")
    ],
    as_json: Annotated[bool, typer.Option("--json", help="Print the report as JSON.")] = False,
) -> None:
    """Compare source totals against import results; exit 1 on any mismatch."""

    report = reconcile_import(
        source_transaction_count=source_count,
        source_total_amount=source_total,
        imported_count=imported_count,
        duplicate_count=duplicate_count,
        imported_total_amount=imported_total,
    )
    if as_json:
        typer.echo(report.model_dump_json(indent=2))
    else:
        _print_report(report)
    if not report.all_passed:
        raise typer.Exit(1)


@app.callback()
def _root() -> None:
    """Load ``.env`` from the current directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
