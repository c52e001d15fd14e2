"""Import reconciliation: compare source-file aggregates with import results.

Two independent checks:

- count: ``source_transaction_count == imported_count + duplicate_count``;
- amount: ``source_total_amount == imported_total_amount`` (exact milliunit
  equality, no tolerance).

The function is stateless and only classifies numbers the caller computed.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, computed_field

from .money import format_amount


class ReconciliationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_transaction_count: int
    source_total_amount: int
    imported_count: int
    duplicate_count: int
    imported_total_amount: int

    count_match: bool
    amount_match: bool
    count_difference: int
    """``source - (imported + duplicates)``; positive means rows went missing."""
    amount_difference: int
    """``source_total - imported_total`` in milliunits."""
    hints: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_passed(self) -> bool:
        return self.count_match and self.amount_match


def reconcile_import(
    source_transaction_count: int,
    source_total_amount: int,
    imported_count: int,
    duplicate_count: int,
    imported_total_amount: int,
) -> ReconciliationReport:
    """Check an import against the parsed source file.

    Examples
    --------
    ``reconcile_import(10, 100000, 8, 2, 99000)`` has a matching count and an
    amount mismatch with ``amount_difference == 1000``.
    """

    accounted = imported_count + duplicate_count
    count_difference = source_transaction_count - accounted
    amount_difference = source_total_amount - imported_total_amount

    hints: list[str] = []
    if count_difference != 0:
        direction = "missing from import" if count_difference > 0 else "extra in import"
        hints.append(
            f"{abs(count_difference)} transaction(s) {direction}. "
            "Check for skipped rows (bad dates, missing amounts) in the parse step."
        )
    if amount_difference != 0:
        hints.append(
            f"Difference of {format_amount(amount_difference)}. "
            "This may indicate a parsing error or amount sign issue."
        )

    return ReconciliationReport(
        source_transaction_count=source_transaction_count,
        source_total_amount=source_total_amount,
        imported_count=imported_count,
        duplicate_count=duplicate_count,
        imported_total_amount=imported_total_amount,
        count_match=count_difference == 0,
        amount_match=amount_difference == 0,
        count_difference=count_difference,
        amount_difference=amount_difference,
        hints=tuple(hints),
    )


__all__ = ["ReconciliationReport", "reconcile_import"]
