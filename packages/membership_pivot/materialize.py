"""Execute the aggregate query and turn result rows into output records."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sqlalchemy.sql import Executable

from .accessor import SchemaAccessor
from .columns import FIXED_KEYS
from .logging_setup import get_logger
from .models import ColumnDescriptor, OutputRecord

_CENT = Decimal("0.01")
_ZERO = Decimal("0.00")

_logger = get_logger("membership_pivot.materialize")


def to_money(raw: Any) -> Decimal:
    """Coerce an aggregate value to a 2dp ``Decimal``; ``None`` becomes zero.

    Raises ``ValueError`` for values that are not numeric.
    """

    if raw is None:
        return _ZERO
    if isinstance(raw, bool):
        raise ValueError(f"not a monetary amount: {raw!r}")
    try:
        d = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValueError(f"not a monetary amount: {raw!r}") from None
    if not d.is_finite():
        raise ValueError(f"not a monetary amount: {raw!r}")
    try:
        return d.quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"amount out of range: {raw!r}") from None


def record_from_row(row: Mapping[str, Any], pivot_columns: Sequence[ColumnDescriptor]) -> OutputRecord:
    """Copy fixed fields verbatim and coerce each pivot column by explicit key."""

    record: OutputRecord = {key: row[key] for key in FIXED_KEYS}
    for col in pivot_columns:
        record[col.key] = to_money(row[col.key])
    return record


def materialize_rows(
    accessor: SchemaAccessor,
    statement: Executable,
    pivot_columns: Sequence[ColumnDescriptor],
) -> list[OutputRecord]:
    """Run ``statement`` once and build one record per result row, in result order."""

    rows = accessor.execute_query(statement)
    records = [record_from_row(row, pivot_columns) for row in rows]
    _logger.info(
        "Materialized %d membership row(s) across %d price option column(s)",
        len(records),
        len(pivot_columns),
    )
    return records


def column_totals(
    records: Sequence[OutputRecord], pivot_columns: Sequence[ColumnDescriptor]
) -> dict[str, Decimal]:
    """Sum each pivot column over ``records``. Call before display formatting."""

    totals: dict[str, Decimal] = {col.key: _ZERO for col in pivot_columns}
    for record in records:
        for col in pivot_columns:
            totals[col.key] += record[col.key]
    return totals


__all__ = [
    "column_totals",
    "materialize_rows",
    "record_from_row",
    "to_money",
]
