from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from membership_pivot.columns import synthesize_columns
from membership_pivot.materialize import (
    column_totals,
    materialize_rows,
    record_from_row,
    to_money,
)
from membership_pivot.models import Category


class _FakeAccessor:
    """Returns canned rows and records every statement it was given."""

    def __init__(self, rows):
        self.rows = rows
        self.calls: list = []

    def execute_query(self, query, parameters=None):
        self.calls.append(query)
        return self.rows


def _row(mid: int, **pivots):
    base = {
        "membership_id": mid,
        "contact_display_name": f"Member {mid}",
        "membership_type_id": 1,
        "membership_status_id": 2,
        "membership_start_date": date(2025, 1, 1),
        "membership_end_date": None,
    }
    base.update(pivots)
    return base


COLS = synthesize_columns([Category(1, "Gold"), Category(2, "Silver")])


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, Decimal("0.00")),
        (0, Decimal("0.00")),
        (100, Decimal("100.00")),
        (0.1 + 0.2, Decimal("0.30")),
        ("12.345", Decimal("12.35")),
        (Decimal("-2.005"), Decimal("-2.01")),
    ],
)
def test_to_money(raw, expected):
    assert to_money(raw) == expected


@pytest.mark.parametrize(
    "raw", [True, "abc", float("nan"), Decimal("Infinity"), Decimal("1E+40"), object()]
)
def test_to_money_rejects_non_numeric(raw):
    with pytest.raises(ValueError):
        to_money(raw)


def test_record_copies_fixed_fields_and_coerces_pivots_by_key():
    # Column order in the row differs from descriptor order on purpose.
    row = _row(7, price_opt_2="5", price_opt_1=None)

    record = record_from_row(row, COLS)

    assert record["membership_id"] == 7
    assert record["membership_start_date"] == date(2025, 1, 1)
    assert record["membership_end_date"] is None
    assert record["price_opt_1"] == Decimal("0.00")
    assert record["price_opt_2"] == Decimal("5.00")


def test_missing_pivot_key_is_an_error():
    with pytest.raises(KeyError):
        record_from_row(_row(1, price_opt_1=1), COLS)


def test_materialize_runs_statement_once_and_keeps_order():
    rows = [_row(3, price_opt_1=1, price_opt_2=0), _row(1, price_opt_1=0, price_opt_2=2)]
    accessor = _FakeAccessor(rows)

    records = materialize_rows(accessor, "SELECT 1", COLS)

    assert accessor.calls == ["SELECT 1"]
    assert [r["membership_id"] for r in records] == [3, 1]


def test_column_totals():
    records = [
        record_from_row(_row(1, price_opt_1="10.10", price_opt_2=None), COLS),
        record_from_row(_row(2, price_opt_1="0.90", price_opt_2="3"), COLS),
    ]

    assert column_totals(records, COLS) == {
        "price_opt_1": Decimal("11.00"),
        "price_opt_2": Decimal("3.00"),
    }
    assert column_totals([], COLS) == {"price_opt_1": Decimal("0"), "price_opt_2": Decimal("0")}
