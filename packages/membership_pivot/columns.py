"""Column synthesis: one money column per discovered price option.

Pivot column keys are built from the category's integer identity, never from
its label, so labels containing quotes, spaces or punctuation can never leak
into SQL identifiers or presentation-layer field names.
"""

from __future__ import annotations

import operator
from collections.abc import Iterable, Sequence

from .models import Category, ColumnDescriptor, ColumnType

PIVOT_COLUMN_PREFIX = "price_opt_"


# Fixed columns in output order. Only the membership id and contact name are
# shown by default; the rest stay available to exports.
FIXED_COLUMNS: tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor("membership_id", "Membership ID", ColumnType.INT),
    ColumnDescriptor("contact_display_name", "Contact", ColumnType.STRING),
    ColumnDescriptor("membership_type_id", "Membership Type", ColumnType.INT, visible=False),
    ColumnDescriptor("membership_status_id", "Membership Status", ColumnType.INT, visible=False),
    ColumnDescriptor("membership_start_date", "Start Date", ColumnType.DATE, visible=False),
    ColumnDescriptor("membership_end_date", "End Date", ColumnType.DATE, visible=False),
)

FIXED_KEYS: tuple[str, ...] = tuple(c.key for c in FIXED_COLUMNS)


def require_category_id(value: object) -> int:
    """Return ``value`` as a positive ``int`` or raise ``ValueError``.

    Booleans are rejected even though they are ``int`` subclasses; so are
    floats and numeric strings.
    """

    if isinstance(value, bool):
        raise ValueError(f"category id must be an integer, got {value!r}")
    try:
        ident = operator.index(value)  # type: ignore[arg-type]
    except TypeError:
        raise ValueError(f"category id must be an integer, got {value!r}") from None
    if ident <= 0:
        raise ValueError(f"category id must be positive, got {ident}")
    return ident


def pivot_key(category_id: int) -> str:
    return f"{PIVOT_COLUMN_PREFIX}{require_category_id(category_id)}"


def synthesize_columns(categories: Iterable[Category]) -> tuple[ColumnDescriptor, ...]:
    """Map each category to a visible, exportable money column.

    Output order follows ``categories``. Raises ``ValueError`` on duplicate or
    invalid category ids.
    """

    columns: list[ColumnDescriptor] = []
    seen: set[int] = set()
    for cat in categories:
        ident = require_category_id(cat.id)
        if ident in seen:
            raise ValueError(f"duplicate category id {ident} in discovered categories")
        seen.add(ident)
        columns.append(
            ColumnDescriptor(
                key=pivot_key(ident),
                title=cat.display_label,
                type=ColumnType.MONEY,
                visible=True,
                export=True,
                category_id=ident,
            )
        )
    return tuple(columns)


def report_columns(pivot_columns: Sequence[ColumnDescriptor]) -> tuple[ColumnDescriptor, ...]:
    """Full descriptor list: fixed columns, then pivot columns."""
    return FIXED_COLUMNS + tuple(pivot_columns)


__all__ = [
    "FIXED_COLUMNS",
    "FIXED_KEYS",
    "PIVOT_COLUMN_PREFIX",
    "pivot_key",
    "report_columns",
    "require_category_id",
    "synthesize_columns",
]
