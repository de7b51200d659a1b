"""Data types shared by the pivot report stages.

Categories and column descriptors are immutable and rebuilt on every report
build. Output records are plain dictionaries keyed by column key so that a
generic rendering/export layer can consume them with nothing but the column
descriptor list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any

# ---------------------------------------------------------------------------
# Categories (price field options)
# ---------------------------------------------------------------------------


def fallback_label(category_id: int) -> str:
    return f"Option {category_id}"


@dataclass(frozen=True, slots=True)
class Category:
    """A price field option discovered in line-item data.

    Attributes
    ----------
    id:
        Identity of the ``civicrm_price_field_value`` row.
    label:
        Human-facing label as stored; may be ``None`` or blank.
    name:
        Optional short/machine name.
    """

    id: int
    label: str | None = None
    name: str | None = None

    @property
    def display_label(self) -> str:
        """Stored label, or ``"Option {id}"`` when it is missing or blank."""

        label = (self.label or "").strip()
        return label or fallback_label(self.id)


# ---------------------------------------------------------------------------
# Column descriptors
# ---------------------------------------------------------------------------


class ColumnType(StrEnum):
    INT = "int"
    STRING = "string"
    DATE = "date"
    MONEY = "money"


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """Presentation metadata for one report column.

    ``category_id`` is set only for columns synthesized from a discovered
    category; fixed columns leave it ``None``.
    """

    key: str
    title: str
    type: ColumnType
    visible: bool = True
    export: bool = True
    category_id: int | None = None

    @property
    def is_pivot(self) -> bool:
        return self.category_id is not None


# One report row keyed by ``ColumnDescriptor.key``. Pivot values are ``Decimal``
# after materialization and ``str`` after display formatting.
type OutputRecord = dict[str, Any]


# ---------------------------------------------------------------------------
# Build result
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class PivotReport:
    """Result of one report build, handed to the presentation layer.

    Attributes
    ----------
    records:
        Output rows in membership id order.
    columns:
        Fixed column descriptors followed by the synthesized pivot columns.
    pivot_columns:
        Only the synthesized columns, in category display order.
    categories:
        Categories discovered for this build.
    totals:
        Per pivot column sum across all records, computed before formatting.
    sql:
        The aggregate statement as rendered SQL (bind parameters not inlined).
    """

    records: list[OutputRecord]
    columns: tuple[ColumnDescriptor, ...]
    pivot_columns: tuple[ColumnDescriptor, ...]
    categories: tuple[Category, ...]
    totals: dict[str, Decimal] = field(default_factory=dict)
    sql: str = ""

    @property
    def row_count(self) -> int:
        return len(self.records)

    def visible_columns(self) -> list[ColumnDescriptor]:
        return [c for c in self.columns if c.visible]

    def export_columns(self) -> list[ColumnDescriptor]:
        return [c for c in self.columns if c.export]


__all__ = [
    "Category",
    "ColumnDescriptor",
    "ColumnType",
    "OutputRecord",
    "PivotReport",
    "fallback_label",
]
