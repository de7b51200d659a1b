"""Compose the single aggregate query behind the pivot report.

Shape of the generated statement::

    SELECT <membership/contact fields>,
           COALESCE(SUM(CASE WHEN civicrm_price_field_value.id = :mp_cat_<id>
                             THEN civicrm_line_item.line_total ELSE 0 END), 0)
               AS price_opt_<id>,  -- one per pivot column
           ...
    FROM civicrm_membership
    LEFT OUTER JOIN civicrm_contact ON ...
    LEFT OUTER JOIN civicrm_line_item ON entity_table = :mp_entity_table AND entity_id = ...
    LEFT OUTER JOIN civicrm_price_field_value ON ...
    WHERE <filters AND ...>
    GROUP BY civicrm_membership.id, <fixed fields>
    ORDER BY civicrm_membership.id

One wide statement keeps a build at a single round-trip no matter how many
price options exist; the projection grows with the option count, which is
configuration-sized.
"""

from __future__ import annotations

from collections.abc import Sequence

from db.models.membership import Contact, LineItem, Membership, PriceFieldValue
from sqlalchemy import ColumnElement, Select, and_, case, func, literal_column, select

from .columns import require_category_id
from .discovery import DEFAULT_ENTITY_TABLE
from .filters import Filter, compile_filters, engine_param
from .models import ColumnDescriptor

# Keyed by output field name; order must match ``columns.FIXED_COLUMNS``.
_FIXED_PROJECTIONS: dict[str, ColumnElement] = {
    "membership_id": Membership.id,
    "contact_display_name": Contact.display_name,
    "membership_type_id": Membership.membership_type_id,
    "membership_status_id": Membership.status_id,
    "membership_start_date": Membership.start_date,
    "membership_end_date": Membership.end_date,
}


def pivot_sum(column: ColumnDescriptor) -> ColumnElement:
    """``COALESCE(SUM(CASE ...), 0)`` for one pivot column, labelled with its key."""

    if not column.is_pivot:
        raise ValueError(f"column {column.key!r} is not a pivot column")
    category_id = require_category_id(column.category_id)
    matches = PriceFieldValue.id == engine_param(f"cat_{category_id}", category_id)
    amount = case((matches, LineItem.line_total), else_=literal_column("0"))
    return func.coalesce(func.sum(amount), literal_column("0")).label(column.key)


def build_pivot_query(
    pivot_columns: Sequence[ColumnDescriptor],
    *,
    entity_table: str = DEFAULT_ENTITY_TABLE,
    filters: Sequence[Filter] = (),
) -> Select:
    """Return the aggregate pivot ``Select`` for ``pivot_columns``.

    Every membership survives the joins (all outer), so a membership without
    line items yields one row whose pivot sums are all zero. ``filters`` are
    conjoined with AND. Raises ``ValueError`` for non-pivot columns or invalid
    category ids.
    """

    fixed = [expr.label(key) for key, expr in _FIXED_PROJECTIONS.items()]
    sums = [pivot_sum(col) for col in pivot_columns]

    # The category join stays outer: an inner join here would discard the
    # memberships preserved by the line item outer join. The CASE only
    # matches existing price options anyway.
    stmt = (
        select(*fixed, *sums)
        .select_from(Membership)
        .outerjoin(Contact, Contact.id == Membership.contact_id)
        .outerjoin(
            LineItem,
            and_(
                LineItem.entity_table == engine_param("entity_table", entity_table),
                LineItem.entity_id == Membership.id,
            ),
        )
        .outerjoin(PriceFieldValue, PriceFieldValue.id == LineItem.price_field_value_id)
    )

    clauses = compile_filters(filters)
    if clauses:
        stmt = stmt.where(*clauses)

    # Grouping key is the membership id; the other fixed fields depend on it
    # and are listed only because strict dialects require every
    # non-aggregated column in GROUP BY.
    return stmt.group_by(*_FIXED_PROJECTIONS.values()).order_by(Membership.id)


__all__ = [
    "build_pivot_query",
    "pivot_sum",
]
