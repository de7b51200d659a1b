"""Discover the price options that appear on line items of one entity type."""

from __future__ import annotations

from collections.abc import Sequence

from db.models.membership import Contact, LineItem, Membership, PriceFieldValue
from sqlalchemy import Select, select

from .accessor import SchemaAccessor
from .columns import require_category_id
from .filters import Filter, compile_filters, engine_param
from .logging_setup import get_logger
from .models import Category

DEFAULT_ENTITY_TABLE = Membership.__tablename__

_logger = get_logger("membership_pivot.discovery")


def build_discovery_query(
    *,
    entity_table: str = DEFAULT_ENTITY_TABLE,
    filters: Sequence[Filter] = (),
    scope_to_filters: bool = False,
) -> Select:
    """Return the DISTINCT price option query for ``entity_table``.

    When ``scope_to_filters`` is true the membership and contact tables are
    joined in and ``filters`` applied, so only options used by memberships that
    survive the report filters are returned. Otherwise ``filters`` is ignored.
    """

    stmt = (
        select(PriceFieldValue.id, PriceFieldValue.label, PriceFieldValue.name)
        .distinct()
        .join(LineItem, LineItem.price_field_value_id == PriceFieldValue.id)
        .where(LineItem.entity_table == engine_param("entity_table", entity_table))
    )
    if scope_to_filters:
        stmt = stmt.join(Membership, Membership.id == LineItem.entity_id).outerjoin(
            Contact, Contact.id == Membership.contact_id
        )
        clauses = compile_filters(filters)
        if clauses:
            stmt = stmt.where(*clauses)
    return stmt.order_by(PriceFieldValue.id)


def _sort_key(cat: Category) -> tuple[str, int]:
    return (cat.display_label.casefold(), cat.id)


def discover_categories(
    accessor: SchemaAccessor,
    *,
    entity_table: str = DEFAULT_ENTITY_TABLE,
    filters: Sequence[Filter] = (),
    scope_to_filters: bool = False,
) -> list[Category]:
    """Return the distinct categories used by ``entity_table`` line items.

    Ordered by display label (case-insensitive; blank labels sort as
    ``"Option {id}"``), ties broken by id. Query failures propagate unchanged.
    """

    stmt = build_discovery_query(
        entity_table=entity_table, filters=filters, scope_to_filters=scope_to_filters
    )
    rows = accessor.execute_query(stmt)

    categories = [
        Category(
            id=require_category_id(row["id"]),
            label=row["label"],
            name=row["name"],
        )
        for row in rows
    ]
    categories.sort(key=_sort_key)
    _logger.info(
        "Discovered %d price option(s) for %s%s",
        len(categories),
        entity_table,
        " (scoped to filters)" if scope_to_filters else "",
    )
    return categories


__all__ = [
    "DEFAULT_ENTITY_TABLE",
    "build_discovery_query",
    "discover_categories",
]
