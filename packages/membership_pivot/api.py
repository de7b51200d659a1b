"""Report build orchestration: the public entry points of ``membership_pivot``.

A build runs discovery, column synthesis, query composition, a single
aggregate query, totals and (optionally) display formatting, in that order.
It issues exactly two queries through the accessor and performs no writes.

Consistency note: discovery and the aggregate query are separate reads. A
price option first used between the two is simply absent from that build's
columns; its amounts are not attributed elsewhere.
"""

from __future__ import annotations

from collections.abc import Sequence

from .accessor import SchemaAccessor, SqlAlchemyAccessor
from .columns import report_columns, synthesize_columns
from .discovery import DEFAULT_ENTITY_TABLE, discover_categories
from .errors import AggregateQueryError, DiscoveryError
from .filters import Filter
from .formatting import DEFAULT_MONEY_FORMAT, MoneyFormat, alter_display
from .logging_setup import get_logger
from .materialize import column_totals, materialize_rows
from .models import PivotReport
from .query_builder import build_pivot_query
from .settings import ReportSettings

_logger = get_logger("membership_pivot.api")


def build_pivot_report(
    accessor: SchemaAccessor,
    *,
    filters: Sequence[Filter] = (),
    entity_table: str = DEFAULT_ENTITY_TABLE,
    scope_discovery: bool = False,
    money_format: MoneyFormat | None = None,
    format_display: bool = True,
) -> PivotReport:
    """Build the membership × price option pivot report.

    Parameters
    ----------
    accessor:
        Read access to the store.
    filters:
        Predicates restricting memberships; conjoined with AND.
    entity_table:
        Line item owner discriminator.
    scope_discovery:
        Apply ``filters`` to price option discovery as well. By default
        discovery sees every line item of ``entity_table``, so a column may
        exist for an option no filtered membership uses (all zeros).
    money_format:
        Display format for pivot values; defaults to ``"%a %s"`` in USD.
    format_display:
        When false, pivot values stay ``Decimal``.

    Raises
    ------
    DiscoveryError
        The discovery query failed.
    AggregateQueryError
        The aggregate query could not be built, executed or materialized.
    """

    try:
        categories = discover_categories(
            accessor,
            entity_table=entity_table,
            filters=filters,
            scope_to_filters=scope_discovery,
        )
        pivot_columns = synthesize_columns(categories)
    except Exception as e:
        raise DiscoveryError(f"price option discovery failed: {e}") from e

    try:
        statement = build_pivot_query(pivot_columns, entity_table=entity_table, filters=filters)
        sql = str(statement)
        _logger.debug("Aggregate query:\n%s", sql)
        records = materialize_rows(accessor, statement, pivot_columns)
    except Exception as e:
        raise AggregateQueryError(f"aggregate query failed: {e}") from e

    totals = column_totals(records, pivot_columns)
    if format_display:
        alter_display(records, pivot_columns, money_format or DEFAULT_MONEY_FORMAT)

    return PivotReport(
        records=records,
        columns=report_columns(pivot_columns),
        pivot_columns=pivot_columns,
        categories=tuple(categories),
        totals=totals,
        sql=sql,
    )


def build_pivot_report_from_settings(
    settings: ReportSettings,
    *,
    filters: Sequence[Filter] = (),
    format_display: bool = True,
) -> PivotReport:
    """Open a read-only session on ``settings.database_url`` and build the report.

    Falls back to ``DATABASE_URL`` when the settings carry no URL.
    """

    from db.client import read_only_session

    with read_only_session(database_url=settings.database_url) as session:
        return build_pivot_report(
            SqlAlchemyAccessor(session),
            filters=filters,
            entity_table=settings.entity_table,
            scope_discovery=settings.scope_discovery,
            money_format=settings.money,
            format_display=format_display,
        )


__all__ = [
    "build_pivot_report",
    "build_pivot_report_from_settings",
]
