"""Public interface for the ``membership_pivot`` package.

Symbol re-exports only; the build pipeline lives in ``membership_pivot.api``.
"""

from .accessor import SchemaAccessor, SqlAlchemyAccessor
from .api import build_pivot_report, build_pivot_report_from_settings
from .columns import FIXED_COLUMNS, PIVOT_COLUMN_PREFIX, synthesize_columns
from .discovery import discover_categories
from .errors import AggregateQueryError, DiscoveryError, MoneyFormatError, ReportBuildError
from .filters import (
    FilterFragment,
    contact_in,
    end_date_between,
    literal_predicate,
    start_date_between,
    status_in,
    type_in,
)
from .formatting import MoneyFormat, alter_display, format_money
from .models import Category, ColumnDescriptor, ColumnType, OutputRecord, PivotReport
from .query_builder import build_pivot_query
from .settings import ReportSettings

__all__ = [
    # API
    "build_pivot_report",
    "build_pivot_report_from_settings",
    # Stages
    "discover_categories",
    "synthesize_columns",
    "build_pivot_query",
    "alter_display",
    "format_money",
    # Store access / filters
    "SchemaAccessor",
    "SqlAlchemyAccessor",
    "FilterFragment",
    "literal_predicate",
    "status_in",
    "type_in",
    "contact_in",
    "start_date_between",
    "end_date_between",
    # Models / types
    "Category",
    "ColumnDescriptor",
    "ColumnType",
    "OutputRecord",
    "PivotReport",
    "MoneyFormat",
    "ReportSettings",
    "FIXED_COLUMNS",
    "PIVOT_COLUMN_PREFIX",
    # Errors
    "ReportBuildError",
    "DiscoveryError",
    "AggregateQueryError",
    "MoneyFormatError",
]
