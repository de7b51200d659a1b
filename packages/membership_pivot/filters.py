"""Report filters: caller-supplied predicates conjoined into the WHERE clause.

Two shapes are accepted anywhere a filter is expected:

- ``FilterFragment``: SQL predicate text with named ``:param`` placeholders
  plus a mapping of values. Values are always bound, never interpolated.
  Fragments may reference the unaliased store tables (``civicrm_membership``,
  ``civicrm_contact``, ``civicrm_line_item``, ``civicrm_price_field_value``).
- A SQLAlchemy boolean clause, as produced by the helpers below.

The engine does not interpret filter semantics. Parameter names starting with
``mp_`` are reserved for values the engine binds itself; every other name is
free for fragments.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from db.models.membership import Membership
from sqlalchemy import BindParameter, ColumnElement, TextClause, bindparam, text

RESERVED_PARAM_PREFIX = "mp_"


def engine_param(name: str, value: Any, *, unique: bool = False, **kw: Any) -> BindParameter:
    """Bind ``value`` under the reserved ``mp_`` namespace.

    With ``unique=True`` SQLAlchemy suffixes the name (``mp_status_id_1``) so the
    same helper can appear more than once in one statement.
    """

    return bindparam(f"{RESERVED_PARAM_PREFIX}{name}", value, unique=unique, **kw)


@dataclass(frozen=True, slots=True)
class FilterFragment:
    sql: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.sql or not self.sql.strip():
            raise ValueError("FilterFragment.sql must be a non-empty predicate")

    def to_clause(self) -> TextClause:
        # Parenthesized so ``a OR b`` fragments keep their meaning under AND.
        clause = text(f"({self.sql.strip()})")
        if self.params:
            clause = clause.bindparams(**dict(self.params))
        return clause


def literal_predicate(sql: str) -> FilterFragment:
    """A fragment without bind parameters; every ``:`` is taken literally.

    For operator-typed predicates such as ``display_name = ':vip'``, where a
    colon inside a string literal must not start a ``:param`` placeholder.
    """

    return FilterFragment(sql.replace(":", "\\:"))


type Filter = FilterFragment | ColumnElement[bool] | TextClause


def compile_filters(filters: Iterable[Filter]) -> list[ColumnElement[bool] | TextClause]:
    """Convert ``filters`` into SQLAlchemy clauses ready for ``Select.where``.

    Raises ``ValueError`` when a fragment uses a reserved ``mp_`` parameter
    name, or when two fragments bind the same parameter name to different
    values; SQLAlchemy cannot render both into one statement.
    """

    clauses: list[ColumnElement[bool] | TextClause] = []
    seen_params: dict[str, Any] = {}
    for f in filters:
        if isinstance(f, FilterFragment):
            for name, value in f.params.items():
                if name.startswith(RESERVED_PARAM_PREFIX):
                    raise ValueError(
                        f"Filter parameter {name!r} uses the reserved "
                        f"{RESERVED_PARAM_PREFIX!r} prefix; rename it"
                    )
                if name in seen_params and seen_params[name] != value:
                    raise ValueError(
                        f"Conflicting values for filter parameter {name!r}; "
                        "use distinct parameter names per fragment"
                    )
                seen_params[name] = value
            clauses.append(f.to_clause())
        elif isinstance(f, (ColumnElement, TextClause)):
            clauses.append(f)
        else:
            raise TypeError(f"Unsupported filter type: {type(f).__name__}")
    return clauses


# ---------------------------
# Convenience constructors
# ---------------------------


def _ids(values: Iterable[int], what: str) -> list[int]:
    out: list[int] = []
    for v in values:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"{what} must be integers, got {v!r}")
        out.append(v)
    if not out:
        raise ValueError(f"{what} must not be empty")
    return out


def _id_in(column, values: Iterable[int], what: str) -> ColumnElement[bool]:
    ids = _ids(values, what)
    return column.in_(engine_param(column.key, ids, unique=True, expanding=True))


def status_in(status_ids: Iterable[int]) -> ColumnElement[bool]:
    return _id_in(Membership.status_id, status_ids, "status ids")


def type_in(type_ids: Iterable[int]) -> ColumnElement[bool]:
    return _id_in(Membership.membership_type_id, type_ids, "membership type ids")


def contact_in(contact_ids: Iterable[int]) -> ColumnElement[bool]:
    return _id_in(Membership.contact_id, contact_ids, "contact ids")


def _date_between(column, start: date | None, end: date | None) -> ColumnElement[bool]:
    if start is None and end is None:
        raise ValueError("at least one of start/end is required")
    if start is not None and end is not None and start > end:
        raise ValueError(f"empty date range: {start.isoformat()} > {end.isoformat()}")

    def bound(value: date) -> BindParameter:
        return engine_param(column.key, value, unique=True, type_=column.type)

    if start is None:
        return column <= bound(end)
    if end is None:
        return column >= bound(start)
    return column.between(bound(start), bound(end))


def start_date_between(start: date | None = None, end: date | None = None) -> ColumnElement[bool]:
    """Memberships whose start date falls in ``[start, end]`` (either bound optional)."""
    return _date_between(Membership.start_date, start, end)


def end_date_between(start: date | None = None, end: date | None = None) -> ColumnElement[bool]:
    return _date_between(Membership.end_date, start, end)


__all__ = [
    "RESERVED_PARAM_PREFIX",
    "Filter",
    "FilterFragment",
    "compile_filters",
    "contact_in",
    "end_date_between",
    "engine_param",
    "literal_predicate",
    "start_date_between",
    "status_in",
    "type_in",
]
