"""Display formatting for pivot money columns.

``alter_display`` converts the numeric pivot values of materialized records
into display strings in place. It runs once per build, after totals are
computed; re-running it on already formatted records is not supported.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import MoneyFormatError
from .logging_setup import get_logger
from .models import ColumnDescriptor, OutputRecord

_logger = get_logger("membership_pivot.formatting")


class MoneyFormat(BaseModel):
    """How amounts are rendered.

    ``pattern`` tokens: ``%a`` amount, ``%s`` currency symbol, ``%c`` ISO
    currency code. The amount carries the sign, so ``-1,234.50 $`` rather than
    ``$ -1,234.50`` depends only on where ``%a`` sits in the pattern.
    """

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    pattern: str = "%a %s"
    symbol: str = "$"
    code: str = "USD"
    decimal_places: int = 2
    thousands_separator: str = ","
    decimal_separator: str = "."

    @field_validator("pattern")
    @classmethod
    def _pattern_has_amount(cls, v: str) -> str:
        if "%a" not in v:
            raise ValueError("pattern must contain the %a amount token")
        return v

    @field_validator("decimal_places")
    @classmethod
    def _places_in_range(cls, v: int) -> int:
        if 0 <= v <= 6:
            return v
        raise ValueError("decimal_places must be within [0,6]")

    @field_validator("decimal_separator")
    @classmethod
    def _decimal_separator_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("decimal_separator must be non-empty")
        return v


DEFAULT_MONEY_FORMAT = MoneyFormat()


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise MoneyFormatError(f"cannot format {value!r} as money")
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise MoneyFormatError(f"cannot format {value!r} as money") from None
    if not d.is_finite():
        raise MoneyFormatError(f"cannot format {value!r} as money")
    return d


def format_amount(value: Any, fmt: MoneyFormat = DEFAULT_MONEY_FORMAT) -> str:
    """Render the number alone: grouped, fixed decimals, locale separators."""

    d = _as_decimal(value)
    try:
        q = d.quantize(Decimal(1).scaleb(-fmt.decimal_places), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Needs more digits than the decimal context precision.
        raise MoneyFormatError(f"cannot format {value!r} as money") from None
    text = f"{q:,.{fmt.decimal_places}f}"
    # Swap separators through a placeholder so "," and "." may trade places.
    return (
        text.replace(",", "\0")
        .replace(".", fmt.decimal_separator)
        .replace("\0", fmt.thousands_separator)
    )


def format_money(value: Any, fmt: MoneyFormat = DEFAULT_MONEY_FORMAT) -> str:
    """Render ``value`` through ``fmt.pattern``; raises ``MoneyFormatError``."""

    amount = format_amount(value, fmt)
    out = fmt.pattern.replace("%a", "\0")
    out = out.replace("%s", fmt.symbol).replace("%c", fmt.code)
    return out.replace("\0", amount)


def alter_display(
    records: list[OutputRecord],
    pivot_columns: Sequence[ColumnDescriptor],
    fmt: MoneyFormat = DEFAULT_MONEY_FORMAT,
) -> None:
    """Format every pivot value of ``records`` in place.

    Fixed fields are left untouched. A value that cannot be formatted is
    rendered as ``str(value)`` and logged rather than failing the report.
    """

    if not records:
        return

    for record in records:
        for col in pivot_columns:
            raw = record[col.key]
            try:
                record[col.key] = format_money(raw, fmt)
            except MoneyFormatError as e:
                _logger.warning(
                    "Rendering raw value for %s (membership %s): %s",
                    col.key,
                    record.get("membership_id"),
                    e,
                )
                record[col.key] = str(raw)


__all__ = [
    "DEFAULT_MONEY_FORMAT",
    "MoneyFormat",
    "alter_display",
    "format_amount",
    "format_money",
]
