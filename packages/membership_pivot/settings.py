"""Report configuration, from explicit arguments or the environment.

Environment variables
---------------------
- ``DATABASE_URL``: store URL (shared with ``db.client``).
- ``MP_ENTITY_TABLE``: line item owner discriminator (default
  ``civicrm_membership``).
- ``MP_SCOPE_DISCOVERY``: ``1/true/yes`` to scope price option discovery by the
  report filters.
- ``MP_MONEY_PATTERN``, ``MP_CURRENCY_SYMBOL``, ``MP_CURRENCY_CODE``,
  ``MP_DECIMAL_PLACES``, ``MP_THOUSANDS_SEPARATOR``, ``MP_DECIMAL_SEPARATOR``:
  money display, see :class:`~membership_pivot.formatting.MoneyFormat`.

The CLI loads ``.env`` before reading these; library callers should pass a
``ReportSettings`` explicitly or call :meth:`ReportSettings.from_env`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .discovery import DEFAULT_ENTITY_TABLE
from .formatting import MoneyFormat

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

# env var -> MoneyFormat field
_MONEY_ENV: dict[str, str] = {
    "MP_MONEY_PATTERN": "pattern",
    "MP_CURRENCY_SYMBOL": "symbol",
    "MP_CURRENCY_CODE": "code",
    "MP_THOUSANDS_SEPARATOR": "thousands_separator",
    "MP_DECIMAL_SEPARATOR": "decimal_separator",
}


def _env_bool(name: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be one of 1/0/true/false/yes/no, got {raw!r}")


def _env_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class ReportSettings(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    database_url: str | None = None
    entity_table: str = DEFAULT_ENTITY_TABLE
    scope_discovery: bool = False
    money: MoneyFormat = Field(default_factory=MoneyFormat)

    @field_validator("entity_table")
    @classmethod
    def _entity_table_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("entity_table must be non-empty")
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ReportSettings:
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Unset or blank variables keep the model defaults. Malformed values
        raise ``ValueError`` (``pydantic.ValidationError`` for rule violations).
        """

        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            raw = env.get(name)
            return raw if raw is not None and raw.strip() else None

        # Whitespace is meaningful here (e.g. a space thousands separator).
        money: dict[str, object] = {
            field: raw for name, field in _MONEY_ENV.items() if (raw := env.get(name))
        }
        if (places := get("MP_DECIMAL_PLACES")) is not None:
            money["decimal_places"] = _env_int("MP_DECIMAL_PLACES", places)

        values: dict[str, object] = {"money": MoneyFormat(**money)}
        if (url := get("DATABASE_URL")) is not None:
            values["database_url"] = url
        if (table := get("MP_ENTITY_TABLE")) is not None:
            values["entity_table"] = table
        if (scope := get("MP_SCOPE_DISCOVERY")) is not None:
            values["scope_discovery"] = _env_bool("MP_SCOPE_DISCOVERY", scope)
        return cls(**values)


__all__ = ["ReportSettings"]
