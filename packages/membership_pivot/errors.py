"""Exceptions raised by report builds."""

from __future__ import annotations


class ReportBuildError(RuntimeError):
    """A report build failed; no partial report is produced.

    ``stage`` names the failing stage and the underlying exception is chained
    as ``__cause__``. Builds are read-only, so callers may simply retry.
    """

    stage: str = "build"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class DiscoveryError(ReportBuildError):
    """The price option discovery query failed."""

    stage = "discovery"


class AggregateQueryError(ReportBuildError):
    """Building, executing or materializing the aggregate query failed."""

    stage = "aggregate"


class MoneyFormatError(ValueError):
    """A value could not be rendered as money; recovered per field."""


__all__ = [
    "AggregateQueryError",
    "DiscoveryError",
    "MoneyFormatError",
    "ReportBuildError",
]
