# ruff: noqa: I001
"""CLI for the ``membership_pivot`` package.

Exposes ``cmd_report`` (a plain callable returning an exit status) and a
Typer-based console interface around it. Environment variables (notably
``DATABASE_URL`` and the ``MP_*`` money settings) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Report logic lives
in ``membership_pivot.api``.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .logging_setup import configure_logging, get_logger

_logger = get_logger("membership_pivot.cli")


# ---- Small module-level helpers ---------------------------------------------


def _parse_date(raw: str | None, *, option: str) -> date | None:
    if raw is None or not raw.strip():
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        raise ValueError(f"{option} must be an ISO date (YYYY-MM-DD), got {raw!r}") from None


def _build_filters(
    *,
    status: Sequence[int],
    membership_type: Sequence[int],
    start_from: str | None,
    start_to: str | None,
    where: Sequence[str],
) -> list:
    from .filters import literal_predicate, start_date_between, status_in, type_in

    filters: list = []
    if status:
        filters.append(status_in(status))
    if membership_type:
        filters.append(type_in(membership_type))
    start = _parse_date(start_from, option="--start-from")
    end = _parse_date(start_to, option="--start-to")
    if start is not None or end is not None:
        filters.append(start_date_between(start, end))
    # Operator-typed predicates carry no bind parameters; colons stay literal.
    filters.extend(literal_predicate(w) for w in where if w.strip())
    return filters


def render_report(
    report,
    *,
    money_format=None,
    all_columns: bool = False,
    console: Console | None = None,
) -> None:
    """Print ``report`` as a rich table with a totals footer.

    Totals are rendered with ``money_format``; ``None`` prints raw decimals.
    """

    from .formatting import format_money

    console = console or Console()
    columns = list(report.columns) if all_columns else report.visible_columns()

    table = Table(show_footer=bool(report.pivot_columns))
    for i, col in enumerate(columns):
        if col.is_pivot:
            footer = report.totals.get(col.key)
            if footer is None:
                footer_text = ""
            elif money_format is None:
                footer_text = str(footer)
            else:
                footer_text = format_money(footer, money_format)
        else:
            footer_text = "Total" if i == 0 else ""
        # Text() keeps labels like "[Gold]" from being parsed as rich markup.
        table.add_column(
            Text(col.title),
            footer=Text(footer_text),
            justify="right" if col.is_pivot else "left",
        )
    for record in report.records:
        table.add_row(
            *(Text("" if record[c.key] is None else str(record[c.key])) for c in columns)
        )

    console.print(table)
    console.print(
        f"{report.row_count} membership(s), {len(report.pivot_columns)} price option column(s)"
    )


def cmd_report(
    *,
    database_url: str | None = None,
    status: Sequence[int] = (),
    membership_type: Sequence[int] = (),
    start_from: str | None = None,
    start_to: str | None = None,
    where: Sequence[str] = (),
    scope_discovery: bool | None = None,
    raw: bool = False,
    all_columns: bool = False,
    show_sql: bool = False,
    console: Console | None = None,
) -> int:
    """Build the membership price pivot report and print it.

    Settings come from the environment (see ``membership_pivot.settings``);
    ``database_url`` and ``scope_discovery`` override them when given.

    Errors are written to stderr and the function returns a non-zero exit
    status. On success, returns ``0``.
    """

    from pydantic import ValidationError

    from .api import build_pivot_report_from_settings
    from .errors import ReportBuildError
    from .settings import ReportSettings

    try:
        settings = ReportSettings.from_env()
        overrides: dict[str, object] = {}
        if database_url:
            overrides["database_url"] = database_url
        if scope_discovery is not None:
            overrides["scope_discovery"] = scope_discovery
        if overrides:
            settings = settings.model_copy(update=overrides)
    except (ValidationError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        filters = _build_filters(
            status=status,
            membership_type=membership_type,
            start_from=start_from,
            start_to=start_to,
            where=where,
        )
    except ValueError as e:
        print(f"Error: invalid filter: {e}", file=sys.stderr)
        return 1

    try:
        report = build_pivot_report_from_settings(
            settings, filters=filters, format_display=not raw
        )
    except ReportBuildError as e:
        _logger.error("Report build failed at %s stage: %s", e.stage, e.__cause__ or e)
        print(f"Error: report build failed ({e.stage}): {e}", file=sys.stderr)
        return 1
    except RuntimeError as e:
        # e.g. DATABASE_URL missing
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if show_sql:
        print(report.sql, file=sys.stderr)

    render_report(
        report,
        money_format=None if raw else settings.money,
        all_columns=all_columns,
        console=console,
    )
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Membership price pivot report: one row per membership, one summed money "
        "column per price field option. Loads DATABASE_URL from a local .env."
    ),
)


@app.command("report")
def report_cmd(
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    status: list[int] = typer.Option(
        [], "--status", help="Membership status id to include (repeatable)."
    ),
    membership_type: list[int] = typer.Option(
        [], "--membership-type", help="Membership type id to include (repeatable)."
    ),
    start_from: str | None = typer.Option(None, help="Earliest start date (YYYY-MM-DD)."),
    start_to: str | None = typer.Option(None, help="Latest start date (YYYY-MM-DD)."),
    where: list[str] = typer.Option(
        [],
        "--where",
        help="Raw SQL predicate over the report tables (repeatable); colons are literal.",
    ),
    scope_discovery: bool | None = typer.Option(
        None,
        "--scope-discovery/--no-scope-discovery",
        help="Only create columns for price options used by the filtered memberships.",
    ),
    raw: bool = typer.Option(False, help="Print unformatted decimal amounts."),
    all_columns: bool = typer.Option(False, help="Include hidden columns (type, status, dates)."),
    show_sql: bool = typer.Option(False, help="Print the aggregate SQL to stderr."),
) -> None:
    """Build the report and print it as a table."""

    code = cmd_report(
        database_url=database_url,
        status=status,
        membership_type=membership_type,
        start_from=start_from,
        start_to=start_to,
        where=where,
        scope_discovery=scope_discovery,
        raw=raw,
        all_columns=all_columns,
        show_sql=show_sql,
    )
    if code:
        raise typer.Exit(code)


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to MEMBERSHIP_PIVOT_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level, force=log_level is not None)


if __name__ == "__main__":  # pragma: no cover
    app()
