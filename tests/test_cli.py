from __future__ import annotations

import io
from decimal import Decimal

import pytest
from rich.console import Console
from typer.testing import CliRunner

from membership_pivot.cli import app, cmd_report, render_report
from membership_pivot.columns import report_columns, synthesize_columns
from membership_pivot.models import Category, PivotReport

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_dotenv(tmp_path, monkeypatch):
    # The root callback loads ./.env; keep a developer's file out of the tests.
    monkeypatch.chdir(tmp_path)


def test_report_prints_table_with_totals(gold_store, database_url):
    result = runner.invoke(app, ["report", "--database-url", database_url])

    assert result.exit_code == 0, result.output
    assert "Gold" in result.output
    assert "Alice Able" in result.output
    assert "100.00 $" in result.output
    assert "Total" in result.output
    assert "2 membership(s), 1 price option column(s)" in result.output


def test_status_filter_and_raw_amounts(gold_store, database_url):
    result = runner.invoke(
        app, ["report", "--database-url", database_url, "--status", "2", "--raw"]
    )

    assert result.exit_code == 0, result.output
    assert "Bob Baker" in result.output
    assert "Alice Able" not in result.output
    assert "0.00" in result.output
    assert "$" not in result.output
    assert "1 membership(s), 1 price option column(s)" in result.output


def test_scope_discovery_flag(gold_store, database_url):
    result = runner.invoke(
        app,
        ["report", "--database-url", database_url, "--status", "2", "--scope-discovery"],
    )

    assert result.exit_code == 0, result.output
    assert "1 membership(s), 0 price option column(s)" in result.output


def test_database_url_from_env(gold_store, database_url, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("MP_MONEY_PATTERN", "%c %a")

    result = runner.invoke(app, ["report"])

    assert result.exit_code == 0, result.output
    assert "USD 100.00" in result.output


def test_show_sql(gold_store, database_url):
    result = runner.invoke(app, ["report", "--database-url", database_url, "--show-sql"])

    assert result.exit_code == 0, result.output
    assert "GROUP BY civicrm_membership.id" in result.output


def test_bad_date_is_reported():
    result = runner.invoke(app, ["report", "--start-from", "2025-13-01"])

    assert result.exit_code == 1
    assert "invalid filter" in result.output


def test_missing_database_url():
    result = runner.invoke(app, ["report"])

    assert result.exit_code == 1
    assert "DATABASE_URL is not set" in result.output


def test_bad_where_fragment_names_stage(gold_store, database_url):
    result = runner.invoke(
        app, ["report", "--database-url", database_url, "--where", "nope = 1"]
    )

    assert result.exit_code == 1
    assert "report build failed (aggregate)" in result.output


def test_invalid_env_configuration(monkeypatch, capsys):
    monkeypatch.setenv("MP_DECIMAL_PLACES", "9")

    assert cmd_report(database_url="sqlite+pysqlite:///unused.db") == 1
    assert "invalid configuration" in capsys.readouterr().err


def test_render_report_hidden_columns_and_markup_safe_titles():
    pivots = synthesize_columns([Category(5, "[bold]Gold[/bold]")])
    report = PivotReport(
        records=[
            {
                "membership_id": 1,
                "contact_display_name": None,
                "membership_type_id": 3,
                "membership_status_id": 1,
                "membership_start_date": None,
                "membership_end_date": None,
                "price_opt_5": Decimal("12.50"),
            }
        ],
        columns=report_columns(pivots),
        pivot_columns=pivots,
        categories=(Category(5, "[bold]Gold[/bold]"),),
        totals={"price_opt_5": Decimal("12.50")},
    )
    buf = io.StringIO()

    render_report(report, console=Console(file=buf, width=200))
    out = buf.getvalue()

    assert "[bold]Gold[/bold]" in out
    assert "Membership Type" not in out
    assert "12.50" in out

    buf = io.StringIO()
    render_report(report, all_columns=True, console=Console(file=buf, width=200))
    assert "Membership Type" in buf.getvalue()


def test_where_fragment_with_colon_in_string_literal(gold_store, database_url):
    result = runner.invoke(
        app,
        [
            "report",
            "--database-url",
            database_url,
            "--where",
            "coalesce(civicrm_contact.display_name, '') <> ':vip'",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "2 membership(s), 1 price option column(s)" in result.output
