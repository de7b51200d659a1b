import pytest
from pydantic import ValidationError

from membership_pivot.settings import ReportSettings


def test_defaults_from_empty_env():
    s = ReportSettings.from_env({})

    assert s.database_url is None
    assert s.entity_table == "civicrm_membership"
    assert s.scope_discovery is False
    assert s.money.pattern == "%a %s"
    assert s.money.decimal_places == 2


def test_reads_os_environ_by_default(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///x.db")
    monkeypatch.setenv("MP_SCOPE_DISCOVERY", "yes")

    s = ReportSettings.from_env()

    assert s.database_url == "sqlite+pysqlite:///x.db"
    assert s.scope_discovery is True


def test_money_and_table_overrides():
    s = ReportSettings.from_env(
        {
            "MP_ENTITY_TABLE": " civicrm_participant ",
            "MP_MONEY_PATTERN": "%s%a",
            "MP_CURRENCY_SYMBOL": "£",
            "MP_CURRENCY_CODE": "GBP",
            "MP_DECIMAL_PLACES": "0",
            "MP_THOUSANDS_SEPARATOR": " ",
            "MP_DECIMAL_SEPARATOR": ",",
        }
    )

    assert s.entity_table == "civicrm_participant"
    assert s.money.pattern == "%s%a"
    assert s.money.symbol == "£"
    assert s.money.code == "GBP"
    assert s.money.decimal_places == 0
    assert s.money.thousands_separator == " "
    assert s.money.decimal_separator == ","


def test_blank_values_keep_defaults():
    s = ReportSettings.from_env(
        {"DATABASE_URL": "  ", "MP_SCOPE_DISCOVERY": "", "MP_DECIMAL_PLACES": " "}
    )
    assert s.database_url is None
    assert s.scope_discovery is False
    assert s.money.decimal_places == 2


@pytest.mark.parametrize(
    "env",
    [
        {"MP_SCOPE_DISCOVERY": "maybe"},
        {"MP_DECIMAL_PLACES": "two"},
    ],
)
def test_malformed_values_raise(env):
    with pytest.raises(ValueError):
        ReportSettings.from_env(env)


def test_rule_violations_raise_validation_error():
    with pytest.raises(ValidationError):
        ReportSettings.from_env({"MP_MONEY_PATTERN": "no amount"})
    with pytest.raises(ValidationError):
        ReportSettings(entity_table="  ")


def test_settings_are_frozen():
    s = ReportSettings()
    with pytest.raises(ValidationError):
        s.scope_discovery = True  # type: ignore[misc]
