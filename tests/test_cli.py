"""Tests for the autodash CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from autodash.cli import main
from autodash.config import Settings
from autodash.errors import InvalidConfiguration


@pytest.fixture()
def runner(monkeypatch):
    for name in ("AD_RULES_DIR", "AD_MAX_CANDIDATES", "AD_DATABASE_ID", "AD_PERMISSIONS", "AD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestTablesCommand:
    def test_lists_tables_with_entity_types(self, runner, shop_db):
        result = runner.invoke(main, ["tables", "--db", str(shop_db)])

        assert result.exit_code == 0, result.output
        assert "orders" in result.output
        assert "entity/TransactionTable" in result.output
        assert "7 fields" in result.output


class TestRulesCommands:
    def test_list_builtin(self, runner):
        result = runner.invoke(main, ["rules", "list"])

        assert result.exit_code == 0, result.output
        assert "entity/TransactionTable" in result.output
        assert "Transactions overview" in result.output

    def test_validate_ok(self, runner, tmp_path):
        (tmp_path / "a.yaml").write_text("table_type: UserTable\ntitle: Users\n")
        result = runner.invoke(main, ["rules", "validate", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "1 rule(s) valid" in result.output

    def test_validate_invalid(self, runner, tmp_path):
        (tmp_path / "a.yaml").write_text("metrics:\n  - Count:\n      score: 10\n")
        result = runner.invoke(main, ["rules", "validate", str(tmp_path)])

        assert result.exit_code != 0
        assert "missing 'metric'" in result.output

    def test_validate_empty_directory(self, runner, tmp_path):
        result = runner.invoke(main, ["rules", "validate", str(tmp_path)])

        assert result.exit_code != 0
        assert "No rule files found" in result.output


class TestGenerateCommand:
    def test_dry_run_prints_ranked_cards(self, runner, shop_db):
        result = runner.invoke(main, ["generate", "orders", "--db", str(shop_db), "--dry-run"])

        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines[0] == "Rule: Transactions overview (entity/TransactionTable)"
        assert any("RevenueByCountry" in line and '"fk->"' in line for line in lines[1:])

    def test_writes_dashboard(self, runner, shop_db, tmp_path):
        out_dir = tmp_path / "dashboards"
        result = runner.invoke(main, ["generate", "orders", "--db", str(shop_db), "--out", str(out_dir)])

        assert result.exit_code == 0, result.output
        assert "Dashboard" in result.output
        index = json.loads((out_dir / "index.json").read_text())
        assert len(index["dashboards"]) == 1
        assert index["dashboards"][0]["title"] == "Transactions overview"

    def test_denied_permissions_abort(self, runner, shop_db, tmp_path):
        result = runner.invoke(
            main,
            ["generate", "orders", "--db", str(shop_db), "--out", str(tmp_path), "--grant", "/db/2/"],
        )

        assert result.exit_code != 0
        assert "No dashboard could be generated" in result.output
        assert not (tmp_path / "index.json").exists()

    def test_grants_from_environment(self, runner, shop_db, tmp_path, monkeypatch):
        monkeypatch.setenv("AD_PERMISSIONS", "/db/2/, /db/3/")
        result = runner.invoke(main, ["generate", "orders", "--db", str(shop_db), "--out", str(tmp_path)])
        assert result.exit_code != 0

    def test_unknown_table(self, runner, shop_db):
        result = runner.invoke(main, ["generate", "invoices", "--db", str(shop_db), "--dry-run"])

        assert result.exit_code != 0
        assert "Table not found: invoices" in result.output

    def test_custom_rules_dir_without_match(self, runner, shop_db, tmp_path):
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "users.yaml").write_text("table_type: UserTable\ntitle: Users\n")

        result = runner.invoke(
            main, ["generate", "orders", "--db", str(shop_db), "--rules-dir", str(rules_dir), "--dry-run"]
        )

        assert result.exit_code != 0
        assert "No rule applies to table orders" in result.output


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("AD_RULES_DIR", "AD_MAX_CANDIDATES", "AD_DATABASE_ID", "AD_PERMISSIONS", "AD_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()

        assert settings.rules_dir is None
        assert settings.max_candidates is None
        assert settings.database_id == 1
        assert settings.permissions == ("/",)
        assert settings.log_level == "WARNING"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AD_RULES_DIR", str(tmp_path))
        monkeypatch.setenv("AD_MAX_CANDIDATES", "50")
        monkeypatch.setenv("AD_DATABASE_ID", "3")
        monkeypatch.setenv("AD_PERMISSIONS", "/db/3/table/1/, /db/3/table/2/")
        monkeypatch.setenv("AD_LOG_LEVEL", "debug")
        settings = Settings.from_env()

        assert settings.rules_dir == tmp_path
        assert settings.max_candidates == 50
        assert settings.database_id == 3
        assert settings.permissions == ("/db/3/table/1/", "/db/3/table/2/")
        assert settings.log_level == "DEBUG"

    def test_non_positive_cap_means_unbounded(self, monkeypatch):
        monkeypatch.setenv("AD_MAX_CANDIDATES", "0")
        assert Settings.from_env().max_candidates is None

    @pytest.mark.parametrize("name", ["AD_MAX_CANDIDATES", "AD_DATABASE_ID"])
    def test_non_numeric_value_is_rejected(self, monkeypatch, name):
        monkeypatch.setenv(name, "ten")
        with pytest.raises(InvalidConfiguration, match=f"{name} must be an integer"):
            Settings.from_env()

    def test_cli_reports_bad_setting_without_traceback(self, runner, monkeypatch):
        monkeypatch.setenv("AD_MAX_CANDIDATES", "ten")
        result = runner.invoke(main, ["rules", "list"])

        assert result.exit_code == 1
        assert "Error: AD_MAX_CANDIDATES must be an integer, got 'ten'" in result.output
        assert not isinstance(result.exception, InvalidConfiguration)
