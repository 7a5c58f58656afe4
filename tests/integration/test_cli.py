"""Tests for the typer CLI."""

from typer.testing import CliRunner

from coldchain_ledger.cli import app

runner = CliRunner()


class TestSimulate:
    def test_excursion_run(self, cli_env):
        result = runner.invoke(app, ["simulate"])
        assert result.exit_code == 0, result.output
        assert "Compromised: True" in result.output
        assert "total penalty 150000" in result.output

    def test_clean_run(self, cli_env):
        result = runner.invoke(app, ["simulate", "--no-excursion"])
        assert result.exit_code == 0, result.output
        assert "Reward to ST2DISTRIBUTOR: 5000" in result.output

    def test_rejected_step_exits_non_zero(self, cli_env):
        # An in-range reading is not an excursion
        result = runner.invoke(app, ["simulate", "--temp", "5"])
        assert result.exit_code == 1
        assert "INVALID_TEMP" in result.output


class TestVerifyJournal:
    def test_all_chains_valid(self, cli_env):
        result = runner.invoke(app, ["verify-journal", "--db-url", "sqlite+aiosqlite://"])
        assert result.exit_code == 0, result.output
        for engine in ("batches", "alerts", "incentives"):
            assert f"VALID {engine}" in result.output


class TestSettings:
    def test_hides_journal_keys(self, cli_env):
        result = runner.invoke(app, ["settings"])
        assert result.exit_code == 0, result.output
        assert "hmac" not in result.output
        assert "mint_fee" in result.output
