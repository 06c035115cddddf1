"""End-to-end tests for the fingestor CLI against a temporary data directory."""

import sqlite3
from dataclasses import replace
from datetime import date, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fingestor.cli import app
from fingestor.commands import recurring
from fingestor.config import DEFAULT_TIME_SOURCE_TIMEOUT, get_config_path, save_config
from fingestor.domain.models import AUTOMATIC_SAVINGS, CategoryName, Description, Money, RecurringSchedule
from fingestor.store import get_app_config, get_db_path, get_goals, get_investments, get_transactions, save_app_config

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    save_config({"time_source": {"enabled": False}}, get_config_path())
    return tmp_path


class TestInit:
    """Tests for the init command."""

    def test_refuses_to_overwrite(self, workspace: Path) -> None:
        """Should fail without --force when data exists."""
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_commands_need_database(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should point at init when there is no database."""
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "empty"))
        result = runner.invoke(app, ["balance", "--offline"])
        assert result.exit_code == 1
        assert "fingestor init" in result.output


class TestTransactionFlow:
    """Tests for adding, listing and deleting transactions."""

    def test_add_list_delete(self, workspace: Path) -> None:
        """Should record a transaction and remove it again."""
        result = runner.invoke(app, ["add", "Groceries", "45,30", "--category", "Food"])
        assert result.exit_code == 0, result.output

        [txn] = get_transactions(get_db_path())
        assert txn.amount == Money(4530)
        assert txn.type == "expense"

        result = runner.invoke(app, ["list", "--all"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["delete", txn.id])
        assert result.exit_code == 0
        assert get_transactions(get_db_path()) == []

    def test_rejects_bad_type(self, workspace: Path) -> None:
        """Should refuse unknown transaction types."""
        result = runner.invoke(app, ["add", "Thing", "10", "--type", "refund"])
        assert result.exit_code == 1
        assert get_transactions(get_db_path()) == []

    def test_import_export(self, workspace: Path) -> None:
        """Should import a bank statement and export it again."""
        statement = workspace / "statement.csv"
        statement.write_text(
            "Data do movimento;Descrição;Debito;Credito\n"
            "2025-01-02;Ordenado;;1500,00\n"
            "2025-01-03;Renda;650,00;\n"
            "2025-01-04;Sem valor;;\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["import", str(statement)])
        assert result.exit_code == 0, result.output

        transactions = get_transactions(get_db_path())
        assert [(t.type, t.amount) for t in transactions] == [("income", Money(150000)), ("expense", Money(65000))]

        exported = workspace / "out.csv"
        result = runner.invoke(app, ["export", str(exported)])
        assert result.exit_code == 0
        assert exported.read_text().splitlines()[0] == "Id,Date,Description,Amount,Type,Category"

    def test_rejects_out_of_range_amount(self, workspace: Path) -> None:
        """Should refuse an amount too large to store in cents."""
        result = runner.invoke(app, ["add", "Lottery", "1e30", "--type", "income"])

        assert result.exit_code == 1
        assert "out of range" in result.output
        assert get_transactions(get_db_path()) == []

    def test_rejects_times_with_until(self, workspace: Path) -> None:
        """Should refuse a repeat limited both by count and by date."""
        result = runner.invoke(
            app, ["add", "Gym", "30", "--repeat", "monthly", "--times", "3", "--until", "2030-01-01"]
        )

        assert result.exit_code == 1
        assert "either --times or --until" in result.output
        assert get_transactions(get_db_path()) == []
        assert get_app_config(get_db_path()).recurring_schedules == ()


class TestExcelFiles:
    """Tests for Excel import and export."""

    def test_transactions_round_trip(self, workspace: Path) -> None:
        """Should export transactions to .xlsx and import them back."""
        runner.invoke(app, ["add", "Salary", "1500", "--type", "income", "--date", "2025-01-02"])
        runner.invoke(app, ["add", "Groceries", "45,30", "--category", "Food", "--date", "2025-01-03"])
        before = get_transactions(get_db_path())

        workbook = workspace / "out.xlsx"
        result = runner.invoke(app, ["export", str(workbook)])
        assert result.exit_code == 0, result.output
        assert workbook.exists()

        for txn in before:
            runner.invoke(app, ["delete", txn.id])
        assert get_transactions(get_db_path()) == []

        result = runner.invoke(app, ["import", str(workbook)])

        assert result.exit_code == 0, result.output
        assert get_transactions(get_db_path()) == before

    def test_investments_round_trip(self, workspace: Path) -> None:
        """Should export investments to .xlsx and import them back."""
        runner.invoke(
            app, ["invest", "add", "World ETF", "100", "--price", "50", "--ticker", "vwce", "--date", "2025-01-02"]
        )
        [before] = get_investments(get_db_path())

        workbook = workspace / "portfolio.xlsx"
        result = runner.invoke(app, ["invest", "export", str(workbook)])
        assert result.exit_code == 0, result.output

        runner.invoke(app, ["invest", "delete", before.id])
        result = runner.invoke(app, ["invest", "import", str(workbook)])

        assert result.exit_code == 0, result.output
        [after] = get_investments(get_db_path())
        assert (after.id, after.name, after.ticker, after.date) == (before.id, "World ETF", "VWCE", date(2025, 1, 2))
        assert after.invested_value == Money(10000)
        assert after.price_per_share == 50.0
        assert after.shares == 2.0

    def test_legacy_xls_export_refused(self, workspace: Path) -> None:
        """Should refuse to write the legacy .xls format."""
        result = runner.invoke(app, ["export", str(workspace / "out.xls")])

        assert result.exit_code == 1
        assert "Export failed" in result.output
        assert not (workspace / "out.xls").exists()


class TestSavingsFlow:
    """Tests for goal allocation and savings withdrawals."""

    def test_allocate_then_withdraw(self, workspace: Path) -> None:
        """Should move 10% of the balance into a goal and prorate a withdrawal."""
        runner.invoke(app, ["add", "Salary", "1000", "--type", "income"])
        runner.invoke(app, ["goal", "add", "Car", "5000"])
        [goal] = get_goals(get_db_path())

        result = runner.invoke(app, ["goal", "allocate", goal.id, "--offline"])
        assert result.exit_code == 0, result.output

        [goal] = get_goals(get_db_path())
        assert goal.current_amount == Money(10000)
        transfer = get_transactions(get_db_path())[-1]
        assert transfer.category == AUTOMATIC_SAVINGS
        assert transfer.amount == Money(10000)

        result = runner.invoke(
            app, ["add", "Back from savings", "40", "--type", "transfer", "--category", "Inter-account Transfer"]
        )
        assert result.exit_code == 0, result.output
        [goal] = get_goals(get_db_path())
        assert goal.current_amount == Money(6000)

    def test_allocate_with_nothing(self, workspace: Path) -> None:
        """Should fail when the balance is not positive."""
        runner.invoke(app, ["goal", "add", "Car", "5000"])
        [goal] = get_goals(get_db_path())

        result = runner.invoke(app, ["goal", "allocate", goal.id, "--offline"])

        assert result.exit_code == 1
        assert "Nothing to allocate" in result.output


class TestRecurringFlow:
    """Tests for recurring schedules."""

    def test_repeat_catches_up(self, workspace: Path) -> None:
        """Should generate the missed occurrences right after adding."""
        start = date.today() - timedelta(days=3)

        result = runner.invoke(app, ["add", "Coffee", "2", "--date", start.isoformat(), "--repeat", "daily"])
        assert result.exit_code == 0, result.output

        transactions = get_transactions(get_db_path())
        assert [t.date for t in transactions] == [start + timedelta(days=n) for n in range(4)]

        [schedule] = get_app_config(get_db_path()).recurring_schedules
        assert schedule.processed_count == 3
        assert schedule.last_processed_date == date.today()

        result = runner.invoke(app, ["recurring", "process", "--offline"])
        assert result.exit_code == 0
        assert len(get_transactions(get_db_path())) == 4

    def test_stop(self, workspace: Path) -> None:
        """Should deactivate a schedule."""
        runner.invoke(app, ["add", "Gym", "30", "--repeat", "monthly", "--times", "12"])
        [schedule] = get_app_config(get_db_path()).recurring_schedules

        result = runner.invoke(app, ["recurring", "stop", schedule.id])

        assert result.exit_code == 0
        assert not get_app_config(get_db_path()).recurring_schedules[0].active


class TestSettingsFlow:
    """Tests for settings and alerts."""

    def test_set_percentage(self, workspace: Path) -> None:
        """Should store a new allocation percentage."""
        result = runner.invoke(app, ["settings", "set", "allocation-percentage", "25"])
        assert result.exit_code == 0
        assert get_app_config(get_db_path()).allocation_percentage == 25

    def test_alert_shows_in_report(self, workspace: Path) -> None:
        """Should report an exceeded spending alert."""
        runner.invoke(app, ["alert", "add", "Food", "10"])
        runner.invoke(app, ["add", "Dinner", "25", "--category", "Food"])

        result = runner.invoke(app, ["report", "--offline"])

        assert result.exit_code == 0, result.output
        assert "Alerts" in result.output
        assert "Food" in result.output


class TestGoalList:
    """Tests for goal list."""

    def test_generates_due_recurring_first(self, workspace: Path) -> None:
        """Should run the recurring catch-up before previewing the allocation."""
        runner.invoke(app, ["goal", "add", "Car", "5000"])
        schedule = RecurringSchedule(
            id="s1",
            description=Description("Freelance"),
            amount=Money(1000),
            type="income",
            category=CategoryName("Salary"),
            frequency="daily",
            start_date=date.today() - timedelta(days=3),
        )
        config = get_app_config(get_db_path())
        save_app_config(replace(config, recurring_schedules=(schedule,)), get_db_path())

        result = runner.invoke(app, ["goal", "list", "--offline"])

        assert result.exit_code == 0, result.output
        assert len(get_transactions(get_db_path())) == 3
        assert "3.00€" in result.output


class TestStoreUpgrade:
    """Tests for init --migrate."""

    def test_keeps_data(self, workspace: Path) -> None:
        """Should leave existing transactions in place."""
        runner.invoke(app, ["add", "Groceries", "12"])

        result = runner.invoke(app, ["init", "--migrate"])

        assert result.exit_code == 0, result.output
        assert "already present" in result.output
        assert len(get_transactions(get_db_path())) == 1

    def test_restores_missing_collection(self, workspace: Path) -> None:
        """Should add back a collection document that is missing."""
        runner.invoke(app, ["add", "Groceries", "12"])
        conn = sqlite3.connect(get_db_path())
        conn.execute("DELETE FROM kv WHERE key = 'investments'")
        conn.commit()
        conn.close()

        result = runner.invoke(app, ["init", "--migrate"])

        assert result.exit_code == 0, result.output
        assert "investments" in result.output
        assert get_investments(get_db_path()) == []
        assert len(get_transactions(get_db_path())) == 1

    def test_nothing_to_upgrade(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fail when there is no store yet."""
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "empty"))

        result = runner.invoke(app, ["init", "--migrate"])

        assert result.exit_code == 1
        assert "No store to upgrade" in result.output


class TestTimeSourceSettings:
    """Tests for how commands read the time source settings."""

    def test_bad_timeout_uses_default(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should call the time source with the default timeout when the file has a bad one."""
        save_config({"time_source": {"enabled": True, "timeout": "soon"}}, get_config_path())
        calls = []

        def fake_fetch_today(url, timeout):
            calls.append(timeout)
            return date.today()

        monkeypatch.setattr(recurring, "fetch_today", fake_fetch_today)

        result = runner.invoke(app, ["recurring", "process"])

        assert result.exit_code == 0, result.output
        assert calls == [DEFAULT_TIME_SOURCE_TIMEOUT]
