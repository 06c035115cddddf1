"""CLI entry point for fingestor."""

import typer

from fingestor.commands import goals, investments, recurring, settings
from fingestor.commands.admin import backup_command, init_command
from fingestor.commands.report import balance_command, report_command
from fingestor.commands.transactions import (
    add_command,
    delete_command,
    export_command,
    import_command,
    list_command,
)
from fingestor.notifications import configure_logging

app = typer.Typer(
    name="fingestor",
    help="Personal finance tracker with savings goals and recurring transactions",
    add_completion=False,
)
goal_app = typer.Typer(help="Manage savings goals.")
recurring_app = typer.Typer(help="Manage recurring transactions.")
invest_app = typer.Typer(help="Manage investments.")
settings_app = typer.Typer(help="View and change settings.")
alert_app = typer.Typer(help="Manage monthly spending alerts.")

app.add_typer(goal_app, name="goal")
app.add_typer(recurring_app, name="recurring")
app.add_typer(invest_app, name="invest")
app.add_typer(settings_app, name="settings")
app.add_typer(alert_app, name="alert")

OFFLINE_OPTION = typer.Option(False, "--offline", help="Use the local clock instead of the time source")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Personal finance tracker with savings goals and recurring transactions."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Discard the existing store and settings and start empty"),
    migrate: bool = typer.Option(False, "--migrate", help="Keep existing data and add any missing store documents"),
) -> None:
    """Create the fingestor store and settings file."""
    init_command(force, migrate)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: ~/.fingestor/backups)"),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command()
def add(
    description: str,
    amount: str = typer.Argument(..., help="Amount (always positive, e.g. 12.50)"),
    type: str = typer.Option("expense", "--type", "-t", help="income, expense or transfer"),
    category: str = typer.Option(None, "--category", "-c", help="Category (default: Other)"),
    on: str = typer.Option(None, "--date", "-d", help="Transaction date (default: today)"),
    repeat: str = typer.Option(None, "--repeat", "-r", help="Recur daily, weekly, monthly or yearly"),
    times: int = typer.Option(None, "--times", help="Stop after this many repetitions"),
    until: str = typer.Option(None, "--until", help="Stop repeating after this date"),
) -> None:
    """Record a transaction."""
    add_command(description, amount, type, category, on, repeat, times, until)


@app.command()
def delete(transaction_id: str) -> None:
    """Delete a transaction."""
    delete_command(transaction_id)


@app.command(name="list")
def list_transactions(
    limit: int = typer.Option(50, help="Maximum transactions to show"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all your transactions"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """List your transactions."""
    list_command(limit, all, month)


@app.command(name="import")
def import_transactions(file_path: str) -> None:
    """Import transactions from a CSV or Excel (.xlsx, .xls) file."""
    import_command(file_path)


@app.command()
def export(file_path: str = typer.Argument("extrato_fingestor.csv")) -> None:
    """Export transactions to a CSV file, or to Excel when the path ends in .xlsx."""
    export_command(file_path)


@app.command()
def balance(offline: bool = OFFLINE_OPTION) -> None:
    """Show your balance and savings."""
    balance_command(offline)


@app.command()
def report(
    sort_by: str = typer.Option("value", help="Sort by 'value' or 'alpha'"),
    histogram: bool = typer.Option(True, help="Show histogram of your spending"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all time"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    offline: bool = OFFLINE_OPTION,
) -> None:
    """Show your spending breakdown and alerts."""
    report_command(sort_by, histogram, all, month, offline)


@goal_app.command("add")
def goal_add(
    title: str,
    target: str = typer.Argument(..., help="Target amount"),
    current: str = typer.Option("0", "--current", help="Amount already saved"),
) -> None:
    """Create a savings goal."""
    goals.add_command(title, target, current)


@goal_app.command("delete")
def goal_delete(goal_id: str) -> None:
    """Delete a savings goal."""
    goals.delete_command(goal_id)


@goal_app.command("list")
def goal_list(offline: bool = OFFLINE_OPTION) -> None:
    """List savings goals."""
    goals.list_command(offline)


@goal_app.command("allocate")
def goal_allocate(goal_id: str, offline: bool = OFFLINE_OPTION) -> None:
    """Move the allocation percentage of your balance into a goal."""
    goals.allocate_command(goal_id, offline)


@recurring_app.command("list")
def recurring_list(
    all: bool = typer.Option(False, "--all", "-a", help="Include finished schedules"),
) -> None:
    """List recurring schedules."""
    recurring.list_command(all)


@recurring_app.command("process")
def recurring_process(offline: bool = OFFLINE_OPTION) -> None:
    """Generate all recurring transactions due up to today."""
    recurring.process_command(offline)


@recurring_app.command("stop")
def recurring_stop(schedule_id: str) -> None:
    """Stop a recurring schedule."""
    recurring.stop_command(schedule_id)


@invest_app.command("add")
def invest_add(
    name: str,
    invested: str = typer.Argument(..., help="Invested value"),
    type: str = typer.Option("Market buy", "--type", "-t", help="Market buy, Market sell, Dividend, Deposit, ..."),
    price: float = typer.Option(0.0, "--price", help="Price per share"),
    shares: float = typer.Option(None, "--shares", help="Number of shares (default: value / price)"),
    ticker: str = typer.Option(None, "--ticker"),
    isin: str = typer.Option(None, "--isin"),
    on: str = typer.Option(None, "--date", "-d", help="Date (default: today)"),
    notes: str = typer.Option(None, "--notes"),
) -> None:
    """Record an investment."""
    investments.add_command(name, invested, type, price, shares, ticker, isin, on, notes)


@invest_app.command("delete")
def invest_delete(investment_id: str) -> None:
    """Delete an investment."""
    investments.delete_command(investment_id)


@invest_app.command("list")
def invest_list(search: str = typer.Option("", "--search", "-s", help="Filter by name, ticker or ISIN")) -> None:
    """List investments."""
    investments.list_command(search)


@invest_app.command("summary")
def invest_summary() -> None:
    """Show portfolio totals."""
    investments.summary_command()


@invest_app.command("import")
def invest_import(file_path: str) -> None:
    """Import investments from a CSV or Excel (.xlsx, .xls) file."""
    investments.import_command(file_path)


@invest_app.command("export")
def invest_export(file_path: str = typer.Argument("investimentos_fingestor.csv")) -> None:
    """Export investments to a CSV file, or to Excel when the path ends in .xlsx."""
    investments.export_command(file_path)


@settings_app.command("show")
def settings_show() -> None:
    """Show settings."""
    settings.show_command()


@settings_app.command("set")
def settings_set(name: str, value: str) -> None:
    """Change a setting (e.g. allocation-percentage 15)."""
    settings.set_command(name, value)


@alert_app.command("add")
def alert_add(category: str, limit: str = typer.Argument(..., help="Monthly limit")) -> None:
    """Add a monthly spending alert."""
    settings.alert_add_command(category, limit)


@alert_app.command("delete")
def alert_delete(alert_id: str) -> None:
    """Delete a spending alert."""
    settings.alert_delete_command(alert_id)


@alert_app.command("list")
def alert_list() -> None:
    """List spending alerts."""
    settings.alert_list_command()


if __name__ == "__main__":
    app()
