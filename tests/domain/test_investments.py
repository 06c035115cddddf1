"""Tests for fingestor.domain.investments pure functions."""

from datetime import date

from fingestor.domain.investments import (
    parse_investment_row,
    search_investments,
    shares_for,
    summarize_portfolio,
    to_export_row,
    validate_investment,
)
from fingestor.domain.models import Investment, InvestmentAction, Money

TODAY = date(2025, 4, 1)


def _inv(inv_id: str, type: InvestmentAction, value: int, name: str = "Vanguard FTSE", ticker: str | None = "VWCE") -> Investment:
    return Investment(
        id=inv_id,
        name=name,
        type=type,
        date=TODAY,
        price_per_share=100.0,
        invested_value=Money(value),
        shares=1.0,
        ticker=ticker,
    )


class TestSharesFor:
    """Tests for shares_for."""

    def test_divides_value_by_price(self) -> None:
        """Should compute shares from value and price."""
        assert shares_for(Money(10000), 30.0) == 3.333333

    def test_zero_price(self) -> None:
        """Should return zero shares without a price."""
        assert shares_for(Money(10000), 0.0) == 0.0


class TestValidateInvestment:
    """Tests for validate_investment."""

    def test_valid(self) -> None:
        """Should accept a buy with a value."""
        assert validate_investment("ETF", "Market buy", Money(100)) == (True, None)

    def test_dividend_without_value(self) -> None:
        """Should allow dividends with no value."""
        assert validate_investment("ETF", "Dividend", Money(0)) == (True, None)

    def test_buy_without_value(self) -> None:
        """Should require a value for trades."""
        assert validate_investment("ETF", "Market buy", Money(0)) == (False, "Invested value is required")

    def test_unknown_action(self) -> None:
        """Should reject unknown actions."""
        valid, _ = validate_investment("ETF", "Short", Money(100))
        assert not valid


class TestSummarizePortfolio:
    """Tests for summarize_portfolio."""

    def test_cash_and_net_invested(self) -> None:
        """Should derive cash balance and net invested from every action."""
        investments = [
            _inv("1", "Deposit", 100000),
            _inv("2", "Market buy", 60000),
            _inv("3", "Market buy", 10000, name="Apple", ticker="AAPL"),
            _inv("4", "Market sell", 5000),
            _inv("5", "Dividend", 300),
            _inv("6", "Withdrawal", 2000),
        ]

        summary = summarize_portfolio(investments)

        assert summary.cash_balance == Money(100000 - 2000 - 70000 + 5000 + 300)
        assert summary.net_invested == Money(65000)
        assert summary.allocation == {"VWCE": Money(60000), "AAPL": Money(10000)}

    def test_allocation_falls_back_to_name(self) -> None:
        """Should group by name when there is no ticker."""
        summary = summarize_portfolio([_inv("1", "Market buy", 500, name="Gold", ticker=None)])
        assert summary.allocation == {"Gold": Money(500)}


class TestSearchInvestments:
    """Tests for search_investments."""

    def test_matches_name_ticker_and_isin(self) -> None:
        """Should match case-insensitively and return newest first."""
        investments = [
            _inv("1", "Market buy", 100, name="Vanguard", ticker="VWCE"),
            Investment(
                id="2",
                name="Apple",
                type="Market buy",
                date=TODAY,
                price_per_share=1.0,
                invested_value=Money(100),
                shares=1.0,
                isin="US0378331005",
            ),
            _inv("3", "Market buy", 100, name="Vanguard Bonds", ticker="VAGF"),
        ]

        assert [i.id for i in search_investments(investments, "vanguard")] == ["3", "1"]
        assert [i.id for i in search_investments(investments, "us037")] == ["2"]
        assert [i.id for i in search_investments(investments, "")] == ["3", "2", "1"]


class TestParseInvestmentRow:
    """Tests for parse_investment_row."""

    def test_broker_row(self) -> None:
        """Should parse a broker history row and normalise dividend actions."""
        row = {
            "Action": "Dividend (Ordinary)",
            "Time": "2025-03-14 09:30:00",
            "ISIN": "ie00bk5bqt80",
            "Ticker": "vwce",
            "Name": "Vanguard FTSE All-World",
            "No. of shares": "2.5",
            "Price / share": "0.31",
            "Total": "0.78",
        }

        inv = parse_investment_row(row, TODAY, make_id=lambda: "gen")

        assert inv is not None
        assert inv.id == "gen"
        assert inv.type == "Dividend"
        assert inv.date == date(2025, 3, 14)
        assert inv.ticker == "VWCE"
        assert inv.isin == "IE00BK5BQT80"
        assert inv.shares == 2.5
        assert inv.invested_value == Money(78)

    def test_unknown_action_skipped(self) -> None:
        """Should skip rows with unsupported actions."""
        assert parse_investment_row({"Action": "Currency conversion", "Total": "5"}, TODAY) is None

    def test_out_of_range_total_skipped(self) -> None:
        """Should skip rows whose total is too large to hold in cents."""
        assert parse_investment_row({"Action": "Market buy", "Total": "1e30"}, TODAY) is None

    def test_defaults(self) -> None:
        """Should default to a buy dated today."""
        inv = parse_investment_row({"name": "ETF", "investedValue": "12.5"}, TODAY, make_id=lambda: "gen")

        assert inv is not None
        assert inv.type == "Market buy"
        assert inv.date == TODAY
        assert inv.invested_value == Money(1250)
        assert inv.ticker is None


class TestToExportRow:
    """Tests for to_export_row."""

    def test_blank_optional_fields(self) -> None:
        """Should export missing optional fields as empty strings."""
        row = to_export_row(_inv("1", "Market buy", 1050, ticker=None))
        assert row["Ticker"] == ""
        assert row["Notes"] == ""
        assert row["InvestedValue"] == 10.5
