"""JSON document mapping for stored records.

Documents use camelCase field names and store amounts as decimals in major
units (12.5, not 1250). Money stays in cents everywhere else.
"""

from datetime import date
from typing import Any

from fingestor.domain.models import (
    Alert,
    AppConfig,
    CategoryName,
    Description,
    Goal,
    Investment,
    Money,
    RecurringSchedule,
    Transaction,
    to_major,
    to_money,
)


def _date_or_none(value: Any) -> date | None:
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


def transaction_to_dict(txn: Transaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "date": txn.date.isoformat(),
        "description": txn.description,
        "amount": to_major(txn.amount),
        "type": txn.type,
        "category": txn.category,
    }


def transaction_from_dict(data: dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(data["id"]),
        date=date.fromisoformat(str(data["date"])[:10]),
        description=Description(data.get("description", "")),
        amount=Money(abs(to_money(data["amount"]))),
        type=data["type"],
        category=CategoryName(data.get("category", "")),
    )


def goal_to_dict(goal: Goal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "targetAmount": to_major(goal.target_amount),
        "currentAmount": to_major(goal.current_amount),
    }


def goal_from_dict(data: dict[str, Any]) -> Goal:
    return Goal(
        id=str(data["id"]),
        title=data["title"],
        target_amount=to_money(data["targetAmount"]),
        current_amount=Money(max(0, to_money(data.get("currentAmount", 0)))),
    )


def investment_to_dict(inv: Investment) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": inv.id,
        "name": inv.name,
        "type": inv.type,
        "date": inv.date.isoformat(),
        "pricePerShare": inv.price_per_share,
        "investedValue": to_major(inv.invested_value),
        "shares": inv.shares,
    }
    for key, value in (("ticker", inv.ticker), ("isin", inv.isin), ("notes", inv.notes)):
        if value is not None:
            data[key] = value
    return data


def investment_from_dict(data: dict[str, Any]) -> Investment:
    return Investment(
        id=str(data["id"]),
        name=data["name"],
        type=data["type"],
        date=date.fromisoformat(str(data["date"])[:10]),
        price_per_share=float(data.get("pricePerShare", 0)),
        invested_value=Money(abs(to_money(data.get("investedValue", 0)))),
        shares=float(data.get("shares", 0)),
        ticker=data.get("ticker") or None,
        isin=data.get("isin") or None,
        notes=data.get("notes") or None,
    )


def schedule_to_dict(schedule: RecurringSchedule) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": schedule.id,
        "description": schedule.description,
        "amount": to_major(schedule.amount),
        "type": schedule.type,
        "category": schedule.category,
        "frequency": schedule.frequency,
        "startDate": schedule.start_date.isoformat(),
        "active": schedule.active,
        "endCondition": schedule.end_condition,
        "processedCount": schedule.processed_count,
    }
    if schedule.last_processed_date is not None:
        data["lastProcessedDate"] = schedule.last_processed_date.isoformat()
    if schedule.occ_count is not None:
        data["occCount"] = schedule.occ_count
    if schedule.occ_until is not None:
        data["occUntil"] = schedule.occ_until.isoformat()
    return data


def schedule_from_dict(data: dict[str, Any]) -> RecurringSchedule:
    occ_count = data.get("occCount")
    return RecurringSchedule(
        id=str(data["id"]),
        description=Description(data.get("description", "")),
        amount=Money(abs(to_money(data["amount"]))),
        type=data["type"],
        category=CategoryName(data.get("category", "")),
        frequency=data["frequency"],
        start_date=date.fromisoformat(str(data["startDate"])[:10]),
        last_processed_date=_date_or_none(data.get("lastProcessedDate")),
        active=bool(data.get("active", True)),
        end_condition=data.get("endCondition") or "count",
        occ_count=int(occ_count) if occ_count not in (None, "") else None,
        occ_until=_date_or_none(data.get("occUntil")),
        processed_count=int(data.get("processedCount", 0)),
    )


def alert_to_dict(alert: Alert) -> dict[str, Any]:
    return {"id": alert.id, "category": alert.category, "limit": to_major(alert.limit)}


def alert_from_dict(data: dict[str, Any]) -> Alert:
    return Alert(id=str(data["id"]), category=CategoryName(data["category"]), limit=to_money(data["limit"]))


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    return {
        "allocationPercentage": config.allocation_percentage,
        "currency": config.currency,
        "language": config.language,
        "userName": config.user_name,
        "theme": config.theme,
        "showDashboardCharts": config.show_dashboard_charts,
        "dashboardChartType": config.dashboard_chart_type,
        "showInvestmentCharts": config.show_investment_charts,
        "investmentChartType": config.investment_chart_type,
        "alerts": [alert_to_dict(a) for a in config.alerts],
        "recurringSchedules": [schedule_to_dict(s) for s in config.recurring_schedules],
    }


def config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Build an AppConfig, falling back to defaults for missing settings."""
    defaults = AppConfig()
    return AppConfig(
        allocation_percentage=int(data.get("allocationPercentage", defaults.allocation_percentage)),
        currency=data.get("currency", defaults.currency),
        language=data.get("language", defaults.language),
        user_name=data.get("userName", defaults.user_name),
        theme=data.get("theme", defaults.theme),
        show_dashboard_charts=bool(data.get("showDashboardCharts", defaults.show_dashboard_charts)),
        dashboard_chart_type=data.get("dashboardChartType", defaults.dashboard_chart_type),
        show_investment_charts=bool(data.get("showInvestmentCharts", defaults.show_investment_charts)),
        investment_chart_type=data.get("investmentChartType", defaults.investment_chart_type),
        alerts=tuple(alert_from_dict(a) for a in data.get("alerts", [])),
        recurring_schedules=tuple(schedule_from_dict(s) for s in data.get("recurringSchedules", [])),
    )
