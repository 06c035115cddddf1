"""Pure functions for changing user settings and alerts.

Every function returns a new AppConfig together with an error message; the
config is unchanged whenever the error is set.
"""

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from fingestor.domain.models import Alert, AppConfig, CategoryName, Money
from fingestor.domain.recurrence import new_id
from fingestor.domain.savings import validate_allocation_percentage

_BOOLEAN_TRUE = ("true", "yes", "on", "1")
_BOOLEAN_FALSE = ("false", "no", "off", "0")

# setting name -> (field name, allowed values or None for free text)
SETTINGS: dict[str, tuple[str, tuple[str, ...] | None]] = {
    "allocation-percentage": ("allocation_percentage", None),
    "currency": ("currency", None),
    "language": ("language", ("pt", "en")),
    "user-name": ("user_name", None),
    "theme": ("theme", ("light", "dark", "auto")),
    "show-dashboard-charts": ("show_dashboard_charts", _BOOLEAN_TRUE + _BOOLEAN_FALSE),
    "dashboard-chart-type": ("dashboard_chart_type", ("pie", "bar")),
    "show-investment-charts": ("show_investment_charts", _BOOLEAN_TRUE + _BOOLEAN_FALSE),
    "investment-chart-type": ("investment_chart_type", ("pie", "bar")),
}


def _parse_value(field_name: str, raw: str) -> tuple[Any, str | None]:
    if field_name == "allocation_percentage":
        try:
            percentage = int(raw)
        except ValueError:
            return None, "Allocation percentage must be a whole number"
        valid, error = validate_allocation_percentage(percentage)
        return (percentage, None) if valid else (None, error)
    if field_name.startswith("show_"):
        return raw.lower() in _BOOLEAN_TRUE, None
    if not raw.strip():
        return None, "Value cannot be empty"
    return raw.strip(), None


def update_setting(config: AppConfig, name: str, raw: str) -> tuple[AppConfig, str | None]:
    """Change one setting by its CLI name.

    Args:
        config: Current config.
        name: Setting name (e.g. "allocation-percentage").
        raw: New value as typed by the user.

    Returns:
        Tuple of (config, error_message).
    """
    if name not in SETTINGS:
        return config, f"Unknown setting '{name}'. Available: {', '.join(SETTINGS)}"

    field_name, allowed = SETTINGS[name]
    if allowed is not None and raw.lower() not in allowed:
        return config, f"{name} must be one of: {', '.join(allowed)}"

    value, error = _parse_value(field_name, raw.lower() if allowed else raw)
    if error:
        return config, error

    return replace(config, **{field_name: value}), None


def setting_values(config: AppConfig) -> dict[str, Any]:
    """Current value of every setting keyed by CLI name."""
    return {name: getattr(config, field_name) for name, (field_name, _) in SETTINGS.items()}


def add_alert(
    config: AppConfig,
    category: str,
    limit: Money,
    make_id: Callable[[], str] = new_id,
) -> tuple[AppConfig, str | None]:
    """Add a monthly spending limit for a category.

    Returns:
        Tuple of (config, error_message).
    """
    if not category.strip():
        return config, "Category is required"
    if limit <= 0:
        return config, "Limit must be positive"
    if any(a.category == category.strip() for a in config.alerts):
        return config, f"An alert for '{category}' already exists"

    alert = Alert(id=make_id(), category=CategoryName(category.strip()), limit=limit)
    return replace(config, alerts=(*config.alerts, alert)), None


def remove_alert(config: AppConfig, alert_id: str) -> tuple[AppConfig, str | None]:
    """Remove an alert by id.

    Returns:
        Tuple of (config, error_message).
    """
    remaining = tuple(a for a in config.alerts if a.id != alert_id)
    if len(remaining) == len(config.alerts):
        return config, f"Alert {alert_id} not found"
    return replace(config, alerts=remaining), None
