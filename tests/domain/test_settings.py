"""Tests for fingestor.domain.settings pure functions."""

from fingestor.domain.models import AppConfig, Money
from fingestor.domain.settings import add_alert, remove_alert, setting_values, update_setting


class TestUpdateSetting:
    """Tests for update_setting."""

    def test_allocation_percentage(self) -> None:
        """Should set a valid percentage."""
        config, error = update_setting(AppConfig(), "allocation-percentage", "25")
        assert error is None
        assert config.allocation_percentage == 25

    def test_allocation_percentage_out_of_range(self) -> None:
        """Should reject percentages outside 1-100 and keep the old value."""
        config, error = update_setting(AppConfig(), "allocation-percentage", "0")
        assert error == "Allocation percentage must be between 1 and 100"
        assert config.allocation_percentage == 10

    def test_allocation_percentage_not_a_number(self) -> None:
        """Should reject non-integer percentages."""
        _, error = update_setting(AppConfig(), "allocation-percentage", "ten")
        assert error == "Allocation percentage must be a whole number"

    def test_choice_setting(self) -> None:
        """Should accept allowed values case-insensitively."""
        config, error = update_setting(AppConfig(), "theme", "DARK")
        assert error is None
        assert config.theme == "dark"

    def test_choice_setting_rejects_other_values(self) -> None:
        """Should reject values outside the allowed set."""
        _, error = update_setting(AppConfig(), "language", "fr")
        assert error == "language must be one of: pt, en"

    def test_boolean_setting(self) -> None:
        """Should parse boolean words."""
        config, _ = update_setting(AppConfig(), "show-dashboard-charts", "off")
        assert config.show_dashboard_charts is False

    def test_free_text_setting(self) -> None:
        """Should keep free text as typed."""
        config, _ = update_setting(AppConfig(), "user-name", " Ana ")
        assert config.user_name == "Ana"

    def test_unknown_setting(self) -> None:
        """Should reject unknown names."""
        config, error = update_setting(AppConfig(), "colour", "blue")
        assert error is not None
        assert error.startswith("Unknown setting 'colour'")
        assert config == AppConfig()


class TestSettingValues:
    """Tests for setting_values."""

    def test_defaults(self) -> None:
        """Should list every setting by CLI name."""
        values = setting_values(AppConfig())
        assert values["allocation-percentage"] == 10
        assert values["currency"] == "€"
        assert values["user-name"] == "Investidor"


class TestAlerts:
    """Tests for add_alert and remove_alert."""

    def test_add_and_remove(self) -> None:
        """Should add an alert and remove it by id."""
        config, error = add_alert(AppConfig(), " Food ", Money(20000), make_id=lambda: "al-1")

        assert error is None
        assert len(config.alerts) == 1
        assert config.alerts[0].category == "Food"

        config, error = remove_alert(config, "al-1")
        assert error is None
        assert config.alerts == ()

    def test_duplicate_category(self) -> None:
        """Should reject a second alert for the same category."""
        config, _ = add_alert(AppConfig(), "Food", Money(20000))
        same, error = add_alert(config, "Food", Money(100))
        assert error == "An alert for 'Food' already exists"
        assert same == config

    def test_non_positive_limit(self) -> None:
        """Should reject a zero limit."""
        _, error = add_alert(AppConfig(), "Food", Money(0))
        assert error == "Limit must be positive"

    def test_remove_missing(self) -> None:
        """Should report an unknown alert id."""
        _, error = remove_alert(AppConfig(), "nope")
        assert error == "Alert nope not found"
