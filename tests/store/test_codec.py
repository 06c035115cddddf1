"""Tests for fingestor.store.codec document mapping."""

from datetime import date

from fingestor.domain.models import AppConfig, CategoryName, Description, Money, RecurringSchedule
from fingestor.store.codec import config_from_dict, goal_from_dict, schedule_from_dict, schedule_to_dict


class TestScheduleDocuments:
    """Tests for schedule_to_dict and schedule_from_dict."""

    def test_optional_fields_omitted(self) -> None:
        """Should leave unset optional fields out of the document."""
        schedule = RecurringSchedule(
            id="s1",
            description=Description("Rent"),
            amount=Money(75000),
            type="expense",
            category=CategoryName("Housing"),
            frequency="monthly",
            start_date=date(2025, 1, 1),
        )

        data = schedule_to_dict(schedule)

        assert data["amount"] == 750.0
        assert data["startDate"] == "2025-01-01"
        assert "lastProcessedDate" not in data
        assert "occCount" not in data
        assert "occUntil" not in data

    def test_minimal_document(self) -> None:
        """Should default missing fields when loading."""
        schedule = schedule_from_dict(
            {
                "id": "s1",
                "description": "Rent",
                "amount": 750,
                "type": "expense",
                "category": "Housing",
                "frequency": "monthly",
                "startDate": "2025-01-01T00:00:00.000Z",
            }
        )

        assert schedule.active
        assert schedule.end_condition == "count"
        assert schedule.occ_count is None
        assert schedule.processed_count == 0
        assert schedule.start_date == date(2025, 1, 1)


class TestGoalDocuments:
    """Tests for goal_from_dict."""

    def test_negative_saved_amount_is_clamped(self) -> None:
        """Should never load a negative saved amount."""
        goal = goal_from_dict({"id": "g", "title": "Car", "targetAmount": 5000, "currentAmount": -12.5})
        assert goal.current_amount == Money(0)


class TestConfigDocuments:
    """Tests for config_from_dict."""

    def test_empty_document_gives_defaults(self) -> None:
        """Should fill every setting with its default."""
        assert config_from_dict({}) == AppConfig()

    def test_partial_document(self) -> None:
        """Should keep stored settings and default the rest."""
        config = config_from_dict({"allocationPercentage": 15, "currency": "$"})
        assert config.allocation_percentage == 15
        assert config.currency == "$"
        assert config.language == "pt"
