"""Tests for fingestor.timesource."""

from datetime import date

import pytest
import requests

from fingestor import timesource
from fingestor.timesource import fetch_today, parse_time_response


class _Response:
    def __init__(self, payload: object, status: int = 200) -> None:
        self._payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> object:
        return self._payload


class TestParseTimeResponse:
    """Tests for parse_time_response."""

    def test_worldtimeapi_field(self) -> None:
        """Should read the datetime field."""
        assert parse_time_response({"datetime": "2025-03-10T23:59:59.123456+00:00"}) == date(2025, 3, 10)

    def test_timeapi_field(self) -> None:
        """Should read the dateTime field."""
        assert parse_time_response({"dateTime": "2025-03-10T08:00:00"}) == date(2025, 3, 10)

    def test_non_object_payload(self) -> None:
        """Should raise ValueError when the body is not a JSON object."""
        with pytest.raises(ValueError):
            parse_time_response(["not", "a", "dict"])

    def test_missing_field(self) -> None:
        """Should raise KeyError without a datetime."""
        with pytest.raises(KeyError):
            parse_time_response({"unixtime": 0})


class TestFetchToday:
    """Tests for fetch_today."""

    def test_uses_remote_date(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should return the date from the time API."""
        calls = []

        def fake_get(url, headers=None, timeout=None):
            calls.append((url, timeout))
            return _Response({"datetime": "2031-01-02T00:00:00+00:00"})

        monkeypatch.setattr(timesource.requests, "get", fake_get)

        assert fetch_today("https://time.example/api", timeout=2.0) == date(2031, 1, 2)
        assert calls == [("https://time.example/api", 2.0)]

    def test_network_error_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fall back to the local clock when the request fails."""

        def fake_get(url, headers=None, timeout=None):
            raise requests.ConnectionError("offline")

        monkeypatch.setattr(timesource.requests, "get", fake_get)

        assert fetch_today("https://time.example/api") == date.today()

    def test_http_error_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fall back to the local clock on an HTTP error status."""
        monkeypatch.setattr(timesource.requests, "get", lambda url, headers=None, timeout=None: _Response({}, 503))

        assert fetch_today("https://time.example/api") == date.today()

    def test_bad_payload_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fall back to the local clock on an unexpected payload."""
        monkeypatch.setattr(
            timesource.requests, "get", lambda url, headers=None, timeout=None: _Response({"datetime": "not a date"})
        )

        assert fetch_today("https://time.example/api") == date.today()

    def test_list_payload_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fall back to the local clock when the body is a JSON list."""
        monkeypatch.setattr(
            timesource.requests, "get", lambda url, headers=None, timeout=None: _Response(["not", "a", "dict"])
        )

        assert fetch_today("https://time.example/api") == date.today()

    def test_no_url(self) -> None:
        """Should use the local clock when no source is configured."""
        assert fetch_today(None) == date.today()
