"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from cookiecare.config import get_settings
from cookiecare.models import scan
from tests._fakes import FakeAssessor, FakeClassifier, make_cookie, make_tracker

# ── Settings ────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch: pytest.MonkeyPatch):
    """Zero out consent-click and retry delays for every test."""
    monkeypatch.setenv("COOKIECARE_SETTLE_DELAY_MS", "0")
    monkeypatch.setenv("COOKIECARE_RETRY_BASE_DELAY_MS", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ── Observations ────────────────────────────────────────────────


@pytest.fixture()
def session_cookie() -> scan.CookieObservation:
    """A first-party session cookie."""
    return make_cookie("session_id", "www.example.com", http_only=True, secure=True)


@pytest.fixture()
def analytics_cookie() -> scan.CookieObservation:
    """A Google Analytics cookie with a long expiry."""
    return make_cookie("_ga", ".example.com", expires=1893456000)


@pytest.fixture()
def ga_tracker() -> scan.TrackerObservation:
    """A Google Analytics collect request."""
    return make_tracker("https://www.google-analytics.com/g/collect?v=2")


# ── Agents ──────────────────────────────────────────────────────


@pytest.fixture()
def classifier() -> FakeClassifier:
    """Classifier answering every item as ``Necessary``."""
    return FakeClassifier()


@pytest.fixture()
def assessor() -> FakeAssessor:
    """Assessor answering ``Low`` for both regulations."""
    return FakeAssessor()
