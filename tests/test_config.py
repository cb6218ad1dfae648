"""Tests for cookiecare.config: scan settings."""

from __future__ import annotations

import pydantic
import pytest

from cookiecare import config


class TestScanSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("COOKIECARE_SETTLE_DELAY_MS")
        monkeypatch.delenv("COOKIECARE_RETRY_BASE_DELAY_MS")
        settings = config.ScanSettings()
        assert settings.navigation_timeout_ms == 45_000
        assert settings.settle_delay_ms == 1500
        assert settings.batch_size == 15
        assert settings.batch_max_retries == 2
        assert settings.retry_base_delay_ms == 1500
        assert settings.screenshot_quality == 70
        assert (settings.viewport_width, settings.viewport_height) == (1920, 1080)
        assert "Chrome/108" in settings.user_agent

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKIECARE_BATCH_SIZE", "5")
        assert config.ScanSettings().batch_size == 5

    def test_rejects_zero_batch_size(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKIECARE_BATCH_SIZE", "0")
        with pytest.raises(pydantic.ValidationError):
            config.ScanSettings()

    def test_get_settings_cached(self) -> None:
        assert config.get_settings() is config.get_settings()
