"""
Scan configuration.

Tunables for browser capture, consent interaction and batched
classification.  Bound to ``COOKIECARE_*`` environment variables
via ``pydantic_settings.BaseSettings``.
"""

from __future__ import annotations

import functools

import pydantic
import pydantic_settings

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    " (KHTML, like Gecko) Chrome/108.0.0.0 Safari/537.36"
)


class ScanSettings(pydantic_settings.BaseSettings):
    """Runtime settings for a tri-state consent scan.

    Attributes:
        navigation_timeout_ms: Hard limit for the initial page load.
        settle_delay_ms: Pause after a consent click so injected
            scripts can run.
        batch_size: Maximum entities per classification call.
        batch_max_retries: Extra attempts for a failing batch.
        retry_base_delay_ms: Backoff unit; attempt *n* waits ``n × base``.
        screenshot_quality: JPEG quality of the report screenshot.
        user_agent: Fixed desktop user agent for the page context.
        viewport_width: Page viewport width.
        viewport_height: Page viewport height.
    """

    model_config = pydantic_settings.SettingsConfigDict(env_prefix="COOKIECARE_")

    navigation_timeout_ms: int = pydantic.Field(default=45_000, gt=0)
    settle_delay_ms: int = pydantic.Field(default=1500, ge=0)
    batch_size: int = pydantic.Field(default=15, gt=0)
    batch_max_retries: int = pydantic.Field(default=2, ge=0)
    retry_base_delay_ms: int = pydantic.Field(default=1500, ge=0)
    screenshot_quality: int = pydantic.Field(default=70, ge=1, le=95)
    user_agent: str = DESKTOP_USER_AGENT
    viewport_width: int = 1920
    viewport_height: int = 1080


@functools.lru_cache(maxsize=1)
def get_settings() -> ScanSettings:
    """Get the process-wide ``ScanSettings``."""
    return ScanSettings()
