"""Tests for cookiecare.utils.retry: linear backoff retries."""

from __future__ import annotations

import asyncio

import pytest

from cookiecare.utils import retry


class _Flaky:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return "ok"


class TestBackoffDelay:
    @pytest.mark.parametrize(("attempt", "expected"), [(0, 1500), (1, 3000), (2, 4500)])
    def test_linear(self, attempt: int, expected: int) -> None:
        assert retry.backoff_delay_ms(attempt, 1500) == expected


class TestWithRetry:
    """Tests for with_retry()."""

    @pytest.mark.asyncio
    async def test_first_attempt(self) -> None:
        fn = _Flaky(0)
        assert await retry.with_retry(fn, base_delay_ms=0) == "ok"
        assert fn.calls == 1

    @pytest.mark.asyncio
    async def test_fail_fail_success(self) -> None:
        fn = _Flaky(2)
        assert await retry.with_retry(fn, max_retries=2, base_delay_ms=0) == "ok"
        assert fn.calls == 3

    @pytest.mark.asyncio
    async def test_exhausted_raises_last_error(self) -> None:
        fn = _Flaky(5)
        with pytest.raises(RuntimeError, match="failure 3"):
            await retry.with_retry(fn, max_retries=2, base_delay_ms=0)
        assert fn.calls == 3

    @pytest.mark.asyncio
    async def test_waits_between_attempts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        delays: list[float] = []

        async def _fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr(retry.asyncio, "sleep", _fake_sleep)
        with pytest.raises(RuntimeError):
            await retry.with_retry(_Flaky(5), max_retries=2, base_delay_ms=1500)
        assert delays == [1.5, 3.0]

    @pytest.mark.asyncio
    async def test_cancellation_not_retried(self) -> None:
        calls = 0

        async def _cancelled() -> None:
            nonlocal calls
            calls += 1
            raise asyncio.CancelledError

        with pytest.raises(asyncio.CancelledError):
            await retry.with_retry(_cancelled, base_delay_ms=0)
        assert calls == 1
