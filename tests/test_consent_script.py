"""Tests for the in-page consent matcher running in headless Chromium."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from playwright import async_api

from cookiecare.consent import click, constants

_RECORD_CLICKS = "<script>document.addEventListener('click', e => { window.clicked = e.target.id; });</script>"


@pytest_asyncio.fixture
async def page() -> AsyncIterator[async_api.Page]:
    """A blank page in a real headless browser."""
    async with async_api.async_playwright() as playwright:
        try:
            browser = await playwright.chromium.launch(headless=True)
        except async_api.Error as exc:
            pytest.skip(f"Chromium is not installed: {exc.message.splitlines()[0]}")
        try:
            yield await browser.new_page()
        finally:
            await browser.close()


async def _click(page: async_api.Page, body: str, keywords: tuple[str, ...]) -> str | None:
    """Load *body*, run the matcher in the main frame, return the clicked id."""
    await page.set_content(f"<html><body>{body}{_RECORD_CLICKS}</body></html>")
    if not await click.find_and_click_button(page.main_frame, keywords, settle_delay_ms=0):
        return None
    return await page.evaluate("window.clicked || null")


class TestClickableKinds:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            '<button id="target">Reject all</button>',
            '<a id="target" href="#">Reject all</a>',
            '<div id="target" role="button">Reject all</div>',
            '<input id="target" type="submit" value="Reject all">',
            '<input id="target" type="button" value="Reject all">',
        ],
        ids=["button", "link", "role-button", "submit-input", "button-input"],
    )
    async def test_matched(self, page: async_api.Page, body: str) -> None:
        assert await _click(page, body, constants.REJECT_KEYWORDS) == "target"

    @pytest.mark.asyncio
    async def test_non_clickable_ignored(self, page: async_api.Page) -> None:
        assert await _click(page, '<span id="target">Reject all</span>', constants.REJECT_KEYWORDS) is None


class TestLabelSources:
    @pytest.mark.asyncio
    async def test_aria_label_on_icon_only_button(self, page: async_api.Page) -> None:
        body = '<button id="target" aria-label="Reject all">\n  <svg width="16" height="16"></svg>\n</button>'
        assert await _click(page, body, constants.REJECT_KEYWORDS) == "target"

    @pytest.mark.asyncio
    async def test_visible_text_trimmed_and_lower_cased(self, page: async_api.Page) -> None:
        body = '<button id="target">\n   ACCEPT ALL   \n</button>'
        assert await _click(page, body, ("accept all",)) == "target"

    @pytest.mark.asyncio
    async def test_visible_text_preferred_over_aria_label(self, page: async_api.Page) -> None:
        body = '<button id="target" aria-label="Reject all">Settings</button>'
        assert await _click(page, body, ("reject all",)) is None


class TestKeywordOrder:
    @pytest.mark.asyncio
    async def test_earlier_keyword_beats_earlier_element(self, page: async_api.Page) -> None:
        body = '<button id="plain">Accept</button><button id="specific">Accept all</button>'
        assert await _click(page, body, constants.ACCEPT_KEYWORDS) == "specific"

    @pytest.mark.asyncio
    async def test_first_matching_element_for_a_keyword(self, page: async_api.Page) -> None:
        body = '<button id="first">Reject all cookies</button><button id="second">Reject all</button>'
        assert await _click(page, body, constants.REJECT_KEYWORDS) == "first"


class TestHandleConsent:
    @pytest.mark.asyncio
    async def test_button_inside_iframe(self, page: async_api.Page) -> None:
        banner = "<button id='inner' onclick='window.clicked = this.id'>Reject all</button>"
        await page.set_content(f'<html><body><p>Article</p><iframe srcdoc="{banner}"></iframe></body></html>')
        [frame] = [f for f in page.frames if f is not page.main_frame]
        await frame.wait_for_selector("#inner")

        assert await click.handle_consent(page, "reject", settle_delay_ms=0) is True
        assert await frame.evaluate("window.clicked") == "inner"

    @pytest.mark.asyncio
    async def test_no_banner(self, page: async_api.Page) -> None:
        await page.set_content("<html><body><p>Nothing to consent to</p></body></html>")
        assert await click.handle_consent(page, "accept", settle_delay_ms=0) is False
