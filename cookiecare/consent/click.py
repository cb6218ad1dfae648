"""
Keyword-driven consent button clicking.

Searches the main frame and then every other live frame for an
accept or reject control.  Detection is a best-effort heuristic:
no match means the banner was absent or not recognised, and the
scan continues with whatever state the page is in.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from playwright import async_api

from cookiecare.config import get_settings
from cookiecare.consent import constants
from cookiecare.utils import errors, logger

log = logger.create_logger("Consent-Click")


async def find_and_click_button(
    frame: async_api.Frame,
    keywords: Sequence[str],
    *,
    settle_delay_ms: int | None = None,
) -> bool:
    """Click the first control in *frame* matching a keyword.

    Keywords are tried in order; for each one the whole frame is
    searched, so an earlier keyword beats an earlier DOM element.

    After a click, waits ``settle_delay_ms`` so that scripts injected
    by the consent manager have time to run.

    A frame that throws while being searched is skipped for that
    keyword (and logged) unless it has detached, in which case it is
    abandoned silently.

    Returns:
        ``True`` when a control was clicked.
    """
    if settle_delay_ms is None:
        settle_delay_ms = get_settings().settle_delay_ms

    for keyword in keywords:
        try:
            clicked = await frame.evaluate(
                constants.FIND_AND_CLICK_SCRIPT,
                [constants.CLICKABLE_SELECTOR, keyword],
            )
        except Exception as error:
            if frame.is_detached():
                return False
            log.warn(
                "Frame evaluation failed",
                {"frame": frame.url[:80], "keyword": keyword, "error": errors.get_error_message(error)},
            )
            continue

        if clicked:
            log.success("Clicked consent button", {"keyword": keyword, "frame": frame.url[:80]})
            await asyncio.sleep(settle_delay_ms / 1000)
            return True

    return False


async def handle_consent(
    page: async_api.Page,
    action: constants.ConsentAction,
    *,
    settle_delay_ms: int | None = None,
) -> bool:
    """Accept or reject consent on *page*.

    Searches the main frame first, then each other non-detached frame
    in document order, stopping at the first successful click.

    Returns:
        Whether any control was activated.
    """
    log.info(f"Attempting to {action} consent...")
    keywords = constants.keywords_for(action)
    main_frame = page.main_frame

    if await find_and_click_button(main_frame, keywords, settle_delay_ms=settle_delay_ms):
        return True

    for frame in page.frames:
        if frame == main_frame or frame.is_detached():
            continue
        if await find_and_click_button(frame, keywords, settle_delay_ms=settle_delay_ms):
            return True

    log.info(f'No actionable button found for "{action}"')
    return False
