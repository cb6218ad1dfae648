"""
Tri-state consent capture.

Drives one browser session through the pre-consent, post-rejection
and post-acceptance states, snapshotting the cookie jar and tracker
requests in each.  Every step runs strictly in sequence on the
session's single page.
"""

from __future__ import annotations

from playwright import async_api

from cookiecare.analysis import tracker_patterns
from cookiecare.browser import session as browser_session
from cookiecare.config import get_settings
from cookiecare.consent import click
from cookiecare.models import scan
from cookiecare.utils import image, logger

log = logger.create_logger("Capture")


async def capture_page_data(
    session: browser_session.BrowserSession,
) -> scan.PageCapture:
    """Reload the page, recording tracker requests, then read cookies.

    The request listener is attached only for the reload itself so
    that traffic from earlier or later steps never leaks into this
    snapshot.
    """
    trackers: set[scan.TrackerObservation] = set()

    def _on_request(request: async_api.Request) -> None:
        tracker = tracker_patterns.classify_request(request.url)
        if tracker is not None:
            trackers.add(tracker)

    async with session.listen_requests(_on_request):
        await session.reload()

    cookies = await session.get_cookies()
    return scan.PageCapture(cookies=cookies, trackers=trackers)


def _log_capture(state: scan.ConsentState, capture: scan.PageCapture) -> None:
    log.info(
        f"Captured {state} state",
        {"cookies": len(capture.cookies), "trackers": len(capture.trackers)},
    )


async def capture_consent_states(
    session: browser_session.BrowserSession,
    url: str,
) -> scan.TriStateCapture:
    """Run the full tri-state capture against *url*.

    1. Navigate (bounded by the navigation timeout) and screenshot.
    2. Capture the pre-consent state.
    3. Reject consent, capture the post-rejection state.
    4. Reload to clear rejection side effects, accept consent,
       capture the post-acceptance state.

    Raises:
        errors.NavigationError: The initial page load failed.
    """
    settings = get_settings()

    log.subsection("Capturing pre-consent state")
    await session.navigate_to(url)
    png = await session.take_screenshot()
    screenshot_base64 = image.png_to_base64_jpeg(png, quality=settings.screenshot_quality)
    pre_consent = await capture_page_data(session)
    _log_capture(scan.PRE_CONSENT, pre_consent)

    log.subsection("Capturing post-rejection state")
    await click.handle_consent(session.page, "reject")
    post_rejection = await capture_page_data(session)
    _log_capture(scan.POST_REJECTION, post_rejection)

    log.subsection("Capturing post-acceptance state")
    await session.reload()
    await click.handle_consent(session.page, "accept")
    post_acceptance = await capture_page_data(session)
    _log_capture(scan.POST_ACCEPTANCE, post_acceptance)

    return scan.TriStateCapture(
        screenshot_base64=screenshot_base64,
        pre_consent=pre_consent,
        post_rejection=post_rejection,
        post_acceptance=post_acceptance,
    )
