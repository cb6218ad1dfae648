"""
Known tracker domains for request classification.

A request counts as a tracker when its full URL *contains* one of
these entries.  Entries overlap (``clarity.ms`` / ``c.clarity.ms``),
so list order matters: the first entry found is the provider
recorded for the request.
"""

from __future__ import annotations

from cookiecare.models import scan

KNOWN_TRACKER_DOMAINS: tuple[str, ...] = (
    # Google
    "google-analytics.com",
    "googletagmanager.com",
    "analytics.google.com",
    "doubleclick.net",
    "googleadservices.com",
    "googlesyndication.com",
    # Meta
    "connect.facebook.net",
    "facebook.com/tr",
    # Session replay / heatmaps
    "c.clarity.ms",
    "clarity.ms",
    "hotjar.com",
    "hotjar.io",
    "hjid.hotjar.com",
    # Marketing automation
    "hubspot.com",
    "hs-analytics.net",
    "track.hubspot.com",
    # Social advertising
    "linkedin.com/px",
    "ads.linkedin.com",
    "twitter.com/i/ads",
    "ads-twitter.com",
    "bing.com/ads",
    # Optimisation / SEO
    "semrush.com",
    "optimizely.com",
    "vwo.com",
    "crazyegg.com",
    # Content recommendation / retargeting
    "taboola.com",
    "outbrain.com",
    "criteo.com",
    # Share widgets
    "addthis.com",
    "sharethis.com",
    # Tealium
    "tiqcdn.com",
)


def match_tracker(
    url: str,
    domains: tuple[str, ...] = KNOWN_TRACKER_DOMAINS,
) -> str | None:
    """Return the first tracker entry contained in *url*, or ``None``."""
    return next((domain for domain in domains if domain in url), None)


def classify_request(url: str) -> scan.TrackerObservation | None:
    """Turn a request URL into a ``TrackerObservation`` if it is a tracker."""
    provider = match_tracker(url)
    if provider is None:
        return None
    return scan.TrackerObservation(provider=provider, url=url)
