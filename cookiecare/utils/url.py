"""
URL and domain helpers for scan targets and cookie ownership.
"""

from __future__ import annotations

from urllib import parse


def extract_hostname(url: str) -> str:
    """Extract the hostname from a URL string, or ``"unknown"``."""
    try:
        parsed = parse.urlparse(url)
        return parsed.hostname or "unknown"
    except ValueError:
        return "unknown"


def strip_www(hostname: str) -> str:
    """Drop a single leading ``www.`` label."""
    return hostname.removeprefix("www.")


def is_valid_scan_url(url: str) -> bool:
    """Whether *url* is an absolute http(s) URL with a host."""
    try:
        parsed = parse.urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)
