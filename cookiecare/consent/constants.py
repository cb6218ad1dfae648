"""Keyword lists and selectors for consent-button detection."""

from __future__ import annotations

from typing import Literal

ConsentAction = Literal["accept", "reject"]

# Ordered by specificity: the first keyword that matches any
# clickable element wins, regardless of DOM order.
ACCEPT_KEYWORDS: tuple[str, ...] = (
    "accept all",
    "allow all",
    "agree to all",
    "accept cookies",
    "agree",
    "accept",
    "allow",
    "i agree",
    "ok",
    "got it",
    "continue",
)

REJECT_KEYWORDS: tuple[str, ...] = (
    "reject all",
    "deny all",
    "decline all",
    "reject cookies",
    "disagree",
    "reject",
    "deny",
    "decline",
    "necessary only",
)

CLICKABLE_SELECTOR = 'button, a, [role="button"], input[type="submit"], input[type="button"]'

# Runs inside the frame.  Receives ``[selector, keyword]``; clicks the
# first element whose label contains the keyword and reports whether
# one was found.  The label is the first non-blank of visible text,
# text content, aria-label and value.
FIND_AND_CLICK_SCRIPT = r"""
([selector, keyword]) => {
    const elements = Array.from(document.querySelectorAll(selector));
    const target = elements.find(el => {
        const label = [
            el.innerText,
            el.textContent,
            el.getAttribute('aria-label'),
            el.value,
        ].map(source => (source || '').trim()).find(Boolean) || '';
        return label.toLowerCase().includes(keyword);
    });
    if (target) {
        target.click();
        return true;
    }
    return false;
}
"""


def keywords_for(action: ConsentAction) -> tuple[str, ...]:
    """Return the keyword list for a consent *action*."""
    return ACCEPT_KEYWORDS if action == "accept" else REJECT_KEYWORDS
