"""Pydantic models for consent-state observations, classification and scan results."""

from __future__ import annotations

from typing import Literal

import pydantic

from cookiecare.utils import serialization

# ── Consent states ──────────────────────────────────────────────

ConsentState = Literal["pre-consent", "post-rejection", "post-acceptance"]

PRE_CONSENT: ConsentState = "pre-consent"
POST_REJECTION: ConsentState = "post-rejection"
POST_ACCEPTANCE: ConsentState = "post-acceptance"

# Canonical processing and display order.
CONSENT_STATES: tuple[ConsentState, ...] = (PRE_CONSENT, POST_REJECTION, POST_ACCEPTANCE)

EntityKind = Literal["cookie", "tracker"]

CookieCategory = Literal["Necessary", "Functional", "Analytics", "Marketing", "Unknown"]
COOKIE_CATEGORIES: tuple[CookieCategory, ...] = ("Necessary", "Functional", "Analytics", "Marketing", "Unknown")

ComplianceStatus = Literal["Compliant", "Pre-Consent Violation", "Post-Rejection Violation", "Unknown"]

CookieParty = Literal["First", "Third"]

RiskLevel = Literal["Low", "Medium", "High", "Unknown"]
RISK_LEVELS: tuple[RiskLevel, ...] = ("Low", "Medium", "High", "Unknown")

UNKNOWN_PURPOSE = "No purpose determined."


# ── Raw observations ────────────────────────────────────────────


class CookieObservation(pydantic.BaseModel):
    """A cookie read from the browser's cookie jar at one capture point."""

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    domain: str
    path: str = "/"
    expires: float = -1
    session: bool = False
    http_only: bool = False
    secure: bool = False

    @property
    def key(self) -> str:
        """Identity key ``name|domain|path``."""
        return f"{self.name}|{self.domain}|{self.path}"

    @classmethod
    def from_browser_cookie(cls, cookie: dict) -> CookieObservation:
        """Build an observation from a Playwright cookie dict."""
        expires = float(cookie.get("expires", -1))
        return cls(
            name=cookie.get("name", ""),
            domain=cookie.get("domain", ""),
            path=cookie.get("path", "/"),
            expires=expires,
            session=expires == -1,
            http_only=cookie.get("httpOnly", False),
            secure=cookie.get("secure", False),
        )


class TrackerObservation(pydantic.BaseModel):
    """An outgoing request that matched a known tracker domain."""

    model_config = pydantic.ConfigDict(frozen=True)

    provider: str
    url: str

    @property
    def key(self) -> str:
        """Identity key ``provider|url``."""
        return f"{self.provider}|{self.url}"


Observation = CookieObservation | TrackerObservation


class PageCapture(pydantic.BaseModel):
    """Cookies and tracker requests observed during one reload."""

    cookies: list[CookieObservation] = pydantic.Field(default_factory=list)
    trackers: set[TrackerObservation] = pydantic.Field(default_factory=set)


class TriStateCapture(pydantic.BaseModel):
    """The three snapshots of one scan plus the report screenshot."""

    screenshot_base64: str
    pre_consent: PageCapture
    post_rejection: PageCapture
    post_acceptance: PageCapture

    def by_state(self) -> list[tuple[ConsentState, PageCapture]]:
        """Snapshots paired with their state, in canonical order."""
        return [
            (PRE_CONSENT, self.pre_consent),
            (POST_REJECTION, self.post_rejection),
            (POST_ACCEPTANCE, self.post_acceptance),
        ]


# ── Reconciled entities ─────────────────────────────────────────


class ReconciledEntity(pydantic.BaseModel):
    """One distinct cookie or tracker and every state it was seen in.

    ``data`` holds the most recently processed observation; attributes
    that differ between states are not merged.
    """

    key: str
    kind: EntityKind
    data: Observation
    states: set[ConsentState]

    def ordered_states(self) -> list[ConsentState]:
        """States in canonical order."""
        return [s for s in CONSENT_STATES if s in self.states]


class ClassificationResult(pydantic.BaseModel):
    """Category and compliance verdict for one entity."""

    key: str
    category: CookieCategory = "Unknown"
    purpose: str = ""
    compliance_status: ComplianceStatus = "Unknown"

    @classmethod
    def unknown(cls, key: str, *, purpose: str = UNKNOWN_PURPOSE) -> ClassificationResult:
        """Placeholder for an entity the classifier did not cover."""
        return cls(key=key, category="Unknown", purpose=purpose, compliance_status="Unknown")


# ── Compliance ──────────────────────────────────────────────────


class ViolationSummary(serialization.CamelModel):
    """Numeric summary sent for the final risk judgment."""

    pre_consent_violations: int = 0
    post_rejection_violations: int = 0
    total_marketing: int = 0
    total_analytics: int = 0
    total_items: int = 0

    @property
    def total_violations(self) -> int:
        """Pre-consent plus post-rejection violations."""
        return self.pre_consent_violations + self.post_rejection_violations


class ComplianceInfo(serialization.CamelModel):
    """Risk level and explanation for one regulation."""

    risk_level: RiskLevel
    assessment: str


class ComplianceReport(serialization.CamelModel):
    """GDPR and CCPA risk judgments."""

    gdpr: ComplianceInfo
    ccpa: ComplianceInfo


# ── Scan result ─────────────────────────────────────────────────


class CookieInfo(serialization.CamelModel):
    """Enriched cookie record in the scan result."""

    key: str
    name: str
    provider: str
    category: CookieCategory
    expiry: str
    purpose: str
    party: CookieParty
    is_http_only: bool
    is_secure: bool
    compliance_status: ComplianceStatus


class TrackerInfo(serialization.CamelModel):
    """Enriched tracker record in the scan result."""

    key: str
    url: str
    provider: str
    category: CookieCategory
    compliance_status: ComplianceStatus


class ScanResult(serialization.CamelModel):
    """The externally visible artifact of a scan."""

    cookies: list[CookieInfo]
    trackers: list[TrackerInfo]
    screenshot_base64: str
    compliance: ComplianceReport


class ScanRequest(pydantic.BaseModel):
    """Body of ``POST /scan``."""

    url: str | None = None
