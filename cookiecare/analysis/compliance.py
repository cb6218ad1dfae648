"""
Compliance aggregation and report enrichment.

Summarises classification results into violation counts, obtains
the GDPR/CCPA risk judgment, and joins reconciled entities with
their classifications into the records shown in the report.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime

from cookiecare.agents import compliance_agent
from cookiecare.models import scan
from cookiecare.utils import logger
from cookiecare.utils import url as url_mod

log = logger.create_logger("Compliance")

NOTHING_DETECTED = "No cookies or trackers were detected."

_MINUTE = 60
_HOUR = 3600
_DAY = 86400
_MONTH = _DAY * 30
_YEAR = _DAY * 365


# ============================================================================
# Summary and risk
# ============================================================================


def summarise(
    results: Iterable[scan.ClassificationResult],
    total_items: int | None = None,
) -> scan.ViolationSummary:
    """Count violations and marketing/analytics entities."""
    results = list(results)
    return scan.ViolationSummary(
        pre_consent_violations=sum(r.compliance_status == "Pre-Consent Violation" for r in results),
        post_rejection_violations=sum(r.compliance_status == "Post-Rejection Violation" for r in results),
        total_marketing=sum(r.category == "Marketing" for r in results),
        total_analytics=sum(r.category == "Analytics" for r in results),
        total_items=len(results) if total_items is None else total_items,
    )


def normalize_risk_level(value: str | None) -> scan.RiskLevel:
    """Map free-form model output onto a known risk level."""
    cleaned = (value or "").strip().lower()
    for level in scan.RISK_LEVELS:
        if level.lower() == cleaned:
            return level
    return "Unknown"


def _apply_risk_rule(
    assessment: compliance_agent.RegulationAssessment,
    summary: scan.ViolationSummary,
) -> scan.ComplianceInfo:
    """Enforce that any violation means ``High`` risk."""
    risk_level = normalize_risk_level(assessment.riskLevel)
    if summary.total_violations > 0 and risk_level != "High":
        log.warn(
            "Overriding risk level: violations present",
            {"modelRiskLevel": assessment.riskLevel, "violations": summary.total_violations},
        )
        risk_level = "High"
    return scan.ComplianceInfo(risk_level=risk_level, assessment=assessment.assessment)


async def assess_compliance(
    summary: scan.ViolationSummary,
    *,
    agent: compliance_agent.ComplianceAssessmentAgent,
) -> scan.ComplianceReport:
    """Obtain the GDPR/CCPA judgment for *summary* (single attempt)."""
    log.info(
        "Violation summary",
        {
            "preConsent": summary.pre_consent_violations,
            "postRejection": summary.post_rejection_violations,
            "marketing": summary.total_marketing,
            "analytics": summary.total_analytics,
            "total": summary.total_items,
        },
    )
    response = await agent.assess(summary)
    return scan.ComplianceReport(
        gdpr=_apply_risk_rule(response.gdpr, summary),
        ccpa=_apply_risk_rule(response.ccpa, summary),
    )


def empty_compliance_report() -> scan.ComplianceReport:
    """Report for a scan that observed nothing."""
    low = scan.ComplianceInfo(risk_level="Low", assessment=NOTHING_DETECTED)
    return scan.ComplianceReport(gdpr=low, ccpa=low.model_copy())


# ============================================================================
# Display fields
# ============================================================================


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def humanize_expiry(
    cookie: scan.CookieObservation,
    now: datetime | None = None,
) -> str:
    """Render a cookie's remaining lifetime in its largest whole unit."""
    if cookie.session or cookie.expires == -1:
        return "Session"

    now = now or datetime.now(UTC)
    remaining = cookie.expires - now.timestamp()
    if remaining < 0:
        return "Expired"
    if remaining < _HOUR:
        return f"{_round_half_up(remaining / _MINUTE)} minutes"
    if remaining < _DAY:
        return f"{_round_half_up(remaining / _HOUR)} hours"
    if remaining < _MONTH:
        return f"{_round_half_up(remaining / _DAY)} days"
    if remaining < _YEAR:
        return f"{_round_half_up(remaining / _MONTH)} months"

    years = _round_half_up(remaining / _YEAR * 10) / 10
    return f"{years:g} year{'s' if years > 1 else ''}"


def cookie_party(domain: str, hostname: str) -> scan.CookieParty:
    """First party when *domain* sits under the scanned site's hostname."""
    cookie_domain = domain if domain.startswith(".") else f".{domain}"
    root_domain = f".{url_mod.strip_www(hostname)}"
    return "First" if cookie_domain.endswith(root_domain) else "Third"


# ============================================================================
# Enrichment
# ============================================================================


def _lookup(
    results: Mapping[str, scan.ClassificationResult],
    key: str,
) -> scan.ClassificationResult:
    return results.get(key) or scan.ClassificationResult.unknown(key)


def build_cookie_records(
    cookies: Iterable[scan.ReconciledEntity],
    results: Mapping[str, scan.ClassificationResult],
    hostname: str,
    now: datetime | None = None,
) -> list[scan.CookieInfo]:
    """Join reconciled cookies with their classifications."""
    records: list[scan.CookieInfo] = []
    for entity in cookies:
        cookie = entity.data
        if not isinstance(cookie, scan.CookieObservation):
            raise TypeError(f"Entity {entity.key!r} does not hold a cookie")
        analysed = _lookup(results, entity.key)
        records.append(
            scan.CookieInfo(
                key=entity.key,
                name=cookie.name,
                provider=cookie.domain,
                category=analysed.category,
                expiry=humanize_expiry(cookie, now),
                purpose=analysed.purpose or scan.UNKNOWN_PURPOSE,
                party=cookie_party(cookie.domain, hostname),
                is_http_only=cookie.http_only,
                is_secure=cookie.secure,
                compliance_status=analysed.compliance_status,
            )
        )
    return records


def build_tracker_records(
    trackers: Iterable[scan.ReconciledEntity],
    results: Mapping[str, scan.ClassificationResult],
) -> list[scan.TrackerInfo]:
    """Join reconciled trackers with their classifications."""
    records: list[scan.TrackerInfo] = []
    for entity in trackers:
        tracker = entity.data
        if not isinstance(tracker, scan.TrackerObservation):
            raise TypeError(f"Entity {entity.key!r} does not hold a tracker request")
        analysed = _lookup(results, entity.key)
        records.append(
            scan.TrackerInfo(
                key=entity.key,
                url=tracker.url,
                provider=tracker.provider,
                category=analysed.category,
                compliance_status=analysed.compliance_status,
            )
        )
    return records


def index_results(
    results: Sequence[scan.ClassificationResult],
) -> dict[str, scan.ClassificationResult]:
    """Key classification results by identity key (first wins)."""
    indexed: dict[str, scan.ClassificationResult] = {}
    for result in results:
        indexed.setdefault(result.key, result)
    return indexed
