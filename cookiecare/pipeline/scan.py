"""
Scan orchestration.

Runs one scan end to end: tri-state capture in an isolated browser,
reconciliation, batched classification, and the final compliance
judgment.  The browser is closed as soon as capture finishes so it
is never held open during the LLM calls.
"""

from __future__ import annotations

from collections.abc import Callable

from cookiecare import agents
from cookiecare.agents import classification_agent, compliance_agent, config
from cookiecare.analysis import classification, compliance, reconciliation
from cookiecare.browser import session as browser_session
from cookiecare.models import scan
from cookiecare.pipeline import capture
from cookiecare.utils import errors, logger
from cookiecare.utils import url as url_mod

log = logger.create_logger("Scan")

SessionFactory = Callable[[], browser_session.BrowserSession]


def _resolve_agents(
    classifier: classification_agent.CookieClassificationAgent | None,
    assessor: compliance_agent.ComplianceAssessmentAgent | None,
) -> tuple[classification_agent.CookieClassificationAgent, compliance_agent.ComplianceAssessmentAgent]:
    """Fall back to the configured singletons, failing early when no LLM is set up."""
    if classifier is None or assessor is None:
        config_error = config.validate_llm_config()
        if config_error:
            raise errors.LLMNotConfiguredError(config_error)
    return (
        classifier or agents.get_classification_agent(),
        assessor or agents.get_compliance_agent(),
    )


async def run_scan(
    url: str,
    *,
    classifier: classification_agent.CookieClassificationAgent | None = None,
    assessor: compliance_agent.ComplianceAssessmentAgent | None = None,
    session_factory: SessionFactory = browser_session.BrowserSession,
) -> scan.ScanResult:
    """Scan *url* and return the full compliance result.

    Args:
        url: Absolute http(s) URL of the site to scan.
        classifier: Classification agent (default: singleton).
        assessor: Compliance agent (default: singleton).
        session_factory: Creates the browser session for the capture.

    Raises:
        errors.NavigationError: The URL is invalid or the page could
            not be loaded.
        errors.LLMNotConfiguredError: No LLM backend is configured.
        Exception: Any classification or assessment failure.
    """
    if not url_mod.is_valid_scan_url(url):
        raise errors.NavigationError(f"Invalid URL: {url}")

    hostname = url_mod.extract_hostname(url)
    logger.start_log_file(hostname)
    try:
        log.section(f"Scanning {url}")
        log.start_timer("scan")
        classifier, assessor = _resolve_agents(classifier, assessor)

        log.start_timer("capture")
        async with session_factory() as session:
            captured = await capture.capture_consent_states(session, url)
        log.end_timer("capture", "Tri-state capture complete")

        merged = reconciliation.reconcile(captured)
        log.info(
            "Reconciled entities",
            {"cookies": len(merged.cookies), "trackers": len(merged.trackers)},
        )

        if not merged:
            log.info("No cookies or trackers found; skipping analysis")
            result = scan.ScanResult(
                cookies=[],
                trackers=[],
                screenshot_base64=captured.screenshot_base64,
                compliance=compliance.empty_compliance_report(),
            )
            log.end_timer("scan", "Scan complete")
            return result

        log.subsection("Classifying cookies and trackers")
        results = await classification.classify_entities(merged.entities(), agent=classifier)

        log.subsection("Assessing compliance")
        summary = compliance.summarise(results, total_items=len(merged))
        report = await compliance.assess_compliance(summary, agent=assessor)

        by_key = compliance.index_results(results)
        result = scan.ScanResult(
            cookies=compliance.build_cookie_records(merged.cookies.values(), by_key, hostname),
            trackers=compliance.build_tracker_records(merged.trackers.values(), by_key),
            screenshot_base64=captured.screenshot_base64,
            compliance=report,
        )
        log.success(
            "Scan complete",
            {
                "cookies": len(result.cookies),
                "trackers": len(result.trackers),
                "gdpr": report.gdpr.risk_level,
                "ccpa": report.ccpa.risk_level,
            },
        )
        log.end_timer("scan", "Scan complete")
        return result
    except Exception as error:
        log.error("Scan failed", {"url": url, "error": errors.get_error_message(error)})
        raise
    finally:
        logger.end_log_file()
