"""Compliance assessment agent for GDPR and CCPA risk.

Turns the numeric violation summary of a scan into a risk level
and short assessment for each regulation.
"""

from __future__ import annotations

import json

import pydantic

from cookiecare.agents import base, config
from cookiecare.models import scan
from cookiecare.utils import errors, logger

log = logger.create_logger("ComplianceAssessmentAgent")


# ── Structured output models ───────────────────────────────────


class RegulationAssessment(pydantic.BaseModel):
    """Risk judgment for one regulation."""

    riskLevel: str
    assessment: str


class _ComplianceResponse(pydantic.BaseModel):
    """Schema pushed to the LLM via ``response_format``."""

    gdpr: RegulationAssessment
    ccpa: RegulationAssessment


# ── System prompt ───────────────────────────────────────────────

_INSTRUCTIONS = """\
You are a privacy expert providing a risk assessment. Based on \
the summary of a website scan, provide a JSON object with \
"gdpr" and "ccpa" keys.

For both GDPR and CCPA, provide:
- riskLevel: 'Low', 'Medium', or 'High'. Any violation \
('preConsentViolations' or 'postRejectionViolations' > 0) \
immediately makes the risk 'High'. A large number of \
marketing/analytics trackers suggests at least 'Medium' risk.
- assessment: A brief, professional summary explaining the risk \
level. Specifically mention the number of violations as the \
primary reason for a 'High' risk assessment.

Return ONLY the valid JSON object."""


# ── Agent class ─────────────────────────────────────────────────


class ComplianceAssessmentAgent(base.BaseAgent):
    """Text agent that produces the final GDPR/CCPA judgment."""

    agent_name = config.AGENT_COMPLIANCE_ASSESSMENT
    instructions = _INSTRUCTIONS
    max_tokens = 1024
    response_model = _ComplianceResponse

    async def assess(
        self,
        summary: scan.ViolationSummary,
    ) -> _ComplianceResponse:
        """Request the risk judgment for *summary*.

        Single attempt: failures propagate to the caller.

        Raises:
            errors.EmptyResponseError: The reply had no content.
            errors.MalformedResponseError: The reply did not match the
                expected JSON shape.
        """
        log.info("Requesting final compliance assessment...")
        text = await self._complete(
            "Summary:\n"
            f"{json.dumps(summary.to_json_dict(), indent=2)}"
        )
        if not text or not text.strip():
            raise errors.EmptyResponseError(
                "LLM returned an empty response for the final compliance assessment."
            )

        parsed = self._parse_response(text, _ComplianceResponse)
        if parsed is None:
            raise errors.MalformedResponseError(
                "Invalid JSON in the final compliance assessment."
            )
        return parsed
