"""Cookie and tracker classification agent.

Categorises a batch of reconciled cookies and trackers and gives
each cookie a short purpose.  Compliance statuses returned by the
model are advisory; the pipeline recomputes them.
"""

from __future__ import annotations

import json
from typing import Any

import pydantic

from cookiecare.agents import base, config
from cookiecare.utils import errors, json_parsing, logger

log = logger.create_logger("CookieClassificationAgent")


# ── Structured output models ───────────────────────────────────


class ClassifiedItem(pydantic.BaseModel):
    """One entry of the model's batch response."""

    key: str
    category: str
    purpose: str = ""
    complianceStatus: str = ""


class _BatchClassificationResponse(pydantic.BaseModel):
    """Schema pushed to the LLM via ``response_format``."""

    results: list[ClassifiedItem]


BatchItem = dict[str, Any]
"""``{type, key, name?, provider, states}`` as sent to the model."""


# ── System prompt ───────────────────────────────────────────────

_INSTRUCTIONS = """\
You are a privacy expert categorizing web technologies. \
You receive a batch of cookies and trackers together with the \
consent states they were observed in ('pre-consent', \
'post-rejection', 'post-acceptance').

For each item return:
- key: The original key, copied exactly.
- category: One of 'Necessary', 'Functional', 'Analytics', \
'Marketing', or 'Unknown'. Be strict: only items essential for \
the site to operate are 'Necessary'.
- purpose: For cookies only, a very brief one-sentence \
description of the cookie's likely function, at most 15 words. \
For trackers return an empty string.
- complianceStatus: Determined from 'states' and 'category':
    - If category is 'Necessary': 'Compliant'.
    - If states include 'pre-consent' AND category is NOT \
'Necessary': 'Pre-Consent Violation'.
    - If states include 'post-rejection' AND category is NOT \
'Necessary': 'Post-Rejection Violation'.
    - Otherwise: 'Compliant'.

Return one result for every input item, as a JSON object of the \
form {"results": [...]}."""


# ── Agent class ─────────────────────────────────────────────────


class CookieClassificationAgent(base.BaseAgent):
    """Text agent that classifies one batch of entities per call."""

    agent_name = config.AGENT_COOKIE_CLASSIFICATION
    instructions = _INSTRUCTIONS
    max_tokens = 4096
    response_model = _BatchClassificationResponse

    async def classify_batch(
        self,
        items: list[BatchItem],
        *,
        batch_number: int = 1,
        batch_count: int = 1,
    ) -> list[ClassifiedItem]:
        """Classify one batch of cookies and trackers.

        Args:
            items: Compact entity descriptions.
            batch_number: One-based index, for logging.
            batch_count: Total number of batches, for logging.

        Returns:
            The model's result entries (unfiltered).

        Raises:
            errors.EmptyResponseError: The reply had no content.
            errors.MalformedResponseError: The reply was not a JSON list
                of results.
        """
        log.info(
            f"Analyzing batch {batch_number}/{batch_count}",
            {"items": len(items)},
        )
        text = await self._complete(_build_user_prompt(items))
        if not text or not text.strip():
            raise errors.EmptyResponseError(
                f"LLM returned an empty response for analysis batch #{batch_number}."
            )

        parsed = self._parse_response(text, _BatchClassificationResponse)
        if parsed is not None:
            return parsed.results

        # Fallback: a bare JSON array instead of the wrapped object
        raw = json_parsing.load_json_list(text)
        if raw is None:
            raise errors.MalformedResponseError(
                f"Invalid JSON in response for analysis batch #{batch_number}."
            )
        try:
            return [ClassifiedItem.model_validate(entry) for entry in raw]
        except pydantic.ValidationError as exc:
            raise errors.MalformedResponseError(
                f"Unexpected JSON shape in response for analysis batch #{batch_number}."
            ) from exc


# ── Prompt builders ─────────────────────────────────────────────


def _build_user_prompt(items: list[BatchItem]) -> str:
    """Build the user prompt for a batch.

    Args:
        items: Compact entity descriptions.

    Returns:
        Prompt text embedding the items as JSON.
    """
    return (
        "Input Data:\n"
        f"{json.dumps(items, indent=2)}\n"
        "Return ONLY the valid JSON object of results."
    )
