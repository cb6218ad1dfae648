"""Tests for the classification and compliance agents."""

from __future__ import annotations

import json
import types
from typing import TypeVar
from unittest import mock

import pytest

from cookiecare.agents import classification_agent, compliance_agent, llm_client
from cookiecare.models import scan
from cookiecare.utils import errors

A = TypeVar("A", bound="classification_agent.CookieClassificationAgent | compliance_agent.ComplianceAssessmentAgent")

ITEMS = [
    {"type": "cookie", "key": "_ga|.example.com|/", "name": "_ga", "provider": ".example.com", "states": ["pre-consent"]},
    {
        "type": "tracker",
        "key": "google-analytics.com|https://www.google-analytics.com/collect",
        "provider": "google-analytics.com",
        "states": ["post-acceptance"],
    },
]


def _wire(
    agent: A, content: str | None
) -> tuple[A, mock.AsyncMock]:
    completion = types.SimpleNamespace(choices=[types.SimpleNamespace(message=types.SimpleNamespace(content=content))])
    create = mock.AsyncMock(return_value=completion)
    client = types.SimpleNamespace(chat=types.SimpleNamespace(completions=types.SimpleNamespace(create=create)))
    agent._chat_client = llm_client.ChatClient(client=client, model="test-model", backend="openai")  # type: ignore[arg-type]
    return agent, create


class TestCookieClassificationAgent:
    """Tests for CookieClassificationAgent.classify_batch()."""

    @pytest.mark.asyncio
    async def test_wrapped_results(self) -> None:
        reply = {"results": [{"key": ITEMS[0]["key"], "category": "Analytics", "purpose": "Distinguishes users.", "complianceStatus": "Pre-Consent Violation"}]}
        agent, create = _wire(classification_agent.CookieClassificationAgent(), json.dumps(reply))

        [item] = await agent.classify_batch(ITEMS, batch_number=1, batch_count=1)
        assert item.key == ITEMS[0]["key"]
        assert item.category == "Analytics"

        prompt = create.await_args.kwargs["messages"][1]["content"]
        assert json.loads(prompt.split("\n", 1)[1].rsplit("\n", 1)[0]) == ITEMS

    @pytest.mark.asyncio
    async def test_bare_array_accepted(self) -> None:
        reply = [{"key": ITEMS[1]["key"], "category": "Analytics", "purpose": "", "complianceStatus": "Compliant"}]
        agent, _ = _wire(classification_agent.CookieClassificationAgent(), f"```json\n{json.dumps(reply)}\n```")
        [item] = await agent.classify_batch(ITEMS)
        assert item.key == ITEMS[1]["key"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "  "])
    async def test_empty_response(self, content: str | None) -> None:
        agent, _ = _wire(classification_agent.CookieClassificationAgent(), content)
        with pytest.raises(errors.EmptyResponseError, match="empty response"):
            await agent.classify_batch(ITEMS, batch_number=2, batch_count=3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["I cannot help with that", '{"results": "none"}', '[{"category": "Analytics"}]'])
    async def test_unusable_response(self, content: str) -> None:
        agent, _ = _wire(classification_agent.CookieClassificationAgent(), content)
        with pytest.raises(errors.MalformedResponseError):
            await agent.classify_batch(ITEMS)


class TestComplianceAssessmentAgent:
    """Tests for ComplianceAssessmentAgent.assess()."""

    @pytest.mark.asyncio
    async def test_assessment(self) -> None:
        reply = {
            "gdpr": {"riskLevel": "High", "assessment": "2 pre-consent violations."},
            "ccpa": {"riskLevel": "Medium", "assessment": "Marketing trackers present."},
        }
        agent, create = _wire(compliance_agent.ComplianceAssessmentAgent(), json.dumps(reply))
        summary = scan.ViolationSummary(pre_consent_violations=2, total_items=5)

        response = await agent.assess(summary)
        assert response.gdpr.riskLevel == "High"
        assert response.ccpa.assessment == "Marketing trackers present."

        prompt = create.await_args.kwargs["messages"][1]["content"]
        assert '"preConsentViolations": 2' in prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "\n"])
    async def test_empty(self, content: str | None) -> None:
        agent, _ = _wire(compliance_agent.ComplianceAssessmentAgent(), content)
        with pytest.raises(errors.EmptyResponseError):
            await agent.assess(scan.ViolationSummary(total_items=1))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["not json", '{"gdpr": {"riskLevel": "Low"}}'])
    async def test_malformed(self, content: str) -> None:
        agent, _ = _wire(compliance_agent.ComplianceAssessmentAgent(), content)
        with pytest.raises(errors.MalformedResponseError):
            await agent.assess(scan.ViolationSummary(total_items=1))


class TestSingletons:
    def test_cached(self) -> None:
        from cookiecare import agents

        agents.get_classification_agent.cache_clear()
        with mock.patch.dict("os.environ", {}, clear=True):
            first = agents.get_classification_agent()
            second = agents.get_classification_agent()
        agents.get_classification_agent.cache_clear()
        assert first is second
        assert first._chat_client is None
