"""LLM agents used by a scan.

``get_classification_agent()`` and ``get_compliance_agent()`` return
process-wide instances; agents keep a chat client and nothing else,
so sharing them across concurrent scans is safe.
"""

from __future__ import annotations

import functools
from typing import TypeVar

from cookiecare.agents import base, classification_agent, compliance_agent
from cookiecare.utils import logger

log = logger.create_logger("Agents")

T = TypeVar("T", bound=base.BaseAgent)


def _build(agent_cls: type[T]) -> T:
    agent = agent_cls()
    if not agent.initialise():
        log.warn(f"{agent_cls.__name__} has no LLM backend yet; requests will fail")
    return agent


@functools.lru_cache(maxsize=1)
def get_classification_agent() -> classification_agent.CookieClassificationAgent:
    return _build(classification_agent.CookieClassificationAgent)


@functools.lru_cache(maxsize=1)
def get_compliance_agent() -> compliance_agent.ComplianceAssessmentAgent:
    return _build(compliance_agent.ComplianceAssessmentAgent)


__all__ = ["get_classification_agent", "get_compliance_agent"]
