"""
OpenAI SDK client selection.

Azure OpenAI is used when its three variables are present, otherwise
the public OpenAI API.  Retries inside the SDK are switched off; the
classification stage retries batches itself and the compliance
assessment is attempted once.
"""

from __future__ import annotations

import dataclasses
from typing import Literal

import openai

from cookiecare.agents import config
from cookiecare.utils import logger

log = logger.create_logger("LLM-Client")

Backend = Literal["azure", "openai"]


@dataclasses.dataclass(frozen=True)
class ChatClient:
    """SDK client plus the model (Azure: deployment) to request."""

    client: openai.AsyncOpenAI
    model: str
    backend: Backend


def get_chat_client(agent_name: str | None = None) -> ChatClient | None:
    """Build a ``ChatClient`` for whichever backend is configured.

    Returns ``None`` when neither backend has enough settings.
    """
    label = {"agent": agent_name or "default"}

    azure = config.AzureOpenAIConfig()
    if azure.validate_config():
        log.info("Using Azure OpenAI", label)
        return ChatClient(
            client=openai.AsyncAzureOpenAI(
                api_key=azure.api_key,
                api_version=azure.api_version,
                azure_endpoint=azure.endpoint,
                azure_deployment=azure.deployment,
                max_retries=0,
            ),
            model=azure.deployment,
            backend="azure",
        )

    public = config.OpenAIConfig()
    if public.validate_config():
        log.info("Using OpenAI", label)
        return ChatClient(
            client=openai.AsyncOpenAI(api_key=public.api_key, base_url=public.base_url, max_retries=0),
            model=public.model or config.DEFAULT_OPENAI_MODEL,
            backend="openai",
        )

    log.warn("No LLM backend configured", label)
    return None
