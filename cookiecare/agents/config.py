"""
LLM backend settings.

Two backends are supported, Azure OpenAI and the public OpenAI API,
each bound to its conventional environment variables through
``pydantic_settings``.  Azure wins when both are complete.
"""

from __future__ import annotations

import pydantic
import pydantic_settings

AGENT_COOKIE_CLASSIFICATION = "CookieClassificationAgent"
AGENT_COMPLIANCE_ASSESSMENT = "ComplianceAssessmentAgent"

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_AZURE_API_VERSION = "2024-12-01-preview"

NOT_CONFIGURED_MESSAGE = (
    "LLM is not configured. Set AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_API_KEY"
    " and AZURE_OPENAI_DEPLOYMENT for Azure OpenAI, or OPENAI_API_KEY"
    " (optionally OPENAI_MODEL and OPENAI_BASE_URL) for OpenAI."
)


class AzureOpenAIConfig(pydantic_settings.BaseSettings):
    """Azure OpenAI endpoint, key and deployment.

    The deployment name doubles as the model name in requests.
    """

    endpoint: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_ENDPOINT")
    api_key: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_API_KEY")
    deployment: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_DEPLOYMENT")
    api_version: str = pydantic.Field(default=DEFAULT_AZURE_API_VERSION, validation_alias="OPENAI_API_VERSION")

    def validate_config(self) -> bool:
        """Usable once endpoint, key and deployment are all set."""
        return all((self.endpoint, self.api_key, self.deployment))


class OpenAIConfig(pydantic_settings.BaseSettings):
    """Public OpenAI API key, model, and optional compatible base URL."""

    api_key: str = pydantic.Field(default="", validation_alias="OPENAI_API_KEY")
    model: str = pydantic.Field(default=DEFAULT_OPENAI_MODEL, validation_alias="OPENAI_MODEL")
    base_url: str | None = pydantic.Field(default=None, validation_alias="OPENAI_BASE_URL")

    def validate_config(self) -> bool:
        """Usable once an API key is set."""
        return bool(self.api_key)


def validate_llm_config() -> str | None:
    """Return why no backend is usable, or ``None`` when one is."""
    if AzureOpenAIConfig().validate_config() or OpenAIConfig().validate_config():
        return None
    return NOT_CONFIGURED_MESSAGE
