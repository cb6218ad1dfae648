"""Shared plumbing for the LLM agents.

A concrete agent sets ``agent_name``, ``instructions`` and, when it
expects JSON back, ``response_model``.  ``BaseAgent`` turns that model
into a strict ``json_schema`` response format, sends one chat
completion per call, and validates what comes back.
"""

from __future__ import annotations

import time
from typing import Any, TypeVar

import pydantic

from cookiecare.agents import llm_client
from cookiecare.utils import errors, json_parsing, logger

log = logger.create_logger("BaseAgent")

M = TypeVar("M", bound=pydantic.BaseModel)


def _strict(node: Any) -> Any:
    """Copy of a JSON-schema node with every object closed and fully required."""
    if isinstance(node, list):
        return [_strict(item) for item in node]
    if not isinstance(node, dict):
        return node

    patched = {key: _strict(value) for key, value in node.items()}
    if patched.get("type") == "object":
        patched["additionalProperties"] = False
        patched["required"] = list(patched.get("properties", {}))
    return patched


class BaseAgent:
    """One system prompt, one optional response model, one request per call.

    Nothing here retries; callers that want retries wrap the call.
    """

    agent_name: str = "BaseAgent"
    instructions: str = ""
    max_tokens: int = 4096
    response_model: type[pydantic.BaseModel] | None = None

    def __init__(self) -> None:
        self._chat_client: llm_client.ChatClient | None = None

    def initialise(self) -> bool:
        """Attach a chat client; ``False`` when no backend is configured."""
        self._chat_client = llm_client.get_chat_client(agent_name=self.agent_name)
        return self._chat_client is not None

    @staticmethod
    def _prepare_strict_schema(schema: dict[str, Any]) -> dict[str, Any]:
        """Adapt ``model_json_schema()`` output for OpenAI strict mode.

        Strict mode rejects objects that allow extra keys or leave any
        property optional, including those under ``$defs``.  The input
        is left unchanged.
        """
        return _strict(schema)

    def _build_response_format(self) -> dict[str, Any] | None:
        if self.response_model is None:
            return None
        schema = self._prepare_strict_schema(self.response_model.model_json_schema())
        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.response_model.__name__.lstrip("_"),
                "strict": True,
                "schema": schema,
            },
        }

    async def _complete(
        self,
        user_prompt: str,
        *,
        instructions: str | None = None,
        max_tokens: int | None = None,
    ) -> str | None:
        """Send *user_prompt* and return the reply text, if any.

        Raises:
            errors.LLMNotConfiguredError: No chat client is attached.
        """
        chat = self._chat_client
        if chat is None:
            raise errors.LLMNotConfiguredError(f"{self.agent_name}: no chat client; call initialise() first")

        token_limit = max_tokens or self.max_tokens
        request: dict[str, Any] = {
            "model": chat.model,
            "max_tokens": token_limit,
            "messages": [
                {"role": "system", "content": instructions or self.instructions},
                {"role": "user", "content": user_prompt},
            ],
        }
        if (response_format := self._build_response_format()) is not None:
            request["response_format"] = response_format

        log.debug(f"{self.agent_name}: sending request", {"promptChars": len(user_prompt), "maxTokens": token_limit})
        began = time.perf_counter()
        completion = await chat.client.chat.completions.create(**request)
        elapsed = time.perf_counter() - began

        reply = completion.choices[0].message.content if completion.choices else None
        log.info(f"{self.agent_name}: reply after {elapsed:.2f}s", {"responseChars": len(reply or "")})
        return reply

    def _parse_response(self, text: str | None, model: type[M]) -> M | None:
        """Validate *text* (fenced or bare JSON) as *model*; ``None`` on failure."""
        preview = {"responsePreview": (text or "")[:200]}
        payload = json_parsing.load_json_from_text(text)
        if payload is None:
            log.warn(f"{self.agent_name}: reply is not JSON", preview)
            return None
        try:
            return model.model_validate(payload)
        except pydantic.ValidationError as exc:
            log.warn(f"{self.agent_name}: reply does not match {model.__name__} ({exc.error_count()} errors)", preview)
            return None
