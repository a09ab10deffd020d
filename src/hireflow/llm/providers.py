from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from openai import OpenAI

from hireflow.config import Settings
from hireflow.types import ModelResponse

logger = logging.getLogger(__name__)

_FENCE_PREFIXES = ("```json", "```JSON", "```")


class TextCompletionProvider(Protocol):
    """A language model that turns one rendered prompt into one text completion."""

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse: ...


@dataclass(slots=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str
    timeout_sec: int


class LLMProvider:
    def __init__(self, config: ProviderConfig):
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=float(config.timeout_sec),
            max_retries=0,
        )

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse:
        try:
            return self._complete_via_responses(model=model, prompt=prompt)
        except Exception as exc:
            if not self._is_unsupported_responses_endpoint(exc):
                raise

            logger.warning(
                "Responses API unavailable for provider=%s base_url=%s; "
                "falling back to chat.completions (%s)",
                self.config.name,
                self.config.base_url,
                exc,
            )
            return self._complete_via_chat_completions(model=model, prompt=prompt)

    def _complete_via_responses(self, *, model: str, prompt: str) -> ModelResponse:
        response = self.client.responses.create(
            model=model,
            input=[
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
        )
        return _model_response(getattr(response, "output_text", "") or "", response, "responses")

    def _complete_via_chat_completions(self, *, model: str, prompt: str) -> ModelResponse:
        response = self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )
        return _model_response(_first_choice_text(response), response, "chat_completions")

    @staticmethod
    def _is_unsupported_responses_endpoint(exc: Exception) -> bool:
        if getattr(exc, "status_code", None) == 404:
            return True
        message = str(exc).strip().lower()
        return bool(message) and ("not found" in message or "404" in message)


def _model_response(text: str, response: Any, api_path: str) -> ModelResponse:
    """Wrap completion text with the SDK payload, tagged by the API that answered."""
    dumped = response.model_dump() if hasattr(response, "model_dump") else {}
    raw = dumped if isinstance(dumped, dict) else {"raw": dumped}
    raw["api_path"] = api_path
    return ModelResponse(content=text, raw=raw)


def _first_choice_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    message = getattr(choices[0], "message", None) if choices else None
    content = getattr(message, "content", None) if message is not None else None
    if content is None:
        return ""
    return content if isinstance(content, str) else str(content)


def build_provider(settings: Settings) -> LLMProvider | None:
    """Return the configured OpenAI provider, or None when no API key is set."""
    if not settings.ai_configured:
        return None
    return LLMProvider(
        ProviderConfig(
            name="openai",
            base_url=settings.openai_base_url,
            api_key=settings.openai_api_key,
            timeout_sec=settings.openai_timeout_sec,
        )
    )


def clean_json_response(content: str) -> str:
    """Strip code fences and surrounding prose from a model reply.

    After removing a leading ```json / ``` marker and a trailing ``` marker,
    the text is sliced from the first ``{`` to the last ``}`` inclusive.
    """
    cleaned = content.strip()
    for prefix in _FENCE_PREFIXES:
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):]
            break
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]
    return cleaned.strip()


def parse_json_object(content: str) -> dict[str, Any] | None:
    """Parse a sanitized model reply; None means it held no JSON object."""
    candidate = clean_json_response(content or "")
    if not candidate:
        return None

    try:
        value = json.loads(candidate)
    except (ValueError, RecursionError):
        logger.warning("Failed to parse JSON model output (%d chars)", len(candidate))
        return None
    if not isinstance(value, dict):
        logger.warning("Model output parsed to %s, expected an object", type(value).__name__)
        return None
    return value
