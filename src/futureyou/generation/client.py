"""Text generation backends.

Anything with a ``generate_content(prompt) -> str`` method can drive the
simulator. ``OpenAITextGenerator`` calls the OpenAI Responses API; every
failure along the way surfaces as ``TransportError`` so callers have one
exception to recover from.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from ..config.schema import Generation
from ..errors import TransportError

logger = logging.getLogger(__name__)


class TextGenerator:
    """Minimal generation contract."""

    def generate_content(self, prompt: str) -> str:
        raise NotImplementedError


def _get_default_model(configured: Optional[str] = None) -> str:
    """Resolve a reasonable default model name without hardcoding secrets."""
    return (
        os.getenv("FUTUREYOU_OPENAI_MODEL")
        or os.getenv("OPENAI_MODEL")
        or configured
        or "gpt-4.1-mini"
    )


def _create_openai_client(api_key: Optional[str] = None):
    """Create an OpenAI client if the dependency and key are available."""
    try:
        from openai import OpenAI  # type: ignore
    except Exception as exc:  # pragma: no cover - import failure depends on environment
        return None, f"OpenAI SDK not installed: {exc}"

    resolved_key = api_key or os.getenv("OPENAI_API_KEY")
    if not resolved_key:
        return None, "Missing OPENAI_API_KEY environment variable."

    try:
        client = OpenAI(api_key=resolved_key)
    except Exception as exc:  # pragma: no cover
        return None, f"Failed to initialize OpenAI client: {exc}"

    return client, None


def _extract_output_text(response) -> Optional[str]:
    output_text = getattr(response, "output_text", None)
    if output_text:
        return output_text

    # Fall back to walking the structured output.
    text_parts: List[str] = []
    for item in getattr(response, "output", None) or []:
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", "") == "output_text":
                text_parts.append(getattr(content, "text", ""))
    combined = "\n".join(part for part in text_parts if part)
    return combined or None


class OpenAITextGenerator(TextGenerator):
    """Generate text with the OpenAI Responses API."""

    def __init__(
        self,
        settings: Optional[Generation] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        client=None,
    ):
        """
        Args:
            settings: Temperature/token settings and configured model
            model: Explicit model name (overrides env and settings)
            api_key: Explicit API key (defaults to OPENAI_API_KEY)
            client: Pre-built OpenAI client, mainly for tests
        """
        self.settings = settings or Generation()
        self.model = model or _get_default_model(self.settings.model)
        self._api_key = api_key
        self._client = client

    def _get_client(self):
        if self._client is None:
            client, client_error = _create_openai_client(api_key=self._api_key)
            if client is None:
                raise TransportError(client_error)
            self._client = client
        return self._client

    def generate_content(self, prompt: str) -> str:
        client = self._get_client()
        logger.debug("Requesting generation from %s (%d prompt chars)", self.model, len(prompt))

        try:
            response = client.responses.create(
                model=self.model,
                temperature=self.settings.temperature,
                max_output_tokens=self.settings.max_output_tokens,
                input=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "input_text",
                                "text": prompt,
                            }
                        ],
                    },
                ],
            )
        except Exception as exc:  # pragma: no cover - network and API errors are environment-dependent
            raise TransportError(f"OpenAI API call failed: {exc}") from exc

        text = _extract_output_text(response)
        if not text:
            raise TransportError("OpenAI response did not include text output.")
        return text


def get_default_model(configured: Optional[str] = None) -> str:
    """Model name a generator would use: env override first, then ``configured``."""
    return _get_default_model(configured)
