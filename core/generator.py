"""Dashboard generation through the Anthropic Messages API.

The generator only produces text. Turning that text into dashboards, including
partial ones while the response is still streaming, is the job of
`core.jsonrender.streaming.StreamingDecoder`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

import anthropic
from django.conf import settings

from core.jsonrender.prompts import dashboard_generation_prompt

logger = logging.getLogger("ledgerboard.generator")


class GeneratorNotConfigured(RuntimeError):
    """Raised when no API key is configured for dashboard generation."""


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """Connection settings for the text generator."""

    api_key: str
    model: str
    max_tokens: int

    @classmethod
    def from_settings(cls) -> GeneratorConfig:
        return cls(
            api_key=getattr(settings, "ANTHROPIC_API_KEY", ""),
            model=settings.DASHBOARD_GENERATOR_MODEL,
            max_tokens=settings.DASHBOARD_GENERATOR_MAX_TOKENS,
        )


class DashboardGenerator:
    """Stream dashboard JSON text for a natural-language request.

    Args:
        config: Connection settings; read from Django settings when None.
        client: Pre-built async client (tests inject a fake).

    Raises:
        GeneratorNotConfigured: When no client is given and the API key is empty.
    """

    def __init__(self, config: GeneratorConfig | None = None, client: anthropic.AsyncAnthropic | None = None) -> None:
        self.config = config or GeneratorConfig.from_settings()
        if client is None:
            if not self.config.api_key:
                raise GeneratorNotConfigured("ANTHROPIC_API_KEY is not configured.")
            client = anthropic.AsyncAnthropic(api_key=self.config.api_key)
        self._client = client

    async def stream_text(self, prompt: str) -> AsyncIterator[str]:
        """Yield text deltas of the generated dashboard document.

        Args:
            prompt: The user's description of the dashboard they want.
        """

        logger.info("Generating dashboard with %s", self.config.model)
        async with self._client.messages.stream(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            system=dashboard_generation_prompt(),
            messages=[{"role": "user", "content": f"Create a dashboard for: {prompt}"}],
        ) as stream:
            async for text in stream.text_stream:
                yield text
