"""
Text generation capability for AI-assisted drafts.

The follow-up generator only needs ``generate(prompt) -> str``. The
production implementation calls OpenAI chat completions with a bounded
timeout; tests plug in fakes that succeed, time out, or return garbage.
"""

from typing import Any, Protocol

import openai
from openai import AsyncOpenAI

from inboxiq.config import settings
from inboxiq.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SYSTEM_MESSAGE = (
    "You are a professional email assistant. Generate follow-up emails that are polite, "
    "concise, and natural. Always respond in the exact format: "
    "'Subject: <subject>\n\n<email body>'"
)


class TextGenerationError(Exception):
    """Raised when text generation fails, times out, or returns nothing usable."""

    def __init__(self, message: str, api_error: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.api_error = api_error
        self.recoverable = recoverable


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class OpenAITextGenerator:
    """
    Single-shot chat completion with a hard client timeout.

    No retry loop: the caller has a deterministic fallback, and a retry
    would stretch the bounded wait past FOLLOWUP_TIMEOUT_SECONDS.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout_seconds: float | None = None,
    ):
        self.model = model or settings.OPENAI_MODEL
        self.timeout_seconds = timeout_seconds or settings.FOLLOWUP_TIMEOUT_SECONDS
        self._api_key = api_key or settings.OPENAI_API_KEY
        self.client: AsyncOpenAI | None = None

        if self._api_key:
            self.client = AsyncOpenAI(
                api_key=self._api_key,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
            logger.info(
                "OpenAI client initialized",
                model=self.model,
                timeout=self.timeout_seconds,
            )
        else:
            logger.warning("OPENAI_API_KEY not set; follow-ups will use fallback text")

    async def generate(self, prompt: str) -> str:
        if not self.client:
            raise TextGenerationError("OPENAI_API_KEY not configured", recoverable=False)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_MESSAGE},
                    {"role": "user", "content": prompt},
                ],
                temperature=settings.OPENAI_TEMPERATURE,
                max_tokens=settings.OPENAI_MAX_TOKENS,
            )

        except openai.APITimeoutError as e:
            logger.warning("OpenAI API timeout", timeout=self.timeout_seconds, error=str(e))
            raise TextGenerationError("Text generation timed out", api_error=str(e)) from e

        except openai.RateLimitError as e:
            logger.warning("OpenAI rate limit hit", error=str(e))
            raise TextGenerationError("Text generation rate limited", api_error=str(e)) from e

        except openai.APIError as e:
            logger.error("OpenAI API error", error=str(e), error_type=type(e).__name__)
            raise TextGenerationError("Text generation failed", api_error=str(e)) from e

        if not response.choices or not response.choices[0].message.content:
            raise TextGenerationError("Empty response from OpenAI API")

        text = response.choices[0].message.content.strip()
        logger.info(
            "OpenAI API call successful",
            response_length=len(text),
            usage_tokens=response.usage.total_tokens if response.usage else 0,
        )
        return text

    def describe(self) -> dict[str, Any]:
        return {
            "service": "openai_text_generator",
            "client_initialized": self.client is not None,
            "model": self.model,
            "timeout_seconds": self.timeout_seconds,
        }


_default_generator: OpenAITextGenerator | None = None


def get_text_generator() -> OpenAITextGenerator:
    """Lazily built process-wide generator (settings are read on first use)."""
    global _default_generator
    if _default_generator is None:
        _default_generator = OpenAITextGenerator()
    return _default_generator
