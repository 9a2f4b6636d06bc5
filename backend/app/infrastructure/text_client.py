"""
Text-generation client used for booking summaries.

Wraps openai.AsyncOpenAI behind a one-method interface. The application
lifespan builds one instance per process and stores it on app.state; routes
receive it through the get_text_generator dependency, so nothing here is a
module-level singleton.
"""

from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from app.core.config import Settings
from app.core.exceptions import SummaryUnavailableError
from app.core.logging import get_logger

logger = get_logger(__name__)


class TextGenerator:
    """Single-prompt chat completion; any failure surfaces as SummaryUnavailableError."""

    def __init__(self, client: AsyncOpenAI, model: str):
        self.client = client
        self.model = model

    async def generate(
        self,
        prompt: str,
        *,
        system: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIError as exc:
            raise SummaryUnavailableError(str(exc)) from exc

        if not completion.choices:
            raise SummaryUnavailableError("Completion returned no choices")

        text = (completion.choices[0].message.content or "").strip()
        if not text:
            raise SummaryUnavailableError("Completion returned empty text")
        return text

    async def close(self) -> None:
        await self.client.close()


def create_text_generator(settings: Settings) -> Optional[TextGenerator]:
    """Returns None when no API key is configured; summaries then use the fallback."""
    if not settings.OPENAI_API_KEY:
        logger.warning("text_generator_disabled", reason="OPENAI_API_KEY not set")
        return None

    client = AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
        max_retries=1,
    )
    logger.info("text_generator_ready", model=settings.OPENAI_MODEL)
    return TextGenerator(client, settings.OPENAI_MODEL)
