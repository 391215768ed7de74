"""
LLM Client - thin async wrapper over an OpenAI-compatible chat API.
The default endpoint is Gemini's OpenAI-compatible API.
"""
import logging
from typing import AsyncIterator, Optional

from openai import AsyncOpenAI, BadRequestError

from ..config import Settings

logger = logging.getLogger(__name__)


class LLMClient:
    """Async LLM client: one prompt in, text or text chunks out."""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.model = settings.llm_model
        self.temperature = settings.llm_temperature
        self.client = client or AsyncOpenAI(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url or None,
            timeout=settings.llm_timeout_seconds,
        )

    def _request(self, prompt: str, json_mode: bool) -> dict:
        kwargs = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        """
        Send a single completion request and return the full text.

        Args:
            prompt: The user prompt
            json_mode: If True, ask the provider for a JSON response

        Returns:
            The assistant's response content
        """
        kwargs = self._request(prompt, json_mode)
        try:
            response = await self.client.chat.completions.create(**kwargs)
        except BadRequestError:
            # Not every provider supports response_format; retry without it
            if "response_format" not in kwargs:
                raise
            logger.warning(f"Provider rejected response_format for {self.model}, retrying without it")
            del kwargs["response_format"]
            response = await self.client.chat.completions.create(**kwargs)
        return response.choices[0].message.content or ""

    async def stream(self, prompt: str, json_mode: bool = False) -> AsyncIterator[str]:
        """
        Stream the completion as text chunks in arrival order.

        The upstream connection is closed when the iteration ends, fails,
        or the generator is closed by the consumer.
        """
        response = await self.client.chat.completions.create(
            **self._request(prompt, json_mode),
            stream=True,
        )
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        finally:
            await response.close()
