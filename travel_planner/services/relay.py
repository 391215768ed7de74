"""
Generation Relay - drives the upstream model and either forwards its raw
chunks or reduces its output to a single JSON document.
"""
import logging
from enum import Enum
from typing import AsyncIterator

from .json_extractor import parse_model_json
from .llm_client import LLMClient
from ..exceptions import GENERATION_ERROR_MESSAGE, UpstreamGenerationError
from ..models.action import ActionResult

logger = logging.getLogger(__name__)


class RelayMode(str, Enum):
    """How the upstream output reaches the caller."""
    BUFFERED = "buffered"  # One non-streaming call, parsed to JSON
    MATERIALIZE = "materialize"  # Streaming call, concatenated and parsed to JSON
    FORWARD = "forward"  # Streaming call, raw chunks handed to the transport


class GenerationRelay:
    """Wraps a single upstream model call per request."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def relay(self, prompt: str, mode: RelayMode = RelayMode.BUFFERED) -> ActionResult:
        """
        Run the prompt through the model.

        Returns:
            200 with the parsed JSON document, 200 with a chunk iterator
            (``stream=True``) in forward mode, or 500 when generation failed.
        """
        try:
            if mode == RelayMode.FORWARD:
                return ActionResult(status=200, body=await self._forward(prompt), stream=True)

            if mode == RelayMode.MATERIALIZE:
                text = "".join([chunk async for chunk in self.llm.stream(prompt, json_mode=True)])
            else:
                text = await self.llm.generate(prompt, json_mode=True)
            return ActionResult(status=200, body=parse_model_json(text))

        except UpstreamGenerationError as e:
            return ActionResult(status=e.status_code, body=e.to_body())
        except Exception as e:
            logger.error(f"Upstream model call failed ({mode.value}): {e}")
            return ActionResult(status=500, body={"error": GENERATION_ERROR_MESSAGE})

    async def answer(self, prompt: str) -> str:
        """Plain-text completion, used for search questions."""
        try:
            return await self.llm.generate(prompt)
        except Exception as e:
            logger.error(f"Upstream model call failed (answer): {e}")
            raise UpstreamGenerationError() from e

    async def _forward(self, prompt: str) -> AsyncIterator[str]:
        # Pull the first chunk now so a failure before any output is still
        # reported as a regular error result.
        upstream = self.llm.stream(prompt, json_mode=True)
        try:
            first = await upstream.__anext__()
        except StopAsyncIteration:
            await upstream.aclose()
            return _empty()
        except BaseException:
            await upstream.aclose()
            raise
        return _prepend(first, upstream)


async def _prepend(first: str, upstream: AsyncIterator[str]) -> AsyncIterator[str]:
    try:
        yield first
        async for chunk in upstream:
            yield chunk
    finally:
        await upstream.aclose()


async def _empty() -> AsyncIterator[str]:
    for chunk in ():
        yield chunk
