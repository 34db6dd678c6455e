"""Anthropic-backed continuation generator and assistant."""

from dataclasses import dataclass
import logging
from typing import Any

import anthropic

from helm.core.errors import GenerationFailure
from helm.generators.base import with_retry
from helm.generators.prompt import CLI_SIM_SYSTEM_PROMPT


logger = logging.getLogger(__name__)


def _response_text(response: Any) -> str:
    blocks = [block.text for block in response.content if getattr(block, "type", "text") == "text"]
    if not blocks:
        raise GenerationFailure("No completion returned from API")
    return "".join(blocks)


@dataclass
class ClaudeContinuationGenerator:
    """
    Generate continuations with Claude.

    With cli_sim on, the text is framed as the output of `cat draft.txt`
    so the chat model answers with raw continuation text.
    """

    client: Any  # anthropic.AsyncAnthropic
    model: str = "claude-3-5-sonnet-latest"
    temperature: float = 1.0
    top_p: float = 1.0
    max_tokens: int = 64
    cli_sim: bool = True
    max_retries: int = 3
    retry_base_delay: float = 1.0

    async def generate(self, prompt: str) -> str:
        if self.cli_sim:
            system = CLI_SIM_SYSTEM_PROMPT
            content = f"<cmd>cat draft.txt</cmd>\n\n{prompt}"
        else:
            system = anthropic.NOT_GIVEN
            content = prompt

        async def call() -> str:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                top_p=self.top_p,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
            return _response_text(response)

        try:
            return await with_retry(
                call,
                retry_on=(anthropic.APIError, GenerationFailure),
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
            )
        except anthropic.APIError as exc:
            raise GenerationFailure(f"Continuation request failed: {exc}") from exc


@dataclass
class ClaudeAssistant:
    """Judge model: a system prompt plus one user message."""

    client: Any  # anthropic.AsyncAnthropic
    model: str = "claude-3-5-sonnet-latest"
    temperature: float = 0.3
    top_p: float = 1.0
    max_tokens: int = 512
    max_retries: int = 3
    retry_base_delay: float = 1.0

    async def complete(self, system_prompt: str, user_message: str) -> str:
        async def call() -> str:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                top_p=self.top_p,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
            )
            return _response_text(response)

        logger.debug("Assistant request:\n%s", user_message)
        try:
            return await with_retry(
                call,
                retry_on=(anthropic.APIError, GenerationFailure),
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
            )
        except anthropic.APIError as exc:
            raise GenerationFailure(f"Assistant request failed: {exc}") from exc
