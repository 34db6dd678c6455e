"""Tests for the Claude-backed generator and assistant, with a stubbed client."""

import types

import anthropic
import httpx
import pytest

from helm.core.errors import GenerationFailure
from helm.generators.claude import ClaudeAssistant, ClaudeContinuationGenerator


def _response(text: str):
    return types.SimpleNamespace(content=[types.SimpleNamespace(type="text", text=text)])


def _api_error() -> anthropic.APIError:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return anthropic.APIConnectionError(request=request)


class _StubMessages:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _client(*outcomes):
    return types.SimpleNamespace(messages=_StubMessages(outcomes))


@pytest.mark.asyncio
async def test_cli_sim_framing():
    client = _client(_response(" upon a time"))
    gen = ClaudeContinuationGenerator(client=client, model="m", max_tokens=12)

    text = await gen.generate("Once")

    assert text == " upon a time"
    call = client.messages.calls[0]
    assert call["model"] == "m"
    assert call["max_tokens"] == 12
    assert "CLI simulation" in call["system"]
    assert call["messages"][0]["content"] == "<cmd>cat draft.txt</cmd>\n\nOnce"


@pytest.mark.asyncio
async def test_plain_mode_sends_prompt_verbatim():
    client = _client(_response("x"))
    gen = ClaudeContinuationGenerator(client=client, cli_sim=False)
    await gen.generate("Once")
    assert client.messages.calls[0]["messages"][0]["content"] == "Once"


@pytest.mark.asyncio
async def test_retries_then_succeeds():
    client = _client(_api_error(), _response("ok"))
    gen = ClaudeContinuationGenerator(client=client, retry_base_delay=0)
    assert await gen.generate("Once") == "ok"
    assert len(client.messages.calls) == 2


@pytest.mark.asyncio
async def test_exhausted_retries_become_generation_failure():
    client = _client(*[_api_error() for _ in range(3)])
    gen = ClaudeContinuationGenerator(client=client, max_retries=2, retry_base_delay=0)
    with pytest.raises(GenerationFailure) as excinfo:
        await gen.generate("Once")
    assert isinstance(excinfo.value.__cause__, anthropic.APIError)


@pytest.mark.asyncio
async def test_empty_response_is_a_failure():
    client = _client(types.SimpleNamespace(content=[]), types.SimpleNamespace(content=[]))
    gen = ClaudeContinuationGenerator(client=client, max_retries=1, retry_base_delay=0)
    with pytest.raises(GenerationFailure):
        await gen.generate("Once")


@pytest.mark.asyncio
async def test_assistant_sends_system_and_user():
    client = _client(_response("<decision>expand</decision>"))
    assistant = ClaudeAssistant(client=client, model="judge", temperature=0.1)

    reply = await assistant.complete("You judge.", "Is this good?")

    assert reply == "<decision>expand</decision>"
    call = client.messages.calls[0]
    assert call["system"] == "You judge."
    assert call["messages"] == [{"role": "user", "content": "Is this good?"}]
    assert call["temperature"] == 0.1
