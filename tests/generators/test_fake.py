"""Tests for the fake models."""

import pytest

from helm.core.errors import GenerationFailure
from helm.generators.fake import FailingGenerator, FakeAssistant, FakeGenerator
from helm.generators.prompt import CHOICE_SYSTEM_PROMPT, DECISION_SYSTEM_PROMPT


@pytest.mark.asyncio
async def test_fake_generator_counts_up():
    gen = FakeGenerator(prefix="opt_")
    texts = [await gen.generate("text") for _ in range(3)]
    assert texts == ["opt_0", "opt_1", "opt_2"]
    assert gen.prompts == ["text", "text", "text"]


@pytest.mark.asyncio
async def test_fake_generator_follows_script_then_counter():
    gen = FakeGenerator(script=[" upon a time", GenerationFailure("down")])
    assert await gen.generate("Once") == " upon a time"
    with pytest.raises(GenerationFailure):
        await gen.generate("Once")
    assert await gen.generate("Once") == "candidate_0"


@pytest.mark.asyncio
async def test_failing_generator():
    gen = FailingGenerator()
    with pytest.raises(GenerationFailure):
        await gen.generate("x")
    assert gen.calls == 1


@pytest.mark.asyncio
async def test_fake_assistant_scripts_by_request_kind():
    assistant = FakeAssistant(decisions=["<decision>cull</decision>"], choices=["<choice>2</choice>"])
    assert await assistant.complete(CHOICE_SYSTEM_PROMPT, "pick") == "<choice>2</choice>"
    assert await assistant.complete(DECISION_SYSTEM_PROMPT, "judge") == "<decision>cull</decision>"
    assert await assistant.complete(DECISION_SYSTEM_PROMPT, "judge") == "<decision>expand</decision>"
    assert await assistant.complete(CHOICE_SYSTEM_PROMPT, "pick") == "<choice>1</choice>"
    assert assistant.choice_requests == ["pick", "pick"]
    assert len(assistant.requests) == 4


@pytest.mark.asyncio
async def test_fake_assistant_raises_scripted_errors():
    assistant = FakeAssistant(decisions=[GenerationFailure("down")])
    with pytest.raises(GenerationFailure):
        await assistant.complete(DECISION_SYSTEM_PROMPT, "judge")
