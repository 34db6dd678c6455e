"""Tests for helm.agents.judge: verdict parsing and the Judge wrapper."""

import pytest

from helm.agents.judge import Judge, parse_choice, parse_decision
from helm.core.errors import JudgeAmbiguous
from helm.generators.fake import FakeAssistant
from helm.generators.prompt import CHOICE_SYSTEM_PROMPT, DECISION_SYSTEM_PROMPT


class TestParseDecision:
    """Expand only when every marker says expand."""

    def test_expand(self):
        decision = parse_decision("Lively image. <decision>expand</decision>")
        assert decision.expand is True
        assert decision.ambiguous is False

    def test_cull(self):
        decision = parse_decision("Flat. <decision> CULL </decision>")
        assert decision.expand is False
        assert decision.ambiguous is False

    def test_no_marker_culls(self):
        decision = parse_decision("I would expand this one.")
        assert decision.expand is False
        assert decision.ambiguous is True

    def test_mixed_markers_cull(self):
        decision = parse_decision("<decision>expand</decision> or maybe <decision>cull</decision>")
        assert decision.expand is False
        assert decision.ambiguous is True


class TestParseChoice:
    """1-based answers become 0-based indices; bad answers fall back to 0."""

    def test_valid(self):
        assert parse_choice("<choice>2</choice>", 3).index == 1

    def test_last_marker_wins(self):
        assert parse_choice("<choice>1</choice> no, <choice>3</choice>", 3).index == 2

    @pytest.mark.parametrize("text", ["no idea", "<choice>0</choice>", "<choice>4</choice>", "<choice>two</choice>"])
    def test_unusable_defaults_to_first(self, text):
        choice = parse_choice(text, 3)
        assert choice.index == 0
        assert choice.ambiguous is True

    def test_strict_raises(self):
        with pytest.raises(JudgeAmbiguous):
            parse_choice("<choice>9</choice>", 3, strict=True)


class TestJudge:
    """Tests for the Judge wrapper."""

    @pytest.mark.asyncio
    async def test_decide_sends_decision_prompt(self):
        assistant = FakeAssistant(decisions=["<decision>cull</decision>"])
        decision = await Judge(assistant).decide("Be strict", "Once", " upon")
        assert decision.expand is False
        system, message = assistant.requests[0]
        assert system == DECISION_SYSTEM_PROMPT
        assert "Be strict" in message
        assert "Current node:\n upon" in message

    @pytest.mark.asyncio
    async def test_choose_sends_every_candidate(self):
        assistant = FakeAssistant(choices=["<choice>3</choice>"])
        choice = await Judge(assistant).choose("", "Once", ["A", "B", "C"])
        assert choice.index == 2
        system, message = assistant.requests[0]
        assert system == CHOICE_SYSTEM_PROMPT
        assert all(text in message for text in ("A", "B", "C"))

    @pytest.mark.asyncio
    async def test_choose_single_candidate_skips_the_model(self):
        assistant = FakeAssistant()
        choice = await Judge(assistant).choose("", "Once", ["A"])
        assert choice.index == 0
        assert assistant.requests == []
