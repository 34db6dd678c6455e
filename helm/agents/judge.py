"""Judging continuations with the assistant model, and parsing its verdicts."""

from dataclasses import dataclass
import logging
import re
from typing import Sequence

from helm.core.errors import JudgeAmbiguous
from helm.generators.base import Assistant
from helm.generators.prompt import (
    CHOICE_SYSTEM_PROMPT,
    DECISION_SYSTEM_PROMPT,
    build_choice_message,
    build_decision_message,
)


logger = logging.getLogger(__name__)

_DECISION_RE = re.compile(r"<decision>\s*(expand|cull)\s*</decision>", re.IGNORECASE)
_CHOICE_RE = re.compile(r"<choice>\s*(\d+)\s*</choice>", re.IGNORECASE)


@dataclass
class Decision:
    expand: bool
    ambiguous: bool = False
    raw: str = ""


@dataclass
class Choice:
    index: int  # 0-based
    ambiguous: bool = False
    raw: str = ""


def parse_decision(text: str) -> Decision:
    """
    Read an expand/cull verdict. Only an answer whose markers all say
    expand counts as expand; no marker, or mixed markers, means cull.
    """
    markers = {m.lower() for m in _DECISION_RE.findall(text)}
    if markers == {"expand"}:
        return Decision(expand=True, raw=text)
    if markers == {"cull"}:
        return Decision(expand=False, raw=text)
    return Decision(expand=False, ambiguous=True, raw=text)


def parse_choice(text: str, count: int, strict: bool = False) -> Choice:
    """
    Read a 1-based <choice>N</choice> answer into a 0-based index. The last
    marker wins. Anything unusable falls back to the first candidate, or
    raises JudgeAmbiguous when strict.
    """
    matches = _CHOICE_RE.findall(text)
    if matches:
        index = int(matches[-1]) - 1
        if 0 <= index < count:
            return Choice(index=index, raw=text)
    if strict:
        raise JudgeAmbiguous(f"No usable choice among {count} candidates in: {text!r}")
    return Choice(index=0, ambiguous=True, raw=text)


class Judge:
    """Asks the assistant to rule on continuations."""

    def __init__(self, assistant: Assistant):
        self.assistant = assistant

    async def decide(self, instructions: str, context: str, node_text: str) -> Decision:
        message = build_decision_message(instructions, context, node_text)
        reply = await self.assistant.complete(DECISION_SYSTEM_PROMPT, message)
        decision = parse_decision(reply)
        if decision.ambiguous:
            logger.warning("Judge gave no clear decision; treating as cull: %r", reply[-200:])
        return decision

    async def choose(self, instructions: str, context: str, candidates: Sequence[str]) -> Choice:
        if len(candidates) <= 1:
            return Choice(index=0)
        message = build_choice_message(instructions, context, candidates)
        reply = await self.assistant.complete(CHOICE_SYSTEM_PROMPT, message)
        choice = parse_choice(reply, len(candidates))
        if choice.ambiguous:
            logger.warning("Judge gave no usable choice; defaulting to the first: %r", reply[-200:])
        return choice
