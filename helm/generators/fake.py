"""Deterministic fake models for tests."""

from typing import Iterable, List, Optional, Tuple, Union

from helm.core.errors import GenerationFailure
from helm.generators.prompt import CHOICE_SYSTEM_PROMPT


Scripted = Union[str, Exception]


class FakeGenerator:
    """
    Continuation generator with scripted output.

    With a script, each call pops the next entry; an Exception entry is
    raised instead of returned. Without one (or once it runs out), calls
    return `prefix` followed by a running counter: candidate_0, candidate_1, ...
    """

    def __init__(self, prefix: str = "candidate_", script: Optional[Iterable[Scripted]] = None):
        self.prefix = prefix
        self.script: List[Scripted] = list(script or [])
        self.prompts: List[str] = []
        self._counter = 0

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        text = f"{self.prefix}{self._counter}"
        self._counter += 1
        return text


class FailingGenerator:
    """Generator whose every call fails, as a provider outage would."""

    def __init__(self):
        self.calls = 0

    async def generate(self, prompt: str) -> str:
        self.calls += 1
        raise GenerationFailure("provider unavailable")


class FakeAssistant:
    """
    Judge with separate scripts for expand/cull decisions and for choices.
    Once a script runs out, `decision` or `choice` is returned. Every
    (system_prompt, user_message) pair is recorded in `requests`.
    """

    def __init__(
        self,
        decisions: Optional[Iterable[Scripted]] = None,
        choices: Optional[Iterable[Scripted]] = None,
        decision: str = "<decision>expand</decision>",
        choice: str = "<choice>1</choice>",
    ):
        self.decisions: List[Scripted] = list(decisions or [])
        self.choices: List[Scripted] = list(choices or [])
        self.decision = decision
        self.choice = choice
        self.requests: List[Tuple[str, str]] = []

    @property
    def choice_requests(self) -> List[str]:
        return [message for system, message in self.requests if system == CHOICE_SYSTEM_PROMPT]

    async def complete(self, system_prompt: str, user_message: str) -> str:
        self.requests.append((system_prompt, user_message))
        if system_prompt == CHOICE_SYSTEM_PROMPT:
            script, fallback = self.choices, self.choice
        else:
            script, fallback = self.decisions, self.decision
        if script:
            item = script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return fallback
