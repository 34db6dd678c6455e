"""Loading model settings and agent definitions from TOML profiles."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional
import tomllib

from helm.core.config import (
    DEFAULT_INSTRUCTIONS,
    AgentConfig,
    AssistantConfig,
    ContinuationConfig,
    CopilotConfig,
    SessionConfig,
)


@dataclass
class Profile:
    """Session settings plus the agents a user has defined."""

    session: SessionConfig = field(default_factory=SessionConfig)
    agents: List[AgentConfig] = field(default_factory=list)

    def agent(self, name: str) -> Optional[AgentConfig]:
        """Find an agent by name (or id)."""
        for agent in self.agents:
            if agent.name == name or agent.id == name:
                return agent
        return None


def load_profile(path: Path) -> Profile:
    """
    Load a profile from a TOML file.

    [continuations] and [assistant] tables fill the model settings and
    [copilot] the judging of manual expansions. Top level keys fill the rest
    of SessionConfig, and each [[agents]] entry becomes an AgentConfig.
    Unknown keys are ignored.
    """
    data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
    return profile_from_dict(data)


def profile_from_dict(data: Dict[str, Any]) -> Profile:
    session = SessionConfig(
        **_known(SessionConfig, data, skip=("continuations", "assistant", "copilot")),
        continuations=ContinuationConfig(**_known(ContinuationConfig, data.get("continuations", {}))),
        assistant=AssistantConfig(**_known(AssistantConfig, data.get("assistant", {}))),
        copilot=CopilotConfig(**_known(CopilotConfig, data.get("copilot", {}))),
    )
    agents = [_agent_from_dict(raw, idx) for idx, raw in enumerate(data.get("agents", []), start=1)]
    return Profile(session=session, agents=agents)


def _agent_from_dict(raw: Dict[str, Any], position: int) -> AgentConfig:
    values = _known(AgentConfig, raw)
    values.setdefault("name", f"Agent {position}")
    agent_type = values.setdefault("type", "Scout")
    values.setdefault("instructions", DEFAULT_INSTRUCTIONS.get(agent_type, ""))
    if agent_type == "Trident":
        # Trident explores single paths, so it defaults deeper
        values.setdefault("depth", 6)
    if "shotgun_ranges" in values:
        values["shotgun_ranges"] = tuple(int(r) for r in values["shotgun_ranges"])
    return AgentConfig(**values)


def _known(cls, data: Dict[str, Any], skip=()) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)} - set(skip)
    return {k: v for k, v in data.items() if k in names}
