"""Configuration dataclasses for Helm sessions and agents."""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from helm.core.models import new_id


AGENT_TYPES = ("Scout", "Witness", "Campaign", "Trident")

DEFAULT_SCOUT_INSTRUCTIONS = (
    "Choose to expand nodes that are interesting, and cull nodes that are boring."
)
DEFAULT_WITNESS_INSTRUCTIONS = "Choose the most interesting continuation."
DEFAULT_TRIDENT_INSTRUCTIONS = DEFAULT_SCOUT_INSTRUCTIONS

DEFAULT_INSTRUCTIONS = {
    "Scout": DEFAULT_SCOUT_INSTRUCTIONS,
    "Witness": DEFAULT_WITNESS_INSTRUCTIONS,
    "Campaign": DEFAULT_SCOUT_INSTRUCTIONS,
    "Trident": DEFAULT_TRIDENT_INSTRUCTIONS,
}


@dataclass
class ModelConfig:
    """Settings for one model endpoint."""

    engine_type: str = "anthropic"  # "anthropic" | "fake"
    model_name: str = "claude-3-5-sonnet-latest"
    temperature: float = 1.0
    top_p: float = 1.0
    max_tokens: int = 64


@dataclass
class ContinuationConfig(ModelConfig):
    """The model that writes continuations."""

    branching_factor: int = 3  # children per manual expansion
    cli_sim: bool = True  # frame requests as a CLI simulation


@dataclass
class AssistantConfig(ModelConfig):
    """The model that judges continuations for the agents."""

    temperature: float = 0.3
    max_tokens: int = 512


@dataclass
class CopilotConfig:
    """Judging of manually generated children."""

    enabled: bool = False
    instructions: str = DEFAULT_SCOUT_INSTRUCTIONS
    vision: int = 3


@dataclass
class SessionConfig:
    """Configuration for a complete Helm session."""

    id: str = field(default_factory=new_id)
    continuations: ContinuationConfig = field(default_factory=ContinuationConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    copilot: CopilotConfig = field(default_factory=CopilotConfig)
    trees_dir: str = "trees"
    max_retries: int = 3
    retry_base_delay: float = 1.0  # seconds, doubled per attempt


@dataclass(frozen=True)
class AgentConfig:
    """
    Parameters of one agent. Frozen: a run reads them but never changes them.

    vision: ancestor nodes included as context
    range: continuations requested per expansion
    depth: maximum traversal depth
    cycles: Scout->Witness rounds (Campaign)
    prongs, tries: parallel paths and attempts per level (Trident)
    shotgun_*: per-layer range override for the first layers
    campaign_*: phase overrides; None falls back to the value above
    """

    name: str = "Agent"
    type: str = "Scout"
    id: str = field(default_factory=lambda: f"agent_{new_id()}")
    instructions: str = DEFAULT_SCOUT_INSTRUCTIONS
    vision: int = 3
    range: int = 2
    depth: int = 3
    cycles: int = 3
    prongs: int = 3
    tries: int = 3

    shotgun_enabled: bool = False
    shotgun_layers: int = 0
    shotgun_ranges: Tuple[int, ...] = ()

    campaign_scout_instructions: Optional[str] = None
    campaign_scout_vision: Optional[int] = None
    campaign_scout_range: Optional[int] = None
    campaign_scout_depth: Optional[int] = None
    campaign_witness_instructions: Optional[str] = None
    campaign_witness_vision: Optional[int] = None

    def __post_init__(self):
        if self.type not in AGENT_TYPES:
            raise ValueError(f"Unknown agent type: {self.type}")

    def range_at(self, level: int) -> int:
        """Branching factor at traversal level `level` (0 = start node)."""
        if (
            self.shotgun_enabled
            and level < self.shotgun_layers
            and level < len(self.shotgun_ranges)
        ):
            return self.shotgun_ranges[level]
        return self.range

    def scout_phase(self) -> "AgentConfig":
        """Config for a Campaign's Scout phase."""
        return replace(
            self,
            type="Scout",
            instructions=_pick(self.campaign_scout_instructions, self.instructions),
            vision=_pick(self.campaign_scout_vision, self.vision),
            range=_pick(self.campaign_scout_range, self.range),
            depth=_pick(self.campaign_scout_depth, self.depth),
        )

    def witness_phase(self) -> "AgentConfig":
        """Config for a Campaign's Witness phase."""
        return replace(
            self,
            type="Witness",
            instructions=_pick(self.campaign_witness_instructions, DEFAULT_WITNESS_INSTRUCTIONS),
            vision=_pick(self.campaign_witness_vision, self.vision),
        )


def _pick(override, fallback):
    return fallback if override is None else override
