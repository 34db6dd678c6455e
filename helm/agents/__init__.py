"""Exploration agents and their entry point."""

from typing import Callable, Dict, Optional, Type

from helm.agents.base import (
    BLOCKED,
    CANCELLED,
    COMPLETED,
    STOPPED_EARLY,
    Agent,
    AgentResult,
)
from helm.agents.campaign import CampaignAgent
from helm.agents.cancellation import CancellationToken, request_cancel
from helm.agents.judge import Choice, Decision, Judge, parse_choice, parse_decision
from helm.agents.scout import ScoutAgent
from helm.agents.trident import TridentAgent
from helm.agents.witness import WitnessAgent
from helm.core.config import AgentConfig
from helm.core.models import Tree
from helm.generators.base import ContinuationGenerator


AGENT_CLASSES: Dict[str, Type[Agent]] = {
    "Scout": ScoutAgent,
    "Witness": WitnessAgent,
    "Campaign": CampaignAgent,
    "Trident": TridentAgent,
}


async def start_agent(
    get_tree: Callable[[], Tree],
    start_node_id: str,
    config: AgentConfig,
    token: CancellationToken,
    sink: Optional[Callable[[str], None]] = None,
    *,
    generator: ContinuationGenerator,
    judge: Judge,
) -> AgentResult:
    """Run the agent matching config.type from start_node_id until it finishes."""
    agent_cls = AGENT_CLASSES[config.type]
    agent = agent_cls(config, get_tree, generator, judge, token=token, sink=sink)
    return await agent.run(start_node_id)


__all__ = [
    "AGENT_CLASSES",
    "BLOCKED",
    "CANCELLED",
    "COMPLETED",
    "STOPPED_EARLY",
    "Agent",
    "AgentResult",
    "CampaignAgent",
    "CancellationToken",
    "Choice",
    "Decision",
    "Judge",
    "ScoutAgent",
    "TridentAgent",
    "WitnessAgent",
    "parse_choice",
    "parse_decision",
    "request_cancel",
    "start_agent",
]
