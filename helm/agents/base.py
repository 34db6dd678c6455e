"""Shared machinery for the exploration agents."""

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Callable, List, Optional

from helm.agents.cancellation import CancellationToken
from helm.agents.judge import Judge
from helm.core.config import AgentConfig
from helm.core.errors import GenerationFailure, LockConflict, StructuralViolation
from helm.core.locks import LockGate
from helm.core.models import Tree
from helm.generators.base import ContinuationGenerator
from helm.generators.prompt import build_continuation_prompt


logger = logging.getLogger(__name__)

COMPLETED = "completed"
CANCELLED = "cancelled"
BLOCKED = "blocked"  # start node held by someone else
STOPPED_EARLY = "stopped_early"


@dataclass
class AgentResult:
    """
    Outcome of one agent run.

    frontier: surviving nodes this run created that have no surviving
              children from the same run, in creation order
    outputs: every progress line reported during the run
    """

    agent_id: str
    agent_type: str
    start_node_id: str
    status: str = COMPLETED
    final_node_id: Optional[str] = None
    created_ids: List[str] = field(default_factory=list)
    culled: int = 0
    frontier: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)


def preview(text: str, limit: int = 40) -> str:
    flat = text.replace("\n", " ")
    return flat if len(flat) <= limit else flat[: limit - 3] + "..."


class Agent:
    """
    Base class for agents that grow and prune a tree.

    The tree is never held directly: `get_tree` is called before each
    decision so the agent sees edits made by the human or other agents.
    """

    agent_type = ""
    lock_reason = ""

    def __init__(
        self,
        config: AgentConfig,
        get_tree: Callable[[], Tree],
        generator: ContinuationGenerator,
        judge: Judge,
        token: Optional[CancellationToken] = None,
        sink: Optional[Callable[[str], None]] = None,
    ):
        self.config = config
        self.get_tree = get_tree
        self.generator = generator
        self.judge = judge
        self.token = token or CancellationToken()
        self.sink = sink
        self.gate = LockGate(get_tree)

    @property
    def tree(self) -> Tree:
        return self.get_tree()

    async def run(self, start_node_id: str) -> AgentResult:
        raise NotImplementedError

    def new_result(self, start_node_id: str) -> AgentResult:
        return AgentResult(
            agent_id=self.config.id,
            agent_type=self.agent_type,
            start_node_id=start_node_id,
            final_node_id=start_node_id,
        )

    def report(self, result: AgentResult, message: str, level: int = logging.INFO) -> None:
        result.outputs.append(message)
        logger.log(level, "[%s] %s", self.config.name, message)
        if self.sink is not None:
            self.sink(message)

    def cancelled_before_start(self, result: AgentResult) -> bool:
        if not self.token.cancelled:
            return False
        result.status = CANCELLED
        self.report(result, "Cancelled before any work began", logging.WARNING)
        return True

    async def expand(self, node_id: str, count: int, vision: int, result: AgentResult) -> List[str]:
        """
        Request `count` continuations of node_id concurrently and attach the
        ones that succeed, in request order. The caller holds the node's lock.
        """
        if count <= 0:
            return []
        prompt = build_continuation_prompt(self.tree.context_text(node_id, vision))
        outcomes = await asyncio.gather(
            *(self.generator.generate(prompt) for _ in range(count)),
            return_exceptions=True,
        )
        if self.token.cancelled:
            self.report(result, f"Cancelled; discarded {len(outcomes)} pending continuations")
            return []

        children: List[str] = []
        for outcome in outcomes:
            if isinstance(outcome, GenerationFailure):
                self.report(result, f"Generation failed: {outcome}", logging.WARNING)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            try:
                child_id = self.tree.add_child(node_id, outcome, reason=self.lock_reason)
            except (LockConflict, StructuralViolation) as exc:
                self.report(result, f"Could not attach continuation: {exc}", logging.WARNING)
                break
            children.append(child_id)
        result.created_ids.extend(children)
        return children

    async def judge_child(self, child_id: str, vision: int, instructions: str, result: AgentResult) -> bool:
        """True when the assistant clearly says expand; every other outcome culls."""
        node = self.tree.get(child_id)
        if node is None:
            return False
        try:
            decision = await self.judge.decide(
                instructions, self.tree.ancestor_text(child_id, vision), node.text
            )
        except GenerationFailure as exc:
            self.report(result, f"Judge failed on {child_id}, culling: {exc}", logging.WARNING)
            return False
        if decision.ambiguous:
            self.report(result, f"Unclear verdict on {child_id}, culling")
        return decision.expand

    def cull(self, node_id: str, result: AgentResult) -> List[str]:
        """Delete node_id's subtree; a conflict is reported and skipped."""
        try:
            removed = self.tree.delete(node_id)
        except (LockConflict, StructuralViolation) as exc:
            self.report(result, f"Could not cull {node_id}: {exc}", logging.WARNING)
            return []
        result.culled += len(removed)
        return removed

    def prune_to(self, anchor_id: str, winner_id: str, result: AgentResult) -> None:
        """Delete every branch under anchor_id that is off the path to winner_id."""
        path = self.tree.ancestry(winner_id)
        if anchor_id not in path:
            return
        on_path = path[path.index(anchor_id):]
        keep = set(on_path)
        for node_id in on_path[:-1]:
            node = self.tree.get(node_id)
            if node is None:
                continue
            for child_id in list(node.child_ids):
                if child_id not in keep:
                    self.cull(child_id, result)

    def follow_cursor(self, decision_node_id: str, winner_id: str) -> None:
        """Move the human cursor onto the winner if it sat on the decided lineage."""
        tree = self.tree
        current = tree.current_node_id
        if winner_id not in tree.nodes:
            return
        if tree.is_descendant(current, decision_node_id) and not tree.is_descendant(current, winner_id):
            tree.current_node_id = winner_id

    def compute_frontier(self, result: AgentResult) -> List[str]:
        tree = self.tree
        alive = [nid for nid in result.created_ids if nid in tree.nodes]
        alive_set = set(alive)
        return [
            nid for nid in alive
            if not any(child in alive_set for child in tree.nodes[nid].child_ids)
        ]
