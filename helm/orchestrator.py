"""Orchestrator tying a Tree, the models and the agents together."""

import logging
from typing import Callable, Dict, List, Optional

from helm.agents import AGENT_CLASSES, AgentResult, CancellationToken, Judge, request_cancel, start_agent
from helm.core.config import AgentConfig, SessionConfig
from helm.core.errors import AgentBusy, GenerationFailure, LockConflict
from helm.core.locks import LockGate
from helm.core.models import Tree
from helm.generators.base import Assistant, ContinuationGenerator
from helm.generators.prompt import build_continuation_prompt


logger = logging.getLogger(__name__)

AGENT_LOCK_REASONS = tuple(sorted({cls.lock_reason for cls in AGENT_CLASSES.values()}))


class Orchestrator:
    """
    Session-level coordinator for one tree.

    Responsibilities:
    - Manual expansion of a node, the human "generate" action.
    - Culling, cursor moves and bookmarks on behalf of the user.
    - Starting and stopping agents, at most one run per agent id.
    """

    def __init__(
        self,
        tree: Tree,
        generator: ContinuationGenerator,
        assistant: Assistant,
        config: Optional[SessionConfig] = None,
    ):
        self.tree = tree
        self.generator = generator
        self.judge = Judge(assistant)
        self.config = config or SessionConfig()
        self.gate = LockGate(self.get_tree)
        self.active: Dict[str, CancellationToken] = {}
        self.outputs: Dict[str, List[str]] = {}

    def get_tree(self) -> Tree:
        return self.tree

    async def expand(self, node_id: Optional[str] = None) -> List[str]:
        """
        Generate `branching_factor` children of node_id (the cursor by
        default) under the `expanding` lock. Failed calls are skipped. With
        copilot enabled, the new children are then judged; returns the ones
        that survive.
        """
        node_id = node_id or self.tree.current_node_id
        with self.gate.held(node_id, "expanding") as acquired:
            if not acquired:
                raise LockConflict(node_id, self.tree.require(node_id).lock_reason)
            prompt = build_continuation_prompt(self.tree.branch_text(node_id))
            children: List[str] = []
            for _ in range(self.config.continuations.branching_factor):
                try:
                    text = await self.generator.generate(prompt)
                except GenerationFailure as exc:
                    logger.warning("Continuation for %s failed: %s", node_id, exc)
                    continue
                children.append(self.tree.add_child(node_id, text, reason="expanding"))
        logger.info("Expanded %s into %d children", node_id, len(children))
        if self.config.copilot.enabled:
            children = await self.copilot(children)
        return children

    async def copilot(self, children: List[str]) -> List[str]:
        """
        Judge freshly generated children one by one and cull those the
        assistant clearly rejects. Stops as soon as copilot is switched off.
        """
        survivors: List[str] = []
        for index, child_id in enumerate(children):
            cfg = self.config.copilot
            if not cfg.enabled:
                survivors.extend(children[index:])
                break
            if child_id not in self.tree.nodes:
                continue
            with self.gate.held(child_id, "copilot-deciding") as acquired:
                if not acquired:
                    survivors.append(child_id)
                    continue
                try:
                    decision = await self.judge.decide(
                        cfg.instructions,
                        self.tree.ancestor_text(child_id, cfg.vision),
                        self.tree.require(child_id).text,
                    )
                except GenerationFailure as exc:
                    logger.warning("Copilot could not judge %s: %s", child_id, exc)
                    survivors.append(child_id)
                    continue
                if decision.expand or decision.ambiguous:
                    survivors.append(child_id)
                    continue
                self.tree.delete(child_id, reason="copilot-deciding")
                logger.info("Copilot culled %s", child_id)
        return survivors

    def cull(self, node_id: str) -> List[str]:
        return self.tree.delete(node_id)

    def select(self, node_id: str) -> None:
        self.tree.select(node_id)

    def toggle_bookmark(self, node_id: str) -> bool:
        return self.tree.toggle_bookmark(node_id)

    def is_running(self, agent_id: str) -> bool:
        return agent_id in self.active

    async def start_agent(
        self,
        config: AgentConfig,
        node_id: Optional[str] = None,
        sink: Optional[Callable[[str], None]] = None,
    ) -> AgentResult:
        """Run an agent from node_id (the cursor by default) to completion."""
        if config.id in self.active:
            raise AgentBusy(f"Agent {config.name} is already running")
        start = node_id or self.tree.current_node_id
        self.tree.require(start)

        token = CancellationToken()
        self.active[config.id] = token
        outputs = self.outputs.setdefault(config.id, [])

        def record(line: str) -> None:
            outputs.append(line)
            if sink is not None:
                sink(line)

        logger.info("Starting %s %s at %s", config.type, config.name, start)
        try:
            return await start_agent(
                self.get_tree,
                start,
                config,
                token,
                record,
                generator=self.generator,
                judge=self.judge,
            )
        finally:
            del self.active[config.id]
            if not self.active:
                self._sweep_agent_locks()

    def _sweep_agent_locks(self) -> None:
        """With no agent running, any agent lock left in the tree is stale."""
        for reason in AGENT_LOCK_REASONS:
            cleared = self.gate.release_all(reason)
            if cleared:
                logger.warning("Cleared %d stale %s locks", cleared, reason)

    def stop_agent(self, agent_id: str) -> bool:
        token = self.active.get(agent_id)
        if token is None:
            return False
        request_cancel(token)
        return True

    def stop_all(self) -> None:
        for token in self.active.values():
            request_cancel(token)
