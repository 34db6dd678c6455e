"""Trident: several single-path prongs from one node; the best one survives."""

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional, Set

from helm.agents.base import BLOCKED, CANCELLED, Agent, AgentResult, preview
from helm.core.errors import GenerationFailure


@dataclass
class ProngOutcome:
    index: int
    leaf_id: str
    path: List[str] = field(default_factory=list)  # nodes advanced into, top first
    inconclusive: bool = False

    @property
    def depth(self) -> int:
        return len(self.path)


class TridentAgent(Agent):
    """
    Runs `prongs` independent explorations of one path each, `depth` levels
    deep, with up to `tries` attempts per level. The start node stays
    locked for the whole run.

    Ranking of finished prongs: deepest first, then lowest prong index.
    The judge picks among the ranked prongs; an unusable answer keeps the
    top-ranked one, and so does a cancelled run, which asks no judge.
    Losing prongs are pruned either way.
    """

    agent_type = "Trident"
    lock_reason = "trident-active"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._occupied: Dict[str, int] = {}

    async def run(self, start_node_id: str) -> AgentResult:
        result = self.new_result(start_node_id)
        if self.cancelled_before_start(result):
            return result

        with self.gate.held(start_node_id, self.lock_reason) as acquired:
            if not acquired:
                result.status = BLOCKED
                self.report(result, f"Start node {start_node_id} is locked; nothing to do", logging.WARNING)
                return result

            self._occupied = {}
            outcomes = await self.run_prongs(start_node_id, result)

            if self.token.cancelled:
                result.status = CANCELLED
                ranked = self.rank(outcomes)
                best = ranked[0] if ranked else None
                self.report(result, "Cancelled; keeping the deepest prong without judging")
            else:
                best = await self.select(start_node_id, outcomes, result)
            if best is not None:
                deleted: Set[str] = set()
                for outcome in outcomes:
                    if outcome is best or not outcome.path:
                        continue
                    head = outcome.path[0]
                    if head in deleted or head not in self.tree.nodes:
                        continue
                    deleted.update(self.cull(head, result))
                self.follow_cursor(start_node_id, best.leaf_id)
                result.final_node_id = best.leaf_id
                self.report(result, f"Kept prong {best.index + 1} ({best.depth} levels)")

        result.frontier = self.compute_frontier(result)
        return result

    async def run_prongs(self, start_node_id: str, result: AgentResult) -> List[ProngOutcome]:
        """
        Run every prong concurrently. If one of them raises, the others are
        cancelled and awaited before the error propagates, so no prong
        outlives the run or keeps a lock.
        """
        tasks = [
            asyncio.create_task(self.prong(i, start_node_id, result))
            for i in range(self.config.prongs)
        ]
        try:
            return await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def prong(self, index: int, start_node_id: str, result: AgentResult) -> ProngOutcome:
        outcome = ProngOutcome(index=index, leaf_id=start_node_id)
        label = f"Prong {index + 1}"
        current = start_node_id

        for level in range(self.config.depth):
            if self.token.cancelled:
                break
            if current != start_node_id and not self._claim(current, index):
                outcome.inconclusive = True
                self.report(result, f"{label}: layer {level + 1} inconclusive, {current} is taken")
                break
            try:
                with self.gate.held(current, self.lock_reason) as acquired:
                    if not acquired:
                        outcome.inconclusive = True
                        self.report(result, f"{label}: layer {level + 1} inconclusive, {current} is locked")
                        break
                    child = await self.advance(label, current, result)
            finally:
                if current != start_node_id:
                    self._occupied.pop(current, None)

            if child is None:
                self.report(result, f"{label}: no keeper after {self.config.tries} tries at layer {level + 1}")
                break
            outcome.path.append(child)
            outcome.leaf_id = child
            current = child

        return outcome

    async def advance(self, label: str, node_id: str, result: AgentResult) -> Optional[str]:
        """Try up to `tries` times to grow one continuation the judge keeps."""
        cfg = self.config
        for attempt in range(1, cfg.tries + 1):
            if self.token.cancelled:
                return None
            children = await self.expand(node_id, 1, cfg.vision, result)
            if not children:
                self.report(result, f"{label}: attempt {attempt}/{cfg.tries} produced nothing")
                continue
            child = children[0]
            if await self.judge_child(child, cfg.vision, cfg.instructions, result):
                self.report(result, f"{label}: expand {preview(self.tree.nodes[child].text)!r}")
                return child
            self.report(result, f"{label}: attempt {attempt}/{cfg.tries} culled")
            self.cull(child, result)
        return None

    async def select(
        self, start_node_id: str, outcomes: List[ProngOutcome], result: AgentResult
    ) -> Optional[ProngOutcome]:
        tree = self.tree
        ranked = self.rank(outcomes)
        if not ranked:
            self.report(result, "No prong advanced past the start node")
            return None
        if len(ranked) == 1:
            return ranked[0]

        below = len(tree.ancestry(start_node_id))
        texts = [
            "".join(tree.nodes[nid].text for nid in tree.ancestry(o.leaf_id)[below:])
            for o in ranked
        ]
        try:
            choice = await self.judge.choose(
                self.config.instructions, tree.context_text(start_node_id, self.config.vision), texts
            )
        except GenerationFailure as exc:
            self.report(result, f"Final judgement failed, keeping the deepest prong: {exc}", logging.WARNING)
            return ranked[0]
        if choice.ambiguous:
            self.report(result, "Unclear final choice; keeping the deepest prong")
        return ranked[choice.index]

    def rank(self, outcomes: List[ProngOutcome]) -> List[ProngOutcome]:
        """Viable prongs, deepest first, then by prong index."""
        tree = self.tree
        return sorted(
            (o for o in outcomes if o.path and o.leaf_id in tree.nodes),
            key=lambda o: (-o.depth, o.index),
        )

    def _claim(self, node_id: str, index: int) -> bool:
        holder = self._occupied.get(node_id)
        if holder is not None and holder != index:
            return False
        self._occupied[node_id] = index
        return True
