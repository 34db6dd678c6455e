"""Witness: pick the best sibling continuation and prune the rest."""

import logging
from typing import Optional

from helm.agents.base import BLOCKED, CANCELLED, Agent, AgentResult, preview
from helm.core.errors import GenerationFailure


class WitnessAgent(Agent):
    """
    Walks down from a start node for up to `depth` decision points. At each
    one the judge sees every child at once and names a single survivor;
    the other siblings are deleted.
    """

    agent_type = "Witness"
    lock_reason = "witness-active"

    async def run(self, start_node_id: str) -> AgentResult:
        result = self.new_result(start_node_id)
        if self.cancelled_before_start(result):
            return result

        node_id = start_node_id
        for level in range(self.config.depth):
            if self.token.cancelled:
                result.status = CANCELLED
                self.report(result, "Cancelled")
                break
            with self.gate.held(node_id, self.lock_reason) as acquired:
                if not acquired:
                    if level == 0:
                        result.status = BLOCKED
                        self.report(result, f"Start node {node_id} is locked; nothing to do", logging.WARNING)
                        return result
                    self.report(result, f"Stopping at {node_id}: in use elsewhere")
                    break
                winner = await self.decide_at(node_id, result)
            if winner is None:
                break
            node_id = winner

        result.final_node_id = node_id
        return result

    async def decide_at(self, node_id: str, result: AgentResult) -> Optional[str]:
        """Resolve one decision point under node_id; return the surviving child."""
        cfg = self.config
        node = self.tree.get(node_id)
        if node is None:
            self.report(result, f"Node {node_id} disappeared")
            return None

        if len(node.child_ids) < 2:
            await self.expand(node_id, cfg.range - len(node.child_ids), cfg.vision, result)
            if self.token.cancelled:
                return None
        candidates = list(self.tree.require(node_id).child_ids)

        if not candidates:
            self.report(result, f"Nothing to witness under {node_id}")
            return None
        if len(candidates) == 1:
            winner = candidates[0]
        else:
            texts = [self.tree.nodes[c].text for c in candidates]
            try:
                choice = await self.judge.choose(
                    cfg.instructions, self.tree.context_text(node_id, cfg.vision), texts
                )
            except GenerationFailure as exc:
                self.report(result, f"Judge failed at {node_id}; leaving siblings untouched: {exc}", logging.WARNING)
                return None
            if choice.ambiguous:
                self.report(result, "Unclear choice; keeping the first candidate")
            winner = candidates[choice.index]

        if winner not in self.tree.nodes:
            self.report(result, f"Chosen node {winner} was removed meanwhile")
            return None

        for sibling in [c for c in self.tree.require(node_id).child_ids if c != winner]:
            self.cull(sibling, result)
        self.follow_cursor(node_id, winner)
        self.report(result, f"Chose {preview(self.tree.nodes[winner].text)!r} of {len(candidates)}")
        return winner
