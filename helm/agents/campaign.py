"""Campaign: alternating Scout and Witness phases that advance an anchor."""

import logging
from typing import List, Optional

from helm.agents.base import BLOCKED, CANCELLED, STOPPED_EARLY, Agent, AgentResult, preview
from helm.agents.scout import ScoutAgent
from helm.core.config import AgentConfig
from helm.core.errors import GenerationFailure


class CampaignAgent(Agent):
    """
    Runs `cycles` rounds. Each round scouts below the anchor, has the
    judge pick one of the open leaves the scout left behind, prunes
    everything else under the anchor and moves the anchor to that leaf.
    """

    agent_type = "Campaign"
    lock_reason = "witness-active"

    async def run(self, start_node_id: str) -> AgentResult:
        result = self.new_result(start_node_id)
        if self.cancelled_before_start(result):
            return result

        scout_cfg = self.config.scout_phase()
        witness_cfg = self.config.witness_phase()
        anchor = start_node_id

        for cycle in range(1, self.config.cycles + 1):
            if self.token.cancelled:
                result.status = CANCELLED
                self.report(result, f"Cancelled before cycle {cycle}")
                break

            self.report(result, f"Cycle {cycle}/{self.config.cycles}: scouting from {anchor}")
            scout = ScoutAgent(scout_cfg, self.get_tree, self.generator, self.judge, self.token, self.sink)
            scouted = await scout.run(anchor)
            result.outputs.extend(scouted.outputs)
            result.created_ids.extend(scouted.created_ids)
            result.culled += scouted.culled

            if scouted.status == CANCELLED:
                result.status = CANCELLED
                break
            if scouted.status == BLOCKED:
                result.status = BLOCKED if cycle == 1 else STOPPED_EARLY
                self.report(result, f"Campaign stopped at cycle {cycle}: anchor {anchor} is locked")
                break

            frontier = [nid for nid in scouted.frontier if nid in self.tree.nodes]
            if not frontier:
                result.status = STOPPED_EARLY
                self.report(
                    result,
                    f"Campaign stopped early at cycle {cycle}: scout produced no viable children",
                )
                break

            if self.token.cancelled:
                result.status = CANCELLED
                self.report(result, f"Cancelled before witnessing cycle {cycle}")
                break

            winner = await self.witness(anchor, frontier, witness_cfg, result)
            if winner is None:
                result.status = STOPPED_EARLY
                self.report(result, f"Campaign stopped early at cycle {cycle}: no winner chosen")
                break
            anchor = winner

        result.final_node_id = anchor
        result.frontier = self.compute_frontier(result)
        return result

    async def witness(
        self, anchor: str, frontier: List[str], cfg: AgentConfig, result: AgentResult
    ) -> Optional[str]:
        """Choose one frontier leaf and prune every other branch below anchor."""
        with self.gate.held(anchor, self.lock_reason) as acquired:
            if not acquired:
                self.report(result, f"Anchor {anchor} is in use elsewhere", logging.WARNING)
                return None

            if len(frontier) == 1:
                winner = frontier[0]
            else:
                tree = self.tree
                below = len(tree.ancestry(anchor))
                texts = [
                    "".join(tree.nodes[nid].text for nid in tree.ancestry(leaf)[below:])
                    for leaf in frontier
                ]
                try:
                    choice = await self.judge.choose(
                        cfg.instructions, tree.context_text(anchor, cfg.vision), texts
                    )
                except GenerationFailure as exc:
                    self.report(result, f"Witness phase failed: {exc}", logging.WARNING)
                    return None
                if choice.ambiguous:
                    self.report(result, "Unclear choice; keeping the first leaf")
                winner = frontier[choice.index]

            if winner not in self.tree.nodes:
                self.report(result, f"Chosen leaf {winner} was removed meanwhile")
                return None
            self.prune_to(anchor, winner, result)
            self.follow_cursor(anchor, winner)

        self.report(result, f"Witness chose {preview(self.tree.branch_text(winner)[-60:])!r}")
        return winner
