"""Scout: expand-then-judge traversal from a start node."""

import logging
from typing import List, Tuple

from helm.agents.base import BLOCKED, CANCELLED, Agent, AgentResult, preview


class ScoutAgent(Agent):
    """
    Grows the tree below a start node. Each visited node gets `range`
    continuations (or the shotgun range for its layer); the judge decides
    per child whether to keep exploring it or cull it.

    Traversal uses an explicit stack of (node_id, level) instead of
    recursion, and stops at `depth`.
    """

    agent_type = "Scout"
    lock_reason = "scout-active"

    async def run(self, start_node_id: str) -> AgentResult:
        result = self.new_result(start_node_id)
        if self.cancelled_before_start(result):
            return result

        await self.explore(start_node_id, result)
        result.frontier = self.compute_frontier(result)
        if result.status not in (BLOCKED, CANCELLED):
            self.report(
                result,
                f"Done: {len(result.created_ids)} created, {result.culled} culled, "
                f"{len(result.frontier)} open leaves",
            )
        return result

    async def explore(self, start_node_id: str, result: AgentResult) -> None:
        cfg = self.config
        stack: List[Tuple[str, int]] = [(start_node_id, 0)]

        while stack:
            node_id, level = stack.pop()
            if level >= cfg.depth:
                continue
            if self.token.cancelled:
                result.status = CANCELLED
                self.report(result, "Cancelled")
                return

            keep: List[str] = []
            with self.gate.held(node_id, self.lock_reason) as acquired:
                if not acquired:
                    if node_id == start_node_id:
                        result.status = BLOCKED
                        self.report(result, f"Start node {node_id} is locked; nothing to do", logging.WARNING)
                        return
                    self.report(result, f"Skipping {node_id}: in use elsewhere")
                    continue

                children = await self.expand(node_id, cfg.range_at(level), cfg.vision, result)
                if not children:
                    self.report(result, f"No continuations for {node_id} at level {level}")
                for child_id in children:
                    if self.token.cancelled:
                        break
                    text = self.tree.nodes[child_id].text if child_id in self.tree.nodes else ""
                    if await self.judge_child(child_id, cfg.vision, cfg.instructions, result):
                        self.report(result, f"Expand: {preview(text)!r}")
                        keep.append(child_id)
                    else:
                        self.report(result, f"Cull: {preview(text)!r}")
                        self.cull(child_id, result)

            # First requested child is explored first
            for child_id in reversed(keep):
                stack.append((child_id, level + 1))

        if self.token.cancelled:
            result.status = CANCELLED
            self.report(result, "Cancelled")
