"""Exception hierarchy shared by the tree store, the generators and the agents."""

from typing import Optional


class HelmError(Exception):
    """Base class for all errors raised by helm."""


class StructuralViolation(HelmError):
    """A tree mutation was rejected before anything was changed."""


class LockConflict(HelmError):
    """The node is held by another operation."""

    def __init__(self, node_id: str, reason: Optional[str]):
        super().__init__(f"Node {node_id} is locked ({reason})")
        self.node_id = node_id
        self.reason = reason


class GenerationFailure(HelmError):
    """A model call failed after the adapter exhausted its retries."""


class JudgeAmbiguous(HelmError):
    """The assistant's answer could not be parsed into a decision or choice."""


class AgentBusy(HelmError):
    """The agent is already running against this tree."""
