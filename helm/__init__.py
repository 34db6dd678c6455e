"""Helm: grow branching text trees with autonomous exploration agents."""

from helm.core.models import Tree, TreeNode
from helm.core.config import AgentConfig, SessionConfig
from helm.agents import CancellationToken, request_cancel, start_agent

__all__ = [
    "Tree",
    "TreeNode",
    "AgentConfig",
    "SessionConfig",
    "CancellationToken",
    "request_cancel",
    "start_agent",
]
