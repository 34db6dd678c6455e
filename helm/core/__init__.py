"""Core data model for Helm."""

from helm.core.models import LOCK_REASONS, Tree, TreeNode, new_id
from helm.core.locks import LockGate
from helm.core.config import (
    AgentConfig,
    AssistantConfig,
    ContinuationConfig,
    CopilotConfig,
    ModelConfig,
    SessionConfig,
)
from helm.core.errors import (
    AgentBusy,
    GenerationFailure,
    HelmError,
    JudgeAmbiguous,
    LockConflict,
    StructuralViolation,
)

__all__ = [
    "LOCK_REASONS",
    "Tree",
    "TreeNode",
    "new_id",
    "LockGate",
    "AgentConfig",
    "AssistantConfig",
    "ContinuationConfig",
    "CopilotConfig",
    "ModelConfig",
    "SessionConfig",
    "AgentBusy",
    "GenerationFailure",
    "HelmError",
    "JudgeAmbiguous",
    "LockConflict",
    "StructuralViolation",
]
