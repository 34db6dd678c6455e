"""Generator factories and exports."""

from typing import TYPE_CHECKING, Any, Optional

from helm.generators.base import Assistant, ContinuationGenerator, with_retry
from helm.generators.prompt import build_choice_message, build_continuation_prompt, build_decision_message

if TYPE_CHECKING:  # pragma: no cover
    from helm.core.config import AssistantConfig, ContinuationConfig, SessionConfig


def make_generator(cfg: "ContinuationConfig", client: Any, session: Optional["SessionConfig"] = None) -> ContinuationGenerator:
    """Factory to create a continuation generator from its config."""
    from helm.generators.claude import ClaudeContinuationGenerator
    from helm.generators.fake import FakeGenerator

    if cfg.engine_type == "anthropic":
        retry = _retry_kwargs(session)
        return ClaudeContinuationGenerator(
            client=client,
            model=cfg.model_name,
            temperature=cfg.temperature,
            top_p=cfg.top_p,
            max_tokens=cfg.max_tokens,
            cli_sim=cfg.cli_sim,
            **retry,
        )
    if cfg.engine_type == "fake":
        return FakeGenerator()
    raise ValueError(f"Unknown engine_type: {cfg.engine_type}")


def make_assistant(cfg: "AssistantConfig", client: Any, session: Optional["SessionConfig"] = None) -> Assistant:
    """Factory to create the judging assistant from its config."""
    from helm.generators.claude import ClaudeAssistant
    from helm.generators.fake import FakeAssistant

    if cfg.engine_type == "anthropic":
        retry = _retry_kwargs(session)
        return ClaudeAssistant(
            client=client,
            model=cfg.model_name,
            temperature=cfg.temperature,
            top_p=cfg.top_p,
            max_tokens=cfg.max_tokens,
            **retry,
        )
    if cfg.engine_type == "fake":
        return FakeAssistant()
    raise ValueError(f"Unknown engine_type: {cfg.engine_type}")


def _retry_kwargs(session) -> dict:
    if session is None:
        return {}
    return {"max_retries": session.max_retries, "retry_base_delay": session.retry_base_delay}


__all__ = [
    "Assistant",
    "ContinuationGenerator",
    "build_choice_message",
    "build_continuation_prompt",
    "build_decision_message",
    "make_assistant",
    "make_generator",
    "with_retry",
]
