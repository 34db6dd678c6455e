"""Prompt construction for continuations and for the judging assistant."""

from typing import Sequence


DECISION_SYSTEM_PROMPT = "You are choosing whether to expand or cull text continuations."
CHOICE_SYSTEM_PROMPT = "You are choosing the best continuation among several candidates."

CLI_SIM_SYSTEM_PROMPT = (
    "You are in CLI simulation mode. "
    "Respond only with the output of the requested command."
)


def build_continuation_prompt(context: str) -> str:
    """Text handed to the continuation model: the context to be continued."""
    return context


def build_decision_message(instructions: str, context: str, node_text: str) -> str:
    """
    User message asking for an expand/cull verdict on one node.

    Sections:
    - INSTRUCTIONS (optional)
    - Previous context
    - Current node
    """
    parts: list[str] = ["Choose whether to expand or cull this continuation."]

    if instructions.strip():
        parts.append(_section("INSTRUCTIONS", instructions.strip()))

    parts.append(f"Previous context:\n{context}")
    parts.append(f"Current node:\n{node_text}")
    parts.append(
        "Please end your response with either "
        "<decision>expand</decision> or <decision>cull</decision>."
    )
    return "\n\n".join(parts)


def build_choice_message(instructions: str, context: str, candidates: Sequence[str]) -> str:
    """User message asking the assistant to pick one of several candidates (1-based)."""
    parts: list[str] = ["Choose the best continuation of the context below."]

    if instructions.strip():
        parts.append(_section("INSTRUCTIONS", instructions.strip()))

    parts.append(f"Previous context:\n{context}")

    for idx, text in enumerate(candidates, start=1):
        parts.append(f"<continuation index=\"{idx}\">\n{text}\n</continuation>")

    parts.append(
        f"Please end your response with <choice>N</choice>, where N is a number "
        f"from 1 to {len(candidates)}."
    )
    return "\n\n".join(parts)


def _section(title: str, body: str) -> str:
    return f"[{title}]\n{body}"
