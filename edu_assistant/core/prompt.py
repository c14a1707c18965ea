"""
Prompt assembly for the chat orchestrator.

Renders the (class-specific or default) template, appends retrieved
references and lays out the message list sent to the generation backend:
system prompt, recent history oldest first, then the current question.

Dependencies: langchain_core
System role: Prompt construction business logic
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

DEFAULT_ACTIVITY_TITLE = "General learning"
REFERENCES_HEADER = "References:"


@dataclass(frozen=True)
class PromptSettings:
    """Generation parameters resolved for one exchange."""

    model: str
    temperature: float
    max_tokens: int
    template: str


def render_template(
    template: str,
    student_name: str,
    activity_title: str | None,
    question: str,
) -> str:
    """
    Fill the template placeholders.

    Uses plain replacement rather than str.format so stray braces in admin
    authored templates never raise.
    """
    return (
        template.replace("{student_name}", student_name)
        .replace("{activity_title}", activity_title or DEFAULT_ACTIVITY_TITLE)
        .replace("{question}", question)
    )


def format_references(contents: Iterable[str]) -> str:
    items = [f"- {content}" for content in contents if content]
    if not items:
        return ""
    return f"\n\n{REFERENCES_HEADER}\n" + "\n".join(items)


def build_system_prompt(
    template: str,
    student_name: str,
    activity_title: str | None,
    question: str,
    references: Iterable[str] = (),
) -> str:
    return render_template(template, student_name, activity_title, question) + format_references(references)


def history_to_messages(history: Iterable[tuple[str, str]]) -> list[BaseMessage]:
    """Convert (role, content) pairs into LangChain messages."""
    messages: list[BaseMessage] = []
    for role, content in history:
        if role == "assistant":
            messages.append(AIMessage(content=content))
        else:
            messages.append(HumanMessage(content=content))
    return messages


def build_messages(
    system_prompt: str,
    history: Sequence[BaseMessage],
    question: str,
    history_limit: int = 8,
) -> list[BaseMessage]:
    """
    Lay out the conversation for the model.

    Args:
        system_prompt: Rendered system prompt
        history: Prior turns, oldest first
        question: Sanitized current question
        history_limit: Keep at most this many trailing history messages

    Returns:
        list[BaseMessage]: [system, *history[-history_limit:], user question]
    """
    recent = list(history)[-history_limit:] if history_limit > 0 else []
    return [SystemMessage(content=system_prompt), *recent, HumanMessage(content=question)]


def content_to_text(content: object) -> str:
    """
    Flatten LangChain message content to plain text.

    Gemini returns either a string or a list of parts (strings or dicts with
    a "text" key).
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content)
