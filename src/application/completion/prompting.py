"""Prompt augmentation with retrieved code context."""

from src.domain.ports.llm import LLMMessage

STYLE_PREAMBLE = "Here are code examples from the developer's codebase. Follow their style:"
SYSTEM_STYLE_PREAMBLE = "Follow this coding style:"


def add_context_to_messages(messages: list[LLMMessage], code_context: str) -> list[dict]:
    """Append context to the system message, or prepend a system message carrying it."""
    if any(m.role == "system" for m in messages):
        return [
            {
                "role": m.role,
                "content": f"{m.content}\n\n{STYLE_PREAMBLE}\n\n{code_context}" if m.role == "system" else m.content,
            }
            for m in messages
        ]
    return [
        {"role": "system", "content": f"{SYSTEM_STYLE_PREAMBLE}\n\n{code_context}"},
        *({"role": m.role, "content": m.content} for m in messages),
    ]


def add_context_to_prompt(prompt: str, code_context: str) -> str:
    """Wrap a generate prompt with a context preamble."""
    return f"{STYLE_PREAMBLE}\n\n{code_context}\n\nPrompt: {prompt}"
