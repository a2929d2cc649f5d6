"""Prompt templates for knowledge-grounded answers."""


class PromptTemplates:
    """System instruction and failure text used by the answer generator."""

    SYSTEM = """You are {persona}.
Your knowledge comes from the following context, taken from {source_name}:

<KnowledgeContext>
{context}
</KnowledgeContext>

Instructions:
1. Answer the user's question based *primarily* on the KnowledgeContext provided.
2. If the answer is not in the context, use your general knowledge but mention that this specific info might not be in {source_name}.
3. Be polite, concise, and helpful.
4. Use {language} for all responses.{extra}"""

    FAILURE_DETAIL = "[{label} Error]: {error}"


def build_system_prompt(
    context: str,
    persona: str,
    source_name: str,
    language: str,
    extra_instructions: str | None = None,
) -> str:
    """Embed the context verbatim inside the delimited block."""
    extra = f"\n5. {extra_instructions.strip()}" if extra_instructions and extra_instructions.strip() else ""
    # str.format would choke on braces inside page content
    return (
        PromptTemplates.SYSTEM.replace("{persona}", persona)
        .replace("{source_name}", source_name)
        .replace("{language}", language)
        .replace("{extra}", extra)
        .replace("{context}", context)
    )


def failure_label(position: int) -> str:
    """'Primary' for the first provider, 'Fallback', 'Fallback 2', ... after it."""
    if position == 0:
        return "Primary"
    if position == 1:
        return "Fallback"
    return f"Fallback {position}"


def build_failure_text(apology: str, errors: list[str], expose_errors: bool = True) -> str:
    if not expose_errors or not errors:
        return apology
    details = [
        PromptTemplates.FAILURE_DETAIL.format(label=failure_label(i), error=error)
        for i, error in enumerate(errors)
    ]
    return "\n\n".join([apology, *details])
