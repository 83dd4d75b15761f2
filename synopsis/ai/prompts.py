"""Prompt text for instruction-following (chat/completion) backends."""

from synopsis.summarization.length_planner import LengthSpec

SYSTEM_PROMPT = "You are a helpful summarizer."

SUMMARY_PROMPT = """Summarize the following text in about {min_length} to {max_length} tokens.
Keep the key facts, people, and conclusions. Do not add information that is not in the text.
Respond with the summary only.

---
{text}"""


def build_summary_prompt(text: str, spec: LengthSpec) -> str:
    """Format the summary instruction for a text and its target length."""
    return SUMMARY_PROMPT.format(
        min_length=spec.min_length,
        max_length=spec.max_length,
        text=text,
    )
