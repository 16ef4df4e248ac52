"""Grounding prompt assembly.

This module only builds prompt values from already ranked chunks. Retrieval,
ranking, and model invocation happen outside it.

Design constraints:
    - Deterministic construction for identical inputs.
    - No I/O and no failure modes.
    - Chunk text is inserted verbatim; ranking order is preserved.
"""

from typing import Sequence

from askinternet.types import EmbeddedChunk, GroundedPrompt


# =========================================================
# SEARCH TERM REWRITE
# =========================================================
# Sent as the system instruction before the raw user input; the model reply
# becomes the search query.

SEARCH_TERM_INSTRUCTION = "Create a precise and short search term for the given user input"


# =========================================================
# GROUNDED INSTRUCTION
# =========================================================
# Used when at least one ranked chunk is available. The chunks follow as an
# assistant turn.

GROUNDED_INSTRUCTION = (
    "As an AI assistant, your role is to answer user questions using the provided "
    "context by the assistant.\n\n"
    "When answering, adhere to the following guidelines to ensure your response is "
    "clear, concise, and accurate:\n"
    "- Use only the provided context related to the question.\n"
    "- Your response should be factual, precise, and exhibit expertise, maintaining "
    "an unbiased and professional tone throughout.\n"
    "- Limit your answer to maximum 1024 words to maintain conciseness.\n"
    "- If the provided context lacks sufficient information on a topic, indicate "
    "this by stating \"information is missing.\"\n"
    "- Except for code snippets, specific names, and citations, compose your "
    "response in the same language as the posed question.\n"
    "- Ensure to review the provided context before crafting your answer.\n"
)


# =========================================================
# FALLBACK INSTRUCTION
# =========================================================
# Used when retrieval produced nothing. No context turn is emitted.

UNGROUNDED_INSTRUCTION = (
    "As an AI assistant, your role is to answer user questions.\n\n"
    "When answering, adhere to the following guidelines to ensure your response is "
    "clear, concise, and accurate:\n"
    "- Your response should be factual, precise, and exhibit expertise, maintaining "
    "an unbiased and professional tone throughout.\n"
    "- Limit your answer to maximum 1024 words to maintain conciseness.\n"
    "- If you are unsure of the answer or lack sufficient information to respond "
    "accurately, simply state, \"I do not know.\" Do not make up an answer.\n"
    "- Except for code snippets, specific names, and citations, compose your "
    "response in the same language as the posed question.\n"
)


def build_context_body(chunks: Sequence[EmbeddedChunk]) -> str:
    """Concatenate chunk texts in ranking order, each followed by a newline."""
    return "".join(f"{chunk.text}\n" for chunk in chunks)


def build_grounded_prompt(ranked: Sequence[EmbeddedChunk]) -> GroundedPrompt:
    """Build the instruction/context pair for generation.

    Args:
        ranked: Chunks in ranking order (best first).

    Returns:
        `GroundedPrompt` with `GROUNDED_INSTRUCTION` and the concatenated context,
        or `UNGROUNDED_INSTRUCTION` and no context when `ranked` is empty.
    """
    if not ranked:
        return GroundedPrompt(instruction=UNGROUNDED_INSTRUCTION, context=None)

    return GroundedPrompt(instruction=GROUNDED_INSTRUCTION, context=build_context_body(ranked))
