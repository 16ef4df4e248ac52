"""Search-term rewrite.

Turns a conversational question into a short web search query before retrieval.
"""

import logging

from askinternet.llm.client import ChatClient
from askinternet.prompting.prompt_builder import SEARCH_TERM_INSTRUCTION
from askinternet.types import MessageHistory


logger = logging.getLogger(__name__)


def rewrite_search_term(client: ChatClient, question: str) -> str:
    """Ask the model for a concise search term for `question`.

    Falls back to the stripped question when the model replies with blank text.
    Quotes wrapping the whole reply are removed.
    """
    history = MessageHistory().append("system", SEARCH_TERM_INSTRUCTION)
    reply, _ = client.prompt(history, question)

    term = reply.strip().strip('"').strip()
    if not term:
        return question.strip()

    logger.info("Search term: %r", term)
    return term
