"""Web-grounded question answering.

Architectural role:
    Answers a natural-language question by retrieving fresh web content, ranking it
    against the question with embeddings, and grounding a chat-completion reply in
    the highest-ranked chunks.

Package layout:
    - `core`: request context (cancellation) and end-to-end orchestration.
    - `retrieval`: text chunking plus web search and content extraction.
    - `ranking`: embedding batch construction and cosine-similarity ranking.
    - `embedding`: embedding provider adapters.
    - `prompting`: grounding instruction/context assembly.
    - `llm`: chat-completion transport and immutable message history use.
"""

from askinternet.core.context import RequestContext
from askinternet.core.engine import Answer, AskInternetEngine, ask_internet

__all__ = ["Answer", "AskInternetEngine", "RequestContext", "ask_internet"]
