"""End-to-end web-grounded question answering.

Architectural role:
    Wires the pipeline stages together for one question:

        question
          -> search-term rewrite (chat model)
          -> search + concurrent extraction (`WebRetriever`)
          -> embedding batch (`build_embedding_batch`) -> chunk embeddings
          -> query embedding + cosine ranking (`rank`)
          -> grounding prompt (`build_grounded_prompt`)
          -> grounded answer (chat model)

Failure handling:
    Per-URL retrieval failures are absorbed inside `WebRetriever`. Every other
    error (search, embedding, degenerate vectors, generation, cancellation) aborts
    the run and propagates unchanged to the caller.

Cancellation:
    One `RequestContext` flows through every stage. Chat calls run in a worker
    thread and are raced against it, so a cancelled run returns promptly even
    while a request is in flight.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from askinternet.config import PipelineConfig
from askinternet.core.context import RequestContext
from askinternet.embedding import EmbeddingClient, build_embedding_client
from askinternet.llm.client import ChatClient
from askinternet.llm.service import rewrite_search_term
from askinternet.prompting.prompt_builder import build_grounded_prompt
from askinternet.ranking.batch import build_embedding_batch, pair_embeddings
from askinternet.ranking.similarity import rank
from askinternet.retrieval.web.search import WebRetriever
from askinternet.types import EmbeddedChunk, ExtractedContent, MessageHistory


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Answer:
    """Result of one pipeline run.

    Attributes:
        question: Original user question.
        search_term: Rewritten query used for search, ranking, and the final
            grounded prompt.
        reply: Generated answer text.
        history: Conversation including the grounding turns, the search term, and
            the reply. Pass it back to `ask` to continue the conversation.
        contents: Extracted web contents the chunks came from.
        ranked: Chunks used as grounding context, best first.
    """

    question: str
    search_term: str
    reply: str
    history: MessageHistory
    contents: tuple[ExtractedContent, ...]
    ranked: tuple[EmbeddedChunk, ...]

    @property
    def context_length(self) -> int:
        """UTF-8 bytes in the exported conversation history."""
        return len(self.history.export_json().encode("utf-8"))

    @property
    def web_result_length(self) -> int:
        """UTF-8 bytes across all extracted web contents."""
        return sum(content.length for content in self.contents)


class AskInternetEngine:
    """Runs the retrieval, ranking, and generation pipeline."""

    def __init__(
        self,
        config: PipelineConfig,
        retriever: WebRetriever,
        embedder: EmbeddingClient,
        chat: ChatClient,
    ) -> None:
        self.config = config
        self.retriever = retriever
        self.embedder = embedder
        self.chat = chat

    @classmethod
    def from_config(cls, config: PipelineConfig | None = None) -> "AskInternetEngine":
        config = config or PipelineConfig.from_env()
        return cls(
            config,
            WebRetriever.from_config(config.web),
            build_embedding_client(config.embedding),
            ChatClient(config.chat),
        )

    async def aclose(self) -> None:
        await self.retriever.aclose()
        close = getattr(self.embedder, "aclose", None)
        if close is not None:
            await close()
        self.chat.close()

    async def ask(
        self,
        question: str,
        ctx: RequestContext | None = None,
        history: MessageHistory | None = None,
    ) -> Answer:
        """Answer `question` grounded in freshly retrieved web content.

        Args:
            question: Natural-language question.
            ctx: Request context; a fresh one is created when omitted.
            history: Prior conversation placed before the grounding turns.

        Returns:
            `Answer` with the reply, the extended history, and retrieval details.
        """
        ctx = ctx or RequestContext()

        search_term = await self._in_thread(ctx, rewrite_search_term, self.chat, question)
        contents = await self.retriever.search_and_extract(search_term, ctx)

        embedded = await self._embed_contents(contents, ctx)
        ranked: list[EmbeddedChunk] = []
        if embedded:
            ranked = await rank(search_term, embedded, self.config.top_n, self.embedder, ctx)

        grounding = build_grounded_prompt(ranked).to_history()
        prior = history or MessageHistory()
        reply, new_history = await self._in_thread(
            ctx, self.chat.prompt, prior.extend(grounding), search_term
        )

        answer = Answer(
            question=question,
            search_term=search_term,
            reply=reply,
            history=new_history,
            contents=tuple(contents),
            ranked=tuple(ranked),
        )
        logger.info(
            "Answered with %d context chunks (context length %d, web result length %d)",
            len(ranked),
            answer.context_length,
            answer.web_result_length,
        )
        return answer

    async def _embed_contents(
        self, contents: list[ExtractedContent], ctx: RequestContext
    ) -> list[EmbeddedChunk]:
        batch = build_embedding_batch(
            contents,
            max_items=self.config.embedding.max_items,
            max_chunk_bytes=self.config.embedding.chunk_bytes,
        )
        if not batch:
            return []

        vectors = await self.embedder.embed(batch, ctx)
        return pair_embeddings(batch, vectors)

    @staticmethod
    async def _in_thread(ctx: RequestContext, func: Callable[..., Any], *args: Any) -> Any:
        return await ctx.run(asyncio.to_thread(func, *args))


def ask_internet(question: str, config: PipelineConfig | None = None) -> Answer:
    """Synchronous convenience wrapper: build an engine, answer, and close it."""

    async def _run() -> Answer:
        engine = AskInternetEngine.from_config(config)
        try:
            return await engine.ask(question)
        finally:
            await engine.aclose()

    return asyncio.run(_run())
