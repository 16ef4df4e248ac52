"""Cosine-similarity ranking of embedded chunks against a query.

Scoring formula:
    For vectors `a` and `b` of possibly different length, the shorter vector is
    treated as zero-padded. Self sums `s1 = sum(a[k]^2)` and `s2 = sum(b[k]^2)` run
    over each full vector; the cross term `sum(a[k] * b[k])` runs over the shared
    prefix only. Similarity is `cross / (sqrt(s1) * sqrt(s2))`.

Failure model:
    An all-zero vector makes the formula undefined and raises
    `DegenerateVectorError`. One degenerate chunk aborts the whole ranking call.

Ordering:
    `select_top` uses a stable sort, so equal scores keep their input order.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Protocol, Sequence

import numpy as np

from askinternet.core.context import RequestContext
from askinternet.errors import DegenerateVectorError, EmbeddingError
from askinternet.types import EmbeddedChunk


logger = logging.getLogger(__name__)


class QueryEmbedder(Protocol):
    async def embed(self, texts: Sequence[str], ctx: RequestContext) -> list[list[float]]:
        ...


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine similarity of `a` and `b`.

    Raises:
        DegenerateVectorError: If either vector is all zeros (or empty).
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    overlap = min(va.size, vb.size)

    s1 = float(np.dot(va, va))
    s2 = float(np.dot(vb, vb))
    if s1 == 0 or s2 == 0:
        raise DegenerateVectorError("vectors should not be null (all zeros)")

    cross = float(np.dot(va[:overlap], vb[:overlap]))
    return float(cross / (np.sqrt(s1) * np.sqrt(s2)))


def score_chunks(query_vector: Sequence[float], chunks: Sequence[EmbeddedChunk]) -> list[EmbeddedChunk]:
    """Return scored copies of `chunks`, in input order."""
    return [
        replace(chunk, similarity_score=cosine_similarity(query_vector, chunk.vector))
        for chunk in chunks
    ]


def select_top(scored: Sequence[EmbeddedChunk], n: int) -> list[EmbeddedChunk]:
    """Return the `min(n, len(scored))` highest-scoring chunks, best first.

    Unscored chunks sort last.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")

    ordered = sorted(
        scored,
        key=lambda chunk: chunk.similarity_score if chunk.similarity_score is not None else float("-inf"),
        reverse=True,
    )
    return ordered[:n]


async def rank(
    query: str,
    chunks: Sequence[EmbeddedChunk],
    n: int,
    embedder: QueryEmbedder,
    ctx: RequestContext,
) -> list[EmbeddedChunk]:
    """Embed `query` and return the `n` chunks most similar to it.

    Args:
        query: Search term the chunks are ranked against.
        chunks: Embedded chunks from the batch stage.
        n: Maximum number of chunks to return.
        embedder: Embedding collaborator; called once with a single-item batch.
        ctx: Request context.

    Raises:
        EmbeddingError: The query embedding failed.
        DegenerateVectorError: The query or any chunk vector is all zeros.
    """
    vectors = await embedder.embed([query], ctx)
    if len(vectors) != 1:
        raise EmbeddingError(f"expected 1 query embedding, got {len(vectors)}")

    scored = score_chunks(vectors[0], chunks)
    top = select_top(scored, n)
    logger.info("Ranked %d chunks, kept %d", len(scored), len(top))
    return top
