"""Embedding batch construction.

Architectural role:
    Converts extracted page contents into the list of strings submitted to the
    embedding provider in one request, and maps the response vectors back onto
    those strings.

Batch policy:
    Contents are chunked in input order with `iter_chunks`. Once `max_items`
    strings are collected, the remaining chunks of the current content and all
    later contents are dropped, not deferred to another request.

Positional contract:
    Response vector `i` belongs to batch item `i`. `pair_embeddings` enforces equal
    lengths but cannot detect a provider that reorders items.
"""

import logging
from typing import List, Sequence

from askinternet.errors import EmbeddingError
from askinternet.retrieval.chunker import iter_chunks
from askinternet.types import EmbeddedChunk, ExtractedContent


logger = logging.getLogger(__name__)

MAX_EMBEDDING_ITEMS = 2048
MAX_CHUNK_BYTES = 1500


def build_embedding_batch(
    contents: Sequence[ExtractedContent],
    max_items: int = MAX_EMBEDDING_ITEMS,
    max_chunk_bytes: int = MAX_CHUNK_BYTES,
) -> List[str]:
    """Chunk `contents` into at most `max_items` embedding inputs.

    Args:
        contents: Extracted page contents, in the order they should be consumed.
        max_items: Provider ceiling on inputs per embedding request.
        max_chunk_bytes: Maximum UTF-8 byte length of each input.

    Returns:
        Embedding inputs in content order, then chunk order.
    """
    batch: List[str] = []

    for position, content in enumerate(contents):
        for chunk in iter_chunks(content.text, max_chunk_bytes):
            if len(batch) >= max_items:
                logger.debug(
                    "Embedding batch full at %d items; dropping rest of %s and %d later contents",
                    max_items,
                    content.source_url,
                    len(contents) - position - 1,
                )
                return batch
            batch.append(chunk)

    return batch


def pair_embeddings(batch: Sequence[str], vectors: Sequence[Sequence[float]]) -> List[EmbeddedChunk]:
    """Attach response vectors to their batch items by position.

    Raises:
        EmbeddingError: If the provider returned a different number of vectors.
    """
    if len(batch) != len(vectors):
        raise EmbeddingError(
            f"embedding count mismatch: sent {len(batch)} inputs, got {len(vectors)} vectors"
        )
    return [EmbeddedChunk(text=text, vector=vector) for text, vector in zip(batch, vectors)]
