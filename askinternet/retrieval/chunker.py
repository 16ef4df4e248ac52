"""UTF-8-safe text chunking for embedding inputs.

Chunks are bounded in encoded bytes, not characters, because embedding providers
limit input size by tokens and bytes track tokens more closely than code points.

Guarantees:
    - No chunk exceeds `max_len` UTF-8 bytes.
    - No chunk splits a multi-byte character, so each chunk decodes on its own.
    - Newlines inside a chunk are replaced with single spaces; byte lengths are
      unchanged by the substitution.
    - Empty input yields no chunks.
"""

from typing import Iterator, List


def _is_continuation(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def iter_chunks(text: str, max_len: int) -> Iterator[str]:
    """Yield consecutive chunks of `text`, each at most `max_len` bytes.

    Args:
        text: Text to split.
        max_len: Maximum chunk size in UTF-8 bytes.

    Raises:
        ValueError: If `max_len < 1`, or if a single character is wider than
            `max_len` bytes.
    """
    if max_len < 1:
        raise ValueError(f"max_len must be >= 1, got {max_len}")

    data = text.encode("utf-8")
    start = 0

    while start < len(data):
        end = min(start + max_len, len(data))

        # Back off to the start of the character the cut would land in.
        while end < len(data) and end > start and _is_continuation(data[end]):
            end -= 1

        if end == start:
            raise ValueError(
                f"character at byte offset {start} does not fit in {max_len} bytes"
            )

        yield data[start:end].decode("utf-8").replace("\n", " ")
        start = end


def chunk_text(text: str, max_len: int) -> List[str]:
    """Return all chunks of `text` as a list. See `iter_chunks`."""
    return list(iter_chunks(text, max_len))
