"""Data contracts shared across pipeline stages.

Architectural role:
    Defines the records passed between search, extraction, chunking, ranking,
    prompt assembly, and generation. All records are immutable; stages derive new
    values instead of mutating inputs.

Lifecycle:
    `SearchHit` -> `ExtractedContent` -> chunk strings -> `EmbeddedChunk`
    (scored once by the ranker) -> `GroundedPrompt` -> `MessageHistory`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterator, Sequence


@dataclass(frozen=True)
class SearchHit:
    """One ranked result returned by the search provider."""

    url: str
    title: str = ""
    snippet: str = ""
    site_name: str = ""
    icon_url: str = ""


@dataclass(frozen=True)
class ExtractedContent:
    """Readable text extracted from one page.

    Attributes:
        source_url: URL the text was extracted from.
        text: Plain text produced by the extraction collaborator.
        length: UTF-8 byte length of `text`.
    """

    source_url: str
    text: str
    length: int

    @classmethod
    def from_text(cls, source_url: str, text: str) -> "ExtractedContent":
        return cls(source_url=source_url, text=text, length=len(text.encode("utf-8")))


@dataclass(frozen=True)
class EmbeddedChunk:
    """A chunk of extracted text together with its embedding vector.

    `similarity_score` stays `None` until the ranker produces a scored copy.
    """

    text: str
    vector: Sequence[float]
    similarity_score: float | None = None


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class MessageHistory:
    """Immutable, ordered chat message history.

    Every operation that "adds" messages returns a new history, so a history can be
    shared between requests without one request leaking turns into another.
    """

    messages: tuple[ChatMessage, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.messages)

    def append(self, role: str, content: str) -> "MessageHistory":
        return MessageHistory(self.messages + (ChatMessage(role, content),))

    def extend(self, other: "MessageHistory") -> "MessageHistory":
        return MessageHistory(self.messages + other.messages)

    def to_payload(self) -> list[dict[str, str]]:
        """Render the history as an OpenAI-compatible `messages` list."""
        return [message.to_dict() for message in self.messages]

    def export_json(self) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False)

    @classmethod
    def import_json(cls, raw: str) -> "MessageHistory":
        """Rebuild a history from `export_json` output.

        Raises:
            ValueError: If `raw` is not a JSON list of `{role, content}` objects.
        """
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("message history must be a JSON list")

        messages = []
        for item in data:
            if not isinstance(item, dict) or "role" not in item or "content" not in item:
                raise ValueError(f"invalid message entry: {item!r}")
            messages.append(ChatMessage(str(item["role"]), str(item["content"])))
        return cls(tuple(messages))

    def char_length(self) -> int:
        return len(self.export_json())


@dataclass(frozen=True)
class GroundedPrompt:
    """Instruction plus optional grounding context handed to generation."""

    instruction: str
    context: str | None = None

    @property
    def has_context(self) -> bool:
        return self.context is not None

    def to_history(self) -> MessageHistory:
        """Render as system instruction followed by an assistant context turn."""
        history = MessageHistory().append("system", self.instruction)
        if self.context is not None:
            history = history.append("assistant", self.context)
        return history
