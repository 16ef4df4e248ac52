"""Error taxonomy for the retrieval-and-ranking pipeline.

Propagation policy:
    - Per-URL failures (`InvalidURLError`, `FetchError`, `ExtractionError`) are
      raised by the extractor and swallowed by the fan-out coordinator.
    - Every other error aborts the whole run and reaches the caller unchanged.

Adapters translate library exceptions into these types and chain the original
exception as `__cause__`.
"""


class AskInternetError(Exception):
    """Base class for all pipeline errors."""


class InvalidInputError(AskInternetError):
    """Caller-supplied input is malformed."""


class InvalidURLError(InvalidInputError):
    """A URL is not an absolute http(s) URI."""

    def __init__(self, url: str) -> None:
        super().__init__(f"invalid url: {url!r}")
        self.url = url


class TransportError(AskInternetError):
    """Network failure talking to a remote endpoint."""


class SearchError(TransportError):
    """The search request failed. Fatal for the run."""


class FetchError(TransportError):
    """Fetching one page failed. Local to that URL."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url


class ExtractionError(AskInternetError):
    """Readable text could not be extracted from a fetched page."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to extract {url}: {reason}")
        self.url = url


class DecodeError(AskInternetError):
    """A search response body could not be decoded."""


class EmbeddingError(AskInternetError):
    """The embedding provider failed or returned an unusable response."""


class DegenerateVectorError(AskInternetError):
    """An embedding vector is all zeros, so cosine similarity is undefined."""


class PipelineCancelledError(AskInternetError):
    """The request context was cancelled or its deadline passed."""


class GenerationError(AskInternetError):
    """The chat-completion provider failed."""
