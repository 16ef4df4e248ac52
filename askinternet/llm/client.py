"""Chat-completion transport for OpenAI-compatible providers.

Architectural role:
    Sends an immutable `MessageHistory` to `<LLM_API_URL>/chat/completions` and
    returns the reply text. Used for the search-term rewrite and for the final
    grounded answer.

Retry behavior:
    No retry loop. Each call is attempted once with the configured timeout.

Failure handling model:
    Transport, HTTP, and response-shape failures raise `GenerationError` with a
    provider-labeled message that never includes the API key.

Concurrency:
    The transport is synchronous (`requests`). Async callers run it in a worker
    thread.
"""

import logging

import requests

from askinternet.config import ChatConfig
from askinternet.errors import GenerationError
from askinternet.types import MessageHistory


logger = logging.getLogger(__name__)


def _describe_http_error(err: requests.exceptions.RequestException) -> str:
    """Build an error label with the HTTP status when one is available."""
    status_code = None
    if getattr(err, "response", None) is not None:
        status_code = getattr(err.response, "status_code", None)

    if status_code:
        return f"chat completion HTTP error ({status_code})"
    return f"chat completion request failed: {type(err).__name__}"


class ChatClient:
    """Synchronous chat-completion client."""

    def __init__(self, config: ChatConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def complete(self, history: MessageHistory) -> str:
        """Return the model reply for `history`.

        Raises:
            GenerationError: Request failure or unexpected response shape.
        """
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        payload = {
            "model": self.config.model,
            "messages": history.to_payload(),
            "temperature": self.config.temperature,
        }

        try:
            response = self._session.post(
                self.config.api_url.rstrip("/") + "/chat/completions",
                headers=headers,
                json=payload,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as err:
            raise GenerationError(_describe_http_error(err)) from err
        except ValueError as err:
            raise GenerationError("chat completion response is not JSON") from err

        try:
            return data["choices"][0]["message"]["content"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as err:
            raise GenerationError("malformed chat completion response") from err

    def prompt(self, history: MessageHistory, query: str) -> tuple[str, MessageHistory]:
        """Ask `query` on top of `history`.

        Returns:
            The reply and a new history ending with the user query and the reply.
            `history` itself is left unchanged.
        """
        asked = history.append("user", query)
        reply = self.complete(asked)
        logger.debug("Chat reply of %d chars for %d messages", len(reply), len(asked))
        return reply, asked.append("assistant", reply)
