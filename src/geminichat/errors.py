"""Exception hierarchy for geminichat."""

from typing import Optional


class GeminiChatError(Exception):
    """Base class for all geminichat errors."""


class ConfigurationError(GeminiChatError):
    """A required setting (such as the API key) is missing or invalid."""


class RequestInFlightError(GeminiChatError):
    """A reply is already awaited for this conversation."""


class CompletionError(GeminiChatError):
    """The remote completion could not produce a reply.

    Subclasses name the stage that failed. Callers that only need a reply
    string should use ``LLM.complete``, which turns every ``CompletionError``
    into the fallback reply.
    """

    kind = "completion"


class NetworkError(CompletionError):
    kind = "network"


class ResponseStatusError(CompletionError):
    kind = "status"

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"Remote API returned HTTP {status_code}")


class MalformedResponseError(CompletionError):
    kind = "malformed"


class MissingReplyError(CompletionError):
    kind = "missing"
