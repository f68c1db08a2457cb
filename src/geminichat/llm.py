"""Concrete implementations for LLM providers."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

import httpx

from .config import Settings, get_settings
from .errors import (
    CompletionError,
    ConfigurationError,
    MalformedResponseError,
    MissingReplyError,
    NetworkError,
    ResponseStatusError,
)
from .models import (
    FALLBACK_REPLY,
    USER_ROLE,
    Content,
    GenerateContentRequest,
    Message,
    Part,
)

logger = logging.getLogger(__name__)


def build_contents(history: Sequence[Message], utterance: str) -> Dict[str, Any]:
    """Role-maps ``history`` and appends ``utterance`` as the final user turn."""
    contents = [Content.from_message(msg) for msg in history]
    contents.append(Content(role=USER_ROLE, parts=[Part(text=utterance)]))
    return GenerateContentRequest(contents=contents).model_dump()


class LLM(ABC):
    """Abstract Base Class for all LLM providers."""

    fallback_reply: str = FALLBACK_REPLY

    @abstractmethod
    def build_request(
        self, history: Sequence[Message], utterance: str
    ) -> Dict[str, Any]:
        """Builds the provider's request payload.

        Parameters
        ----------
        history : Sequence[Message]
            Prior messages of the conversation, oldest first.
        utterance : str
            The newest user-authored text.

        Returns
        -------
        Dict[str, Any]
            The JSON-serializable request body.
        """
        pass

    @abstractmethod
    def generate_response(
        self, payload: Dict[str, Any], model: Optional[str] = None
    ) -> Any:
        """Sends the payload to the provider and returns its raw response.

        Raises
        ------
        CompletionError
            If the call fails before a response body could be decoded.
        """
        pass

    @abstractmethod
    def extract_content(self, response: Any) -> str:
        """Extracts the reply text from the provider's raw response.

        Raises
        ------
        MissingReplyError
            If the response does not hold a reply.
        """
        pass

    def complete(self, history: Sequence[Message], utterance: str) -> str:
        """Returns the reply to ``utterance``, or the fallback reply on failure.

        This never raises a ``CompletionError``; network failures, error
        statuses and unexpected payloads all produce ``fallback_reply``.
        """
        payload = self.build_request(history, utterance)
        try:
            response = self.generate_response(payload)
            return self.extract_content(response)
        except CompletionError as e:
            logger.warning("Completion failed (%s): %s", e.kind, e)
            return self.fallback_reply


class Gemini(LLM):
    """Client for the Gemini ``generateContent`` REST endpoint.

    Parameters
    ----------
    api_key : str, optional
        The API credential. Defaults to ``settings.api_key``
        (``GEMINI_API_KEY``). A missing key raises ``ConfigurationError``.
    default_model : str, optional
        Model identifier placed in the endpoint path.
    settings : Settings, optional
        Overrides the environment-derived settings.
    client : httpx.Client, optional
        HTTP client to send requests with. One is created when omitted.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: Optional[str] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
    ):
        settings = settings or get_settings()
        self.api_key = api_key or settings.api_key
        if not self.api_key:
            raise ConfigurationError(
                "No Gemini API key configured. Pass api_key= or set GEMINI_API_KEY."
            )
        self.model = default_model or settings.model
        self.base_url = settings.base_url.rstrip("/")
        self.fallback_reply = settings.fallback_reply
        self.client = client or httpx.Client(timeout=settings.timeout)

    def endpoint(self, model: Optional[str] = None) -> str:
        return f"{self.base_url}/models/{model or self.model}:generateContent"

    def build_request(
        self, history: Sequence[Message], utterance: str
    ) -> Dict[str, Any]:
        return build_contents(history, utterance)

    def generate_response(
        self, payload: Dict[str, Any], model: Optional[str] = None
    ) -> Dict[str, Any]:
        url = self.endpoint(model)
        try:
            response = self.client.post(
                url,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            raise NetworkError(f"Request to {url} failed: {e!r}") from e

        if not response.is_success:
            raise ResponseStatusError(response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("Response body is not valid JSON") from e
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(data).__name__}"
            )
        return data

    def extract_content(self, response: Any) -> str:
        node = response
        for step in ("candidates", 0, "content", "parts", 0, "text"):
            node = _descend(node, step)
        if not isinstance(node, str) or not node:
            raise MissingReplyError("Reply text is empty or not a string")
        return node


def _descend(node: Any, step: Any) -> Any:
    if isinstance(step, int):
        if not isinstance(node, list) or len(node) <= step:
            raise MissingReplyError(f"Missing item {step} in response")
        child = node[step]
    else:
        if not isinstance(node, dict):
            raise MissingReplyError(f"Missing field {step!r} in response")
        child = node.get(step)
    if child is None:
        raise MissingReplyError(f"Field {step!r} is absent or null")
    return child


class Echo(LLM):
    """Offline provider that repeats the user's text back. No network access."""

    def __init__(self, default_model: str = "echo-v1", delay: float = 0.8):
        self.model = default_model
        self.delay = delay

    def build_request(self, history, utterance):
        return build_contents(history, utterance)

    def generate_response(self, payload, model=None):
        if self.delay:
            time.sleep(self.delay)
        contents = payload.get("contents") or []
        user_prompt = contents[-1]["parts"][0]["text"] if contents else ""
        text = f"**Echo LLM - static response for testing**\n\n_Your prompt:_\n\n{user_prompt}"
        return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}

    def extract_content(self, response):
        return response["candidates"][0]["content"]["parts"][0]["text"]
