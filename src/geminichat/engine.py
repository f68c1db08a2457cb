"""Orchestrates one chat turn between the store and the LLM."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .errors import RequestInFlightError
from .models import ASSISTANT_SENDER, USER_SENDER, Message
from .store import ConversationStore

logger = logging.getLogger(__name__)


class Engine(ABC):
    """Interface for processing user submissions.

    The engine can be created before the app and bound later through the
    ``app`` attribute.
    """

    def __init__(self, app=None):
        self.app = app

    def _bound_app(self):
        if self.app is None:
            raise RuntimeError(
                f"{type(self).__name__} is not bound to an app; set engine.app first"
            )
        return self.app

    @abstractmethod
    def submit(self, session_id: str, user_input: Optional[str]) -> Optional[Message]:
        """Records a user submission and marks the conversation as awaiting a reply.

        Returns the appended user message, or None when the submission is
        rejected (blank input, or a reply is still awaited).
        """
        pass

    @abstractmethod
    def resolve(self, session_id: str) -> Message:
        """Fetches the reply to the pending user message and appends it."""
        pass

    def handle_message(
        self, session_id: str, user_input: Optional[str]
    ) -> Optional[Message]:
        """Runs a full turn. Returns the assistant message, or None if rejected."""
        if self.submit(session_id, user_input) is None:
            return None
        return self.resolve(session_id)


class Synchronous(Engine):
    """Runs the LLM call in the calling thread."""

    def submit(self, session_id, user_input):
        """Appends ``user_input`` as a user message, unchanged.

        Surrounding whitespace is only used to detect blank input; the text
        is stored and sent verbatim.
        """
        store = self._bound_app().store.get_conversation(session_id)
        text = user_input or ""
        if not text.strip():
            return None
        if store.awaiting_reply:
            logger.info("Rejected submission for session %s: reply pending", session_id)
            return None

        user_message = Message(sender=USER_SENDER, text=text)
        store.append(user_message)
        store.set_input("")
        try:
            store.begin_request()
        except RequestInFlightError:
            logger.info("Session %s started a request concurrently", session_id)
            return None
        return user_message

    def resolve(self, session_id):
        app = self._bound_app()
        store = app.store.get_conversation(session_id)
        messages = store.messages
        if not messages or messages[-1].sender != USER_SENDER:
            store.end_request()
            raise ValueError(f"Session {session_id} has no pending user message")

        history, utterance = messages[:-1], messages[-1].text
        try:
            self._before_llm_call(store)
            reply = app.llm.complete(history, utterance)
            self._after_llm_call(reply)
            assistant_message = Message(sender=ASSISTANT_SENDER, text=reply)
            store.append(assistant_message)
        finally:
            store.end_request()
        return assistant_message

    # Hooks

    def _before_llm_call(self, store: ConversationStore) -> None:
        pass

    def _after_llm_call(self, reply: str) -> None:
        pass
