"""Conversation state for one browser view, and the registry that holds it."""

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .errors import RequestInFlightError
from .models import Message

logger = logging.getLogger(__name__)

MESSAGES_CHANGED = "messages"
REQUEST_CHANGED = "request"
INPUT_CHANGED = "input"


@dataclass(frozen=True)
class StoreEvent:
    """Change notification published by a ``ConversationStore``."""

    kind: str
    store: "ConversationStore"


Listener = Callable[[StoreEvent], None]


class ConversationStore:
    """Append-only message sequence plus the pending/idle request state.

    Listeners registered with ``subscribe`` are called synchronously after
    every state change.
    """

    def __init__(self, messages: Optional[List[Message]] = None):
        self._messages: List[Message] = list(messages or [])
        self._awaiting_reply = False
        self._input = ""
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def awaiting_reply(self) -> bool:
        return self._awaiting_reply

    @property
    def current_input(self) -> str:
        return self._input

    def append(self, message: Message) -> None:
        if not isinstance(message, Message):
            raise TypeError(f"Expected a Message, got {type(message).__name__}")
        self._messages.append(message)
        self._publish(MESSAGES_CHANGED)

    def begin_request(self) -> None:
        if self._awaiting_reply:
            raise RequestInFlightError("A reply is already being awaited")
        self._awaiting_reply = True
        self._publish(REQUEST_CHANGED)

    def end_request(self) -> None:
        if not self._awaiting_reply:
            return
        self._awaiting_reply = False
        self._publish(REQUEST_CHANGED)

    def set_input(self, text: str) -> None:
        if text == self._input:
            return
        self._input = text
        self._publish(INPUT_CHANGED)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers ``listener`` and returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, kind: str) -> None:
        event = StoreEvent(kind=kind, store=self)
        for listener in list(self._listeners):
            listener(event)


class Store(ABC):
    """Interface for looking up the conversation of a browser view."""

    @abstractmethod
    def get_conversation(self, session_id: str) -> ConversationStore:
        """Returns the conversation for ``session_id``, creating it if needed."""
        pass

    @abstractmethod
    def discard(self, session_id: str) -> None:
        """Drops the conversation of a view that went away."""
        pass


class InMemory(Store):
    """Keeps conversations in process memory, one per session id.

    When more than ``max_sessions`` views are open the least recently used
    idle conversation is dropped. A conversation awaiting a reply is kept,
    even if that leaves the registry above its cap.
    """

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._conversations: "OrderedDict[str, ConversationStore]" = OrderedDict()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._conversations

    def __len__(self) -> int:
        return len(self._conversations)

    def get_conversation(self, session_id: str) -> ConversationStore:
        conversation = self._conversations.get(session_id)
        if conversation is not None:
            self._conversations.move_to_end(session_id)
            return conversation

        conversation = ConversationStore()
        self._conversations[session_id] = conversation
        while len(self._conversations) > self.max_sessions:
            evicted = self._oldest_idle(exclude=session_id)
            if evicted is None:
                break
            del self._conversations[evicted]
            logger.info("Evicted conversation for session %s", evicted)
        return conversation

    def _oldest_idle(self, exclude: str) -> Optional[str]:
        # Conversations awaiting a reply are never evicted.
        for session_id, conversation in self._conversations.items():
            if session_id != exclude and not conversation.awaiting_reply:
                return session_id
        return None

    def discard(self, session_id: str) -> None:
        self._conversations.pop(session_id, None)
