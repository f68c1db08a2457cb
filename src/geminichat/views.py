"""Store observers that keep the browser view in sync with a conversation."""

from typing import Any, Callable, List, Sequence

from .models import Message
from .store import MESSAGES_CHANGED, REQUEST_CHANGED, StoreEvent


class Transcript:
    """Re-renders the message list whenever the store changes."""

    def __init__(self, render: Callable[[Sequence[Message]], List[Any]]):
        self.render = render
        self.children: List[Any] = []
        self.waiting = False

    def __call__(self, event: StoreEvent) -> None:
        if event.kind == MESSAGES_CHANGED:
            self.children = self.render(event.store.messages)
        elif event.kind == REQUEST_CHANGED:
            self.waiting = event.store.awaiting_reply


class AutoScroll:
    """Counts appended messages; the browser scrolls when the count changes."""

    def __init__(self):
        self.ticks = 0

    def __call__(self, event: StoreEvent) -> None:
        if event.kind == MESSAGES_CHANGED:
            self.ticks += 1
