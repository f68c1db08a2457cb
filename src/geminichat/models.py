"""
Defines the core Pydantic data models for the application.

``Message`` is the only domain entity. The remaining models describe the
request body expected by the ``generateContent`` endpoint.
"""

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict

# --- Constants ---
USER_SENDER = "user"
ASSISTANT_SENDER = "assistant"
Sender = Literal["user", "assistant"]

USER_ROLE = "user"
MODEL_ROLE = "model"
Role = Literal["user", "model"]

ROLE_MAP: Dict[str, str] = {
    USER_SENDER: USER_ROLE,
    ASSISTANT_SENDER: MODEL_ROLE,
}

FALLBACK_REPLY = "Error in response"


# --- Models ---
class Message(BaseModel):
    """A single chat message. Immutable once created."""

    model_config = ConfigDict(frozen=True, strict=True)

    sender: Sender
    text: str


class Part(BaseModel):
    text: str


class Content(BaseModel):
    """One turn of the conversation in the remote API's schema."""

    role: Role
    parts: List[Part]

    @classmethod
    def from_message(cls, message: Message) -> "Content":
        return cls(role=ROLE_MAP[message.sender], parts=[Part(text=message.text)])


class GenerateContentRequest(BaseModel):
    contents: List[Content]
