"""In-memory conversation history for the chat REPL."""

from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


class Message(BaseModel):
    """One conversation message as written to the request file."""

    role: Role
    content: str


class ConversationHistory(BaseModel):
    """Ordered list of messages, oldest first.

    Messages are only ever appended; the sole way to remove any is
    :meth:`clear`, which drops all of them.
    """

    messages: list[Message] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.messages)

    def append(self, role: Role, content: str) -> Message:
        """Append a message and return it.

        A native agent response passed through verbatim (a JSON object with a
        ``response`` field) is reduced to that field's text.
        """
        message = Message(role=role, content=_unwrap_response(content))
        self.messages.append(message)
        return message

    def clear(self) -> None:
        self.messages = []

    def render(self) -> str:
        """Numbered, one-line-per-message listing for ``/history``."""
        return "".join(
            f"{index}. {message.role}: {message.content}\n"
            for index, message in enumerate(self.messages, start=1)
        )

    def to_payload(self) -> list[dict[str, str]]:
        """Serialisable form written to the request file."""
        return [message.model_dump() for message in self.messages]


def _unwrap_response(content: str) -> str:
    try:
        data = json.loads(content)
    except ValueError:
        return content
    if isinstance(data, dict) and isinstance(data.get("response"), str) and data["response"]:
        return data["response"]
    return content
