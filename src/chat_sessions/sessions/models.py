from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"
    TOOL = "tool"


@runtime_checkable
class ChatMessage(Protocol):
    def get_role(self) -> Role:
        """Returns the role of this chat message."""
        ...

    def get_content(self) -> str:
        """Returns the contents of this chat message, or "" when it has none."""
        ...


def _read_field(raw: Any, key: str) -> Any:
    if isinstance(raw, dict):
        return raw.get(key)
    return getattr(raw, key, None)


@dataclass(frozen=True)
class RequestMessage:
    role: Role
    content: str | None = None
    name: str | None = None
    function_call: dict | None = None

    def get_role(self) -> Role:
        return self.role

    def get_content(self) -> str:
        return self.content if self.content is not None else ""

    def to_dict(self) -> dict:
        out: dict = {"role": self.role.value, "content": self.content}
        if self.name is not None:
            out["name"] = self.name
        if self.function_call is not None:
            out["function_call"] = self.function_call
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> RequestMessage:
        return cls(
            role=Role(_read_field(raw, "role")),
            content=_read_field(raw, "content"),
            name=_read_field(raw, "name"),
        )


@dataclass(frozen=True)
class ResponseMessage:
    role: Role
    content: str | None = None
    function_call: dict | None = None

    def get_role(self) -> Role:
        return self.role

    def get_content(self) -> str:
        return self.content if self.content is not None else ""

    def to_dict(self) -> dict:
        out: dict = {"role": self.role.value, "content": self.content}
        if self.function_call is not None:
            out["function_call"] = self.function_call
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> ResponseMessage:
        return cls(
            role=Role(_read_field(raw, "role")),
            content=_read_field(raw, "content"),
        )


def unix_now() -> int:
    return int(time.time())


@dataclass(frozen=True)
class MessageRecord:
    """One stored turn of a chat session.

    Records are only created by ``ChatSession`` which owns the id counter;
    ``created_at`` is the wall-clock second the record was built.
    """

    id: int
    role: Role
    content: str
    created_at: int

    @classmethod
    def create(cls, id: int, role: Role, content: str) -> MessageRecord:
        return cls(id=id, role=Role(role), content=content, created_at=unix_now())

    @classmethod
    def from_chat_message(cls, id: int, msg: ChatMessage) -> MessageRecord:
        return cls.create(id, msg.get_role(), msg.get_content())

    def get_id(self) -> int:
        return self.id

    def get_content(self) -> str:
        return self.content

    def get_role(self) -> Role:
        return self.role

    def get_created_at(self) -> int:
        return self.created_at

    def to_request_message(self) -> RequestMessage:
        """Content is always emitted, so an empty record becomes ``content=""``."""
        return RequestMessage(role=self.role, content=self.content)

    def to_response_message(self) -> ResponseMessage:
        return ResponseMessage(role=self.role, content=self.content)
