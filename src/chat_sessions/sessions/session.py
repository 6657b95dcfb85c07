from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from chat_sessions.sessions.models import ChatMessage, MessageRecord, RequestMessage, Role

if TYPE_CHECKING:
    from chat_sessions.completion import CompletionClient


class ChatSession:
    """One conversation thread bound to a single completion model.

    Message ids come from a counter owned by the session. The counter only
    moves forward, so ids are never reused after a delete.
    """

    def __init__(self, id: int, title: str, model: str):
        self._id = id
        self._title = title
        self._model = model
        self._messages: list[MessageRecord] = []
        self._msg_id_counter = 0
        self._submit_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"ChatSession(id={self._id}, title={self._title!r}, messages={len(self._messages)})"

    def get_id(self) -> int:
        return self._id

    def get_title(self) -> str:
        return self._title

    def get_model(self) -> str:
        return self._model

    def get_messages(self) -> tuple[MessageRecord, ...]:
        return tuple(self._messages)

    def get_message(self, id: int) -> MessageRecord | None:
        return next((m for m in self._messages if m.id == id), None)

    def append(self, role: Role, content: str) -> int:
        id = self._msg_id_counter
        self._msg_id_counter += 1
        self._messages.append(MessageRecord.create(id, role, content))
        return id

    def add_chat_message(self, msg: ChatMessage) -> int:
        """Store a request or response message; id and timestamp are assigned here."""
        return self.append(msg.get_role(), msg.get_content())

    def delete_message(self, id: int) -> MessageRecord | None:
        target: MessageRecord | None = None
        remaining: list[MessageRecord] = []
        for msg in self._messages:
            if msg.id == id:
                target = msg
            else:
                remaining.append(msg)
        self._messages = remaining
        return target

    def rename_session(self, new_title: str) -> None:
        self._title = new_title

    def to_request_messages(self) -> list[RequestMessage]:
        return [m.to_request_message() for m in self._messages]

    async def submit_user_turn(self, content: str, client: CompletionClient) -> None:
        """Send `content` with the full history and store both turns on success.

        The pending user turn is included in the request but only committed
        once the client returns a reply. If the client raises, the session is
        left exactly as it was and the error propagates.
        """
        async with self._submit_lock:
            outgoing = self.to_request_messages()
            outgoing.append(RequestMessage(role=Role.USER, content=content))

            response = await client.complete(outgoing, self._model)

            user_id = self.append(Role.USER, content)
            reply_id = self.add_chat_message(response)
            logger.debug(
                f"Session {self._id}: stored user turn {user_id} and reply {reply_id} "
                f"(messages={len(self._messages)})"
            )

    def build_summary(self, max_chars: int = 140) -> dict:
        user_count = 0
        assistant_count = 0
        last_user_preview = ""
        last_assistant_preview = ""
        for msg in self._messages:
            if msg.role == Role.USER:
                user_count += 1
                last_user_preview = _preview(msg.content, max_chars)
            elif msg.role == Role.ASSISTANT:
                assistant_count += 1
                last_assistant_preview = _preview(msg.content, max_chars)

        return {
            "session_id": self._id,
            "title": self._title,
            "model": self._model,
            "message_count": len(self._messages),
            "user_message_count": user_count,
            "assistant_message_count": assistant_count,
            "last_user_preview": last_user_preview,
            "last_assistant_preview": last_assistant_preview,
        }


def _preview(text: str, max_chars: int) -> str:
    text = " ".join(text.split())
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 3] + "..."
