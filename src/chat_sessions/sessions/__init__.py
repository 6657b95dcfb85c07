from chat_sessions.sessions.models import (
    ChatMessage,
    MessageRecord,
    RequestMessage,
    ResponseMessage,
    Role,
)
from chat_sessions.sessions.session import ChatSession
from chat_sessions.sessions.store import SessionNotFoundError, SessionStore

__all__ = [
    "ChatMessage",
    "ChatSession",
    "MessageRecord",
    "RequestMessage",
    "ResponseMessage",
    "Role",
    "SessionNotFoundError",
    "SessionStore",
]
