from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from chat_sessions.sessions.models import ChatMessage
from chat_sessions.sessions.session import ChatSession

if TYPE_CHECKING:
    from chat_sessions.completion import CompletionClient


class SessionNotFoundError(LookupError):
    pass


class SessionStore:
    """Holds every chat session of the running process.

    Nothing here is persisted. The completion client is shared by reference
    with every session submit.
    """

    def __init__(self, client: CompletionClient, *, default_model: str = "gpt-3.5-turbo"):
        self._client = client
        self._default_model = default_model
        self._sessions: list[ChatSession] = []
        self._session_id_counter = 0
        self._create_lock = asyncio.Lock()

    @property
    def client(self) -> CompletionClient:
        return self._client

    @property
    def default_model(self) -> str:
        return self._default_model

    def list_sessions(self) -> tuple[ChatSession, ...]:
        return tuple(self._sessions)

    get_all_sessions = list_sessions

    def get_session(self, id: int) -> ChatSession | None:
        return next((s for s in self._sessions if s.get_id() == id), None)

    async def create_session(
        self,
        initial_message: ChatMessage,
        title: str,
        model: str | None = None,
    ) -> int:
        """Create a session and run its first turn.

        Only the initial message's content is used; it is always sent as a
        user turn. The session is registered, and the id counter advanced,
        only after the first turn succeeds. Creates are serialised so two
        overlapping calls never read the same counter value.
        """
        async with self._create_lock:
            id = self._session_id_counter
            session = ChatSession(id, title, model or self._default_model)

            await session.submit_user_turn(initial_message.get_content(), self._client)

            self._session_id_counter += 1
            self._sessions.append(session)
        logger.debug(f"Created session {id} ({title!r}, model={session.get_model()})")
        return id

    async def send_message(self, session_id: int, content: str) -> ChatSession:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session does not exist: {session_id}")
        await session.submit_user_turn(content, self._client)
        return session

    def delete_session(self, id: int) -> ChatSession | None:
        target: ChatSession | None = None
        remaining: list[ChatSession] = []
        for session in self._sessions:
            if session.get_id() == id:
                target = session
            else:
                remaining.append(session)
        self._sessions = remaining
        if target is not None:
            logger.debug(f"Deleted session {id}")
        return target
