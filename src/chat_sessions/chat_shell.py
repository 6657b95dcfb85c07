from __future__ import annotations

import asyncio

from loguru import logger

from chat_sessions.commands.router import CommandRouter
from chat_sessions.completion import CompletionError
from chat_sessions.services.session_controller import SessionController
from chat_sessions.sessions import RequestMessage, Role, SessionNotFoundError, SessionStore


class ChatShell:
    _LINE_PREFIX = "assistant> "

    def __init__(self, store: SessionStore, *, default_title: str = "New chat"):
        self._store = store
        self._default_title = default_title
        self._pending_title: str | None = None
        self._active_session_id: int | None = None
        self._run_lock = asyncio.Lock()
        self._session_controller = SessionController(line_prefix=self._LINE_PREFIX)
        self._command_router = CommandRouter(
            on_help=self._on_help,
            on_session=self._handle_session_command,
            on_messages=self._handle_messages_command,
            on_unknown=self._on_unknown_command,
        )

    @property
    def active_session_id(self) -> int | None:
        return self._active_session_id

    async def run(self, user_input: str) -> None:
        async with self._run_lock:
            if await self._command_router.try_handle(user_input):
                return
            try:
                await self._send(user_input.strip())
            except CompletionError as ex:
                logger.error(f"Completion request failed: {ex}")
                print(f"{self._LINE_PREFIX}Request failed, nothing was saved: {ex}")
            except SessionNotFoundError:
                print(f"{self._LINE_PREFIX}Session not found: {self._active_session_id}")
                self._active_session_id = None

    async def _send(self, text: str) -> None:
        if self._active_session_id is None:
            title = self._pending_title or self._default_title
            self._active_session_id = await self._store.create_session(
                RequestMessage(role=Role.USER, content=text),
                title,
            )
            self._pending_title = None
            session = self._store.get_session(self._active_session_id)
        else:
            session = await self._store.send_message(self._active_session_id, text)

        reply = session.get_messages()[-1]
        print(f"{self._LINE_PREFIX}{reply.content}")

    async def _on_help(self) -> None:
        print(f"{self._LINE_PREFIX}Commands:")
        print(f"{self._LINE_PREFIX}- /session                 show the active session")
        print(f"{self._LINE_PREFIX}- /session list            list all sessions")
        print(f"{self._LINE_PREFIX}- /session new [title]     start a new session with your next message")
        print(f"{self._LINE_PREFIX}- /session use <id>        switch to a session")
        print(f"{self._LINE_PREFIX}- /session rename <title>  rename the active session")
        print(f"{self._LINE_PREFIX}- /session delete <id>     delete a session")
        print(f"{self._LINE_PREFIX}- /messages                list messages of the active session")
        print(f"{self._LINE_PREFIX}- /message delete <id>     delete a message from the active session")

    def _on_unknown_command(self, command: str) -> None:
        print(f"{self._LINE_PREFIX}Unknown command: {command}. Type /help for commands.")

    async def _handle_session_command(self, command: str) -> None:
        parts = command.split(maxsplit=2)
        action = parts[1].lower() if len(parts) > 1 else ""
        argument = parts[2].strip() if len(parts) > 2 else ""

        if action == "":
            self._print_active_summary()
        elif action == "list":
            sessions = self._store.list_sessions()
            if not sessions:
                print(f"{self._LINE_PREFIX}No sessions yet.")
                return
            for session in sessions:
                print(self._session_controller.format_session_list_entry(
                    session, active_session_id=self._active_session_id,
                ))
        elif action == "new":
            self._active_session_id = None
            self._pending_title = argument or None
            print(f"{self._LINE_PREFIX}Your next message starts a new session.")
        elif action == "use":
            session_id = self._parse_id(argument)
            if session_id is None:
                return
            if self._store.get_session(session_id) is None:
                print(f"{self._LINE_PREFIX}Session not found: {session_id}")
                return
            self._active_session_id = session_id
            self._print_active_summary()
        elif action == "rename":
            session = self._active_session()
            if session is None:
                return
            if not argument:
                print(f"{self._LINE_PREFIX}Usage: /session rename <title>")
                return
            session.rename_session(argument)
            print(f"{self._LINE_PREFIX}Session renamed to: {argument}")
        elif action == "delete":
            session_id = self._parse_id(argument)
            if session_id is None:
                return
            deleted = self._store.delete_session(session_id)
            if deleted is None:
                print(f"{self._LINE_PREFIX}Session not found: {session_id}")
                return
            if self._active_session_id == session_id:
                self._active_session_id = None
            print(f"{self._LINE_PREFIX}Deleted session [{session_id}] {deleted.get_title()}")
        else:
            print(f"{self._LINE_PREFIX}Unknown /session action: {action}. Type /help for commands.")

    async def _handle_messages_command(self, command: str) -> None:
        session = self._active_session()
        if session is None:
            return

        parts = command.split()
        if parts[0] == "/messages" and len(parts) == 1:
            for msg in session.get_messages():
                print(self._session_controller.format_message_line(msg))
            return
        if len(parts) == 3 and parts[1].lower() == "delete":
            message_id = self._parse_id(parts[2])
            if message_id is None:
                return
            deleted = session.delete_message(message_id)
            if deleted is None:
                print(f"{self._LINE_PREFIX}Message not found: {message_id}")
                return
            print(f"{self._LINE_PREFIX}Deleted message #{deleted.id}")
            return

        print(f"{self._LINE_PREFIX}Usage: /messages | /message delete <id>")

    def _active_session(self):
        if self._active_session_id is None:
            print(f"{self._LINE_PREFIX}No active session. Send a message to start one.")
            return None
        session = self._store.get_session(self._active_session_id)
        if session is None:
            print(f"{self._LINE_PREFIX}Session not found: {self._active_session_id}")
            self._active_session_id = None
        return session

    def _print_active_summary(self) -> None:
        session = self._active_session()
        if session is None:
            return
        for line in self._session_controller.format_summary_lines(session.build_summary()):
            print(line)

    def _parse_id(self, raw: str) -> int | None:
        try:
            return int(raw)
        except ValueError:
            print(f"{self._LINE_PREFIX}Expected a numeric id, got: {raw!r}")
            return None
