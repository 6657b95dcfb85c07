from __future__ import annotations

from datetime import UTC, datetime

from chat_sessions.sessions import ChatSession, MessageRecord


class SessionController:
    def __init__(self, *, line_prefix: str, preview_chars: int = 60):
        self._line_prefix = line_prefix
        self._preview_chars = preview_chars

    def format_session_list_entry(self, session: ChatSession, *, active_session_id: int | None) -> str:
        marker = "*" if session.get_id() == active_session_id else " "
        return (
            f"{self._line_prefix}{marker} [{session.get_id()}] {session.get_title()} "
            f"(model={session.get_model()}, messages={len(session.get_messages())})"
        )

    def format_message_line(self, msg: MessageRecord) -> str:
        stamp = datetime.fromtimestamp(msg.created_at, UTC).strftime("%Y-%m-%d %H:%M:%S")
        text = " ".join(msg.content.split())
        if len(text) > self._preview_chars:
            text = text[: self._preview_chars - 3] + "..."
        return f"{self._line_prefix}#{msg.id} {stamp} {msg.role.value}: {text}"

    def format_summary_lines(self, summary: dict) -> list[str]:
        lines = [f"{self._line_prefix}Session [{summary['session_id']}] {summary['title']}"]
        lines.append(f"{self._line_prefix}- Model: {summary['model']}")
        lines.append(
            f"{self._line_prefix}- Messages: {summary['message_count']} "
            f"(user={summary['user_message_count']}, assistant={summary['assistant_message_count']})"
        )
        last_user = summary.get("last_user_preview", "")
        if last_user:
            lines.append(f"{self._line_prefix}- Last user: {last_user}")
        last_assistant = summary.get("last_assistant_preview", "")
        if last_assistant:
            lines.append(f"{self._line_prefix}- Last assistant: {last_assistant}")
        return lines
