import asyncio

from chat_sessions.completion import CompletionError
from chat_sessions.sessions import RequestMessage, ResponseMessage, Role


class StubCompletionClient:
    """Records every request and answers from a queue of replies."""

    def __init__(
        self,
        replies: list[ResponseMessage] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._replies = list(replies or [])
        self._error = error
        self.calls: list[tuple[list[RequestMessage], str]] = []

    async def complete(self, messages: list[RequestMessage], model: str) -> ResponseMessage:
        self.calls.append((list(messages), model))
        # suspend like a real network call so overlapping callers interleave
        await asyncio.sleep(0)
        if self._error is not None:
            raise self._error
        if self._replies:
            return self._replies.pop(0)
        return ResponseMessage(role=Role.ASSISTANT, content=f"reply {len(self.calls)}")


def failing_client(message: str = "rate limited") -> StubCompletionClient:
    return StubCompletionClient(error=CompletionError(message))
