import asyncio
import unittest

from chat_sessions.completion import CompletionError
from chat_sessions.sessions import (
    RequestMessage,
    ResponseMessage,
    Role,
    SessionNotFoundError,
    SessionStore,
)
from tests.sessions.fakes import StubCompletionClient, failing_client

MODEL = "gpt-3.5-turbo"


def _request(role: Role, content: str) -> RequestMessage:
    return RequestMessage(role=role, content=content)


class SessionStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._client = StubCompletionClient()
        self._store = SessionStore(self._client, default_model=MODEL)

    def _add(self, content: str, title: str, role: Role = Role.USER) -> int:
        return asyncio.run(self._store.create_session(_request(role, content), title, MODEL))

    def test_new_store_is_empty(self) -> None:
        self.assertEqual((), self._store.list_sessions())
        self.assertIs(self._client, self._store.client)

    def test_create_session_scenario(self) -> None:
        client = StubCompletionClient([ResponseMessage(role=Role.ASSISTANT, content="hi there")])
        store = SessionStore(client)

        session_id = asyncio.run(store.create_session(_request(Role.USER, "hello"), "Chat 1", "model-x"))

        self.assertEqual(0, session_id)
        sessions = store.list_sessions()
        self.assertEqual(1, len(sessions))
        session = sessions[0]
        self.assertEqual(0, session.get_id())
        self.assertEqual("Chat 1", session.get_title())
        self.assertEqual("model-x", session.get_model())
        self.assertEqual(
            [(0, Role.USER, "hello"), (1, Role.ASSISTANT, "hi there")],
            [(m.id, m.role, m.content) for m in session.get_messages()],
        )
        self.assertEqual("model-x", client.calls[0][1])

    def test_initial_message_is_sent_as_user_turn(self) -> None:
        self._add("msg1", "Test Message 1")
        self._add("msg2", "Test msg 2", role=Role.SYSTEM)

        sessions = self._store.get_all_sessions()
        self.assertEqual(2, len(sessions))
        self.assertEqual(1, sessions[1].get_id())
        first = sessions[1].get_messages()[0]
        self.assertEqual("msg2", first.content)
        self.assertEqual(Role.USER, first.role)

    def test_missing_model_uses_store_default(self) -> None:
        asyncio.run(self._store.create_session(_request(Role.USER, "hi"), "Default"))
        self.assertEqual(MODEL, self._store.list_sessions()[0].get_model())

    def test_get_specific_session(self) -> None:
        self._add("msg1", "Tired")
        self._add("msg2", "Tired")
        self._add("msg3", "Tired")

        self.assertEqual("Tired", self._store.get_session(2).get_title())
        self.assertIsNone(self._store.get_session(40))
        self.assertEqual(3, len(self._store.list_sessions()))

    def test_delete_session_scenario(self) -> None:
        self._add("msg1", "One")
        self._add("msg2", "Two")
        self._add("msg3", "Three")

        deleted = self._store.delete_session(1)

        self.assertEqual(1, deleted.get_id())
        self.assertEqual("Two", deleted.get_title())
        self.assertEqual([0, 2], [s.get_id() for s in self._store.list_sessions()])
        self.assertIsNone(self._store.get_session(1))
        self.assertIsNone(self._store.delete_session(1))
        self.assertEqual(2, len(self._store.list_sessions()))

    def test_session_ids_are_not_reused_after_delete(self) -> None:
        self._add("a", "A")
        self._add("b", "B")
        self._store.delete_session(1)
        self.assertEqual(2, self._add("c", "C"))

    def test_failed_first_turn_does_not_register_session(self) -> None:
        store = SessionStore(failing_client())

        with self.assertRaises(CompletionError):
            asyncio.run(store.create_session(_request(Role.USER, "hello"), "Chat 1", "model-x"))

        self.assertEqual(0, len(store.list_sessions()))
        self.assertIsNone(store.get_session(0))

    def test_failed_create_does_not_consume_an_id(self) -> None:
        client = StubCompletionClient(error=CompletionError("down"))
        store = SessionStore(client)
        with self.assertRaises(CompletionError):
            asyncio.run(store.create_session(_request(Role.USER, "x"), "Lost"))

        client._error = None
        self.assertEqual(0, asyncio.run(store.create_session(_request(Role.USER, "y"), "Kept")))

    def test_overlapping_creates_get_distinct_ids(self) -> None:
        async def _run() -> list[int]:
            return await asyncio.gather(
                self._store.create_session(_request(Role.USER, "a"), "A"),
                self._store.create_session(_request(Role.USER, "b"), "B"),
            )

        ids = asyncio.run(_run())

        self.assertEqual([0, 1], sorted(ids))
        self.assertEqual([0, 1], [s.get_id() for s in self._store.list_sessions()])
        self.assertEqual(["A", "B"], [s.get_title() for s in self._store.list_sessions()])

    def test_send_message_appends_to_existing_session(self) -> None:
        session_id = self._add("hello", "Chat")

        session = asyncio.run(self._store.send_message(session_id, "again"))

        self.assertEqual(4, len(session.get_messages()))
        self.assertEqual("again", session.get_messages()[2].content)

    def test_send_message_to_unknown_session_raises(self) -> None:
        with self.assertRaises(SessionNotFoundError):
            asyncio.run(self._store.send_message(7, "anyone?"))


if __name__ == "__main__":
    unittest.main()
