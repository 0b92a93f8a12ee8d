import sys
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

import unittest

from application.session.session_context import SessionContext
from domain.errors import AuthError
from infrastructure.userdata.in_memory import InMemoryAuthService, InMemoryProfileStore


class TestSessionContext(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.auth = InMemoryAuthService(InMemoryProfileStore())
        self.ctx = SessionContext(self.auth)

    async def test_init_reads_current_session(self) -> None:
        await self.auth.sign_up(email="a@example.com", password="secret1", username="a")
        ctx = SessionContext(self.auth)
        self.assertTrue(ctx.loading)

        session = await ctx.init()

        self.assertFalse(ctx.loading)
        self.assertIsNotNone(session)
        self.assertEqual(ctx.user.email, "a@example.com")

    async def test_listeners_follow_identity_changes(self) -> None:
        await self.ctx.init()
        seen: list[str | None] = []
        unsubscribe = self.ctx.subscribe(lambda s: seen.append(s.user.email if s else None))

        await self.ctx.sign_up("a@example.com", "secret1", "a")
        await self.ctx.sign_out()
        await self.ctx.sign_in("a@example.com", "secret1")
        unsubscribe()
        await self.ctx.sign_out()

        self.assertEqual(seen, ["a@example.com", None, "a@example.com"])
        self.assertIsNone(self.ctx.user_id)

    async def test_listener_failure_is_isolated(self) -> None:
        await self.ctx.init()
        calls: list[bool] = []

        def broken(_session) -> None:
            raise RuntimeError("listener bug")

        self.ctx.subscribe(broken)
        self.ctx.subscribe(lambda s: calls.append(s is not None))

        with self.assertLogs("application.session.session_context", level="ERROR"):
            await self.ctx.sign_up("b@example.com", "secret1", "b")

        self.assertEqual(calls, [True])
        self.assertIsNotNone(self.ctx.session)

    async def test_auth_error_propagates_and_keeps_session(self) -> None:
        await self.ctx.init()
        await self.ctx.sign_up("c@example.com", "secret1", "c")
        before = self.ctx.session

        with self.assertRaises(AuthError):
            await self.ctx.sign_in("c@example.com", "nope")

        self.assertIs(self.ctx.session, before)

    async def test_close_unsubscribes_from_auth(self) -> None:
        await self.ctx.init()
        seen: list[object] = []
        self.ctx.subscribe(seen.append)

        self.ctx.close()
        self.ctx.close()
        await self.auth.sign_up(email="d@example.com", password="secret1", username="d")

        self.assertEqual(seen, [])
        self.assertIsNone(self.ctx.session)

    def test_language_selection(self) -> None:
        self.assertEqual(self.ctx.language, "en")
        self.ctx.set_language("FR")
        self.assertEqual(self.ctx.language, "fr")
        with self.assertRaises(ValueError):
            self.ctx.set_language("it")
        self.assertEqual(self.ctx.language, "fr")


if __name__ == "__main__":
    unittest.main()
