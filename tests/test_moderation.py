"""Tests for app.services.moderation: content rules, status transitions, listing, deletion."""

import unittest

from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from app.core.database import build_engine
from app.models import Base, Post
from app.schemas.auth import CurrentUser, Role
from app.schemas.posts import DEFAULT_REJECTION_NOTE, PostStatus
from app.services import moderation
from app.services.errors import (
    AuthorizationError,
    ConflictError,
    InputValidationError,
    NotFoundError,
)

ALICE = CurrentUser(username="alice", role=Role.USER)
BOB = CurrentUser(username="bob", role=Role.USER)
MOD = CurrentUser(username="mod", role=Role.MODERATOR)
ADMIN = CurrentUser(username="root", role=Role.ADMIN)

TITLE = "Hello"
BODY = "x" * 20


def _session_factory() -> sessionmaker:
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class _WorkflowTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _session_factory()()

    def tearDown(self) -> None:
        self.db.close()

    def _post(self, author: CurrentUser = ALICE) -> Post:
        return moderation.create_post(self.db, author, TITLE, BODY)


class TestContentRules(_WorkflowTestCase):
    """Title needs 5 codepoints and body 20, counted after NFC normalization and trimming."""

    def _code(self, title: str, body: str) -> str:
        with self.assertRaises(InputValidationError) as ctx:
            moderation.create_post(self.db, ALICE, title, body)
        return ctx.exception.code

    def test_title_boundary(self) -> None:
        self.assertEqual(self._code("Hell", BODY), "title_too_short")
        post = moderation.create_post(self.db, ALICE, "Hello", BODY)
        self.assertEqual(post.title, "Hello")

    def test_body_boundary(self) -> None:
        self.assertEqual(self._code(TITLE, "x" * 19), "body_too_short")
        post = moderation.create_post(self.db, ALICE, TITLE, "x" * 20)
        self.assertEqual(len(post.body), 20)

    def test_title_checked_before_body(self) -> None:
        self.assertEqual(self._code("Hi", "short"), "title_too_short")

    def test_whitespace_does_not_count(self) -> None:
        self.assertEqual(self._code("  Hell   ", BODY), "title_too_short")
        post = moderation.create_post(self.db, ALICE, "  Hello  ", BODY)
        self.assertEqual(post.title, "Hello")

    def test_combining_marks_are_normalized(self) -> None:
        # "Cafe" + combining acute is 5 codepoints raw, 4 after NFC.
        self.assertEqual(self._code("Cafe\u0301", BODY), "title_too_short")

    def test_non_ascii_counted_by_codepoint(self) -> None:
        post = moderation.create_post(self.db, ALICE, "ñandú", "日本語" * 7)
        self.assertEqual(post.title, "ñandú")

    def test_rejected_post_is_not_stored(self) -> None:
        with self.assertRaises(InputValidationError):
            moderation.create_post(self.db, ALICE, "Hi", BODY)
        self.assertEqual(self.db.query(Post).count(), 0)

    def test_missing_fields(self) -> None:
        self.assertEqual(self._code("", ""), "title_too_short")


class TestCreateAndList(_WorkflowTestCase):
    def test_new_post_is_pending_and_owned(self) -> None:
        post = self._post(BOB)
        self.assertEqual(post.status, PostStatus.PENDING.value)
        self.assertEqual(post.author_username, "bob")
        self.assertIsNone(post.rejection_note)

    def test_list_posts_returns_all_statuses(self) -> None:
        first, second, third = self._post(), self._post(), self._post()
        moderation.moderate_post(self.db, first.id, True)
        moderation.moderate_post(self.db, second.id, False)
        ids = [p.id for p in moderation.list_posts(self.db)]
        self.assertEqual(ids, [first.id, second.id, third.id])

    def test_list_pending_filters(self) -> None:
        first, second = self._post(), self._post()
        moderation.moderate_post(self.db, first.id, True)
        self.assertEqual([p.id for p in moderation.list_pending(self.db)], [second.id])


class TestModerate(_WorkflowTestCase):
    """pending → approved | rejected."""

    def test_approve(self) -> None:
        post = moderation.moderate_post(self.db, self._post().id, True, moderator=MOD)
        self.assertEqual(post.status, PostStatus.APPROVED.value)
        self.assertIsNone(post.rejection_note)

    def test_reject_with_note(self) -> None:
        post = moderation.moderate_post(self.db, self._post().id, False, note="spam", moderator=MOD)
        self.assertEqual(post.status, PostStatus.REJECTED.value)
        self.assertEqual(post.rejection_note, "spam")

    def test_reject_default_note(self) -> None:
        for note in (None, "", "   "):
            with self.subTest(note=note):
                post = moderation.moderate_post(self.db, self._post().id, False, note=note)
                self.assertEqual(post.rejection_note, DEFAULT_REJECTION_NOTE)

    def test_approve_ignores_note(self) -> None:
        post = moderation.moderate_post(self.db, self._post().id, True, note="looks fine")
        self.assertIsNone(post.rejection_note)

    def test_missing_post(self) -> None:
        with self.assertRaises(NotFoundError):
            moderation.moderate_post(self.db, 999, True)

    def test_remoderation_last_write_wins_by_default(self) -> None:
        post_id = self._post().id
        moderation.moderate_post(self.db, post_id, False, note="spam")
        post = moderation.moderate_post(self.db, post_id, True)
        self.assertEqual(post.status, PostStatus.APPROVED.value)
        self.assertIsNone(post.rejection_note)

    def test_remoderation_blocked_when_disabled(self) -> None:
        post_id = self._post().id
        moderation.moderate_post(self.db, post_id, True, allow_remoderation=False)
        with self.assertRaises(ConflictError) as ctx:
            moderation.moderate_post(self.db, post_id, False, allow_remoderation=False)
        self.assertEqual(ctx.exception.code, "invalid_transition")
        self.assertEqual(moderation.get_post(self.db, post_id).status, PostStatus.APPROVED.value)

    def test_concurrent_update_is_a_conflict(self) -> None:
        post = self._post()
        # Another writer bumps the row behind this session's back.
        self.db.execute(
            text("UPDATE posts SET version = version + 1 WHERE id = :id"),
            {"id": post.id},
        )
        with self.assertRaises(ConflictError) as ctx:
            moderation.moderate_post(self.db, post.id, True)
        self.assertEqual(ctx.exception.code, "conflict")


class TestDelete(_WorkflowTestCase):
    """Authors delete their own posts in any state; only admins delete others'."""

    def _assert_gone(self, post_id: int) -> None:
        with self.assertRaises(NotFoundError):
            moderation.get_post(self.db, post_id)

    def test_author_deletes_pending(self) -> None:
        post_id = self._post(ALICE).id
        moderation.delete_post(self.db, ALICE, post_id)
        self._assert_gone(post_id)

    def test_author_deletes_terminal(self) -> None:
        for is_valid in (True, False):
            post_id = self._post(ALICE).id
            moderation.moderate_post(self.db, post_id, is_valid)
            moderation.delete_post(self.db, ALICE, post_id)
            self._assert_gone(post_id)

    def test_moderator_deletes_own(self) -> None:
        post_id = self._post(MOD).id
        moderation.delete_post(self.db, MOD, post_id)
        self._assert_gone(post_id)

    def test_moderator_cannot_delete_others(self) -> None:
        post_id = self._post(ALICE).id
        with self.assertRaises(AuthorizationError) as ctx:
            moderation.delete_post(self.db, MOD, post_id)
        self.assertEqual(ctx.exception.message, "Access denied")
        self.assertIsNotNone(moderation.get_post(self.db, post_id))

    def test_user_cannot_delete_others(self) -> None:
        post_id = self._post(ALICE).id
        with self.assertRaises(AuthorizationError):
            moderation.delete_post(self.db, BOB, post_id)

    def test_admin_deletes_any(self) -> None:
        post_id = self._post(ALICE).id
        moderation.moderate_post(self.db, post_id, True)
        moderation.delete_post(self.db, ADMIN, post_id)
        self._assert_gone(post_id)

    def test_missing_post(self) -> None:
        with self.assertRaises(NotFoundError):
            moderation.delete_post(self.db, ADMIN, 12345)


if __name__ == "__main__":
    unittest.main()
