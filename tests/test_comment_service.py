"""Service-level tests for CommentService: lifecycle, visibility and access control."""

import unittest
from datetime import UTC, datetime, timedelta

from newsdesk.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from newsdesk.core.permissions import Role
from newsdesk.models import ArticleStatus, Comment
from newsdesk.services.comments import CommentService
from support import add_article, add_comment, add_user, claims_for, make_session


class CommentServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.service = CommentService(self.db)
        self.article = add_article(self.db)
        self.alice = add_user(self.db, email="alice@example.com", name="Alice")
        self.bob = add_user(self.db, email="bob@example.com", name="Bob")
        self.mod = add_user(self.db, email="mod@example.com", name="Mod", role=Role.MODERATOR)
        self.admin = add_user(self.db, email="admin@example.com", name="Admin", role=Role.ADMIN)
        self.superadmin = add_user(self.db, email="root@example.com", name="Root", role=Role.SUPERADMIN)

    def tearDown(self) -> None:
        self.db.close()


class TestCreateComment(CommentServiceTestCase):
    def test_created_approved_and_trimmed(self) -> None:
        out = self.service.create_comment("  Great reporting.  ", self.article.id, claims_for(self.alice))
        self.assertEqual(out.content, "Great reporting.")
        self.assertTrue(out.is_approved)
        self.assertFalse(out.is_spam)
        self.assertEqual(out.author.id, self.alice.id)
        self.assertEqual(out.author.name, "Alice")

    def test_pending_when_auto_approve_off(self) -> None:
        service = CommentService(self.db, auto_approve=False)
        out = service.create_comment("Needs review", self.article.id, claims_for(self.alice))
        self.assertFalse(out.is_approved)
        self.assertFalse(out.is_spam)

    def test_length_boundaries(self) -> None:
        identity = claims_for(self.alice)
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_comment("ab", self.article.id, identity)
        self.assertEqual(ctx.exception.code, "CONTENT_TOO_SHORT")
        self.service.create_comment("abc", self.article.id, identity)
        self.service.create_comment("x" * 1000, self.article.id, identity)
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_comment("x" * 1001, self.article.id, identity)
        self.assertEqual(ctx.exception.code, "CONTENT_TOO_LONG")
        self.assertEqual(self.db.query(Comment).count(), 2)

    def test_anonymous_rejected(self) -> None:
        with self.assertRaises(AuthenticationError) as ctx:
            self.service.create_comment("Hello there", self.article.id, None)
        self.assertEqual(ctx.exception.code, "AUTH_REQUIRED")

    def test_unknown_or_unpublished_article(self) -> None:
        draft = add_article(self.db, slug="draft-story", status=ArticleStatus.DRAFT)
        for article_id in ("missing", draft.id):
            with self.subTest(article_id=article_id):
                with self.assertRaises(NotFoundError) as ctx:
                    self.service.create_comment("Hello there", article_id, claims_for(self.alice))
                self.assertEqual(ctx.exception.code, "ARTICLE_NOT_FOUND")

    def test_non_subscriber_can_comment_on_premium_article(self) -> None:
        premium = add_article(self.db, slug="premium-investigation", premium=True)
        out = self.service.create_comment("Hello there", premium.id, claims_for(self.alice))
        self.assertEqual(out.article_id, premium.id)
        self.assertTrue(out.is_approved)

    def test_spam_signals_do_not_block_by_default(self) -> None:
        with self.assertLogs("newsdesk.services.moderation", level="WARNING"):
            out = self.service.create_comment("BUY NOW AT THE CASINO!!!!!", self.article.id, claims_for(self.alice))
        self.assertTrue(out.is_approved)

    def test_spam_blocking(self) -> None:
        service = CommentService(self.db, spam_blocking=True)
        with self.assertRaises(ValidationError) as ctx:
            service.create_comment("cheap lottery tickets", self.article.id, claims_for(self.alice))
        self.assertEqual(ctx.exception.code, "SPAM_DETECTED")
        self.assertEqual(self.db.query(Comment).count(), 0)


class TestUpdateAndDelete(CommentServiceTestCase):
    def test_author_edits_content_only(self) -> None:
        comment = add_comment(self.db, self.article, self.alice, created_at=datetime.now(UTC) - timedelta(minutes=5))
        out = self.service.update_comment(comment.id, "  Edited text ", claims_for(self.alice))
        self.assertEqual(out.content, "Edited text")
        self.assertTrue(out.is_approved)
        self.assertGreater(out.updated_at, out.created_at)

    def test_edit_keeps_spam_state(self) -> None:
        comment = add_comment(self.db, self.article, self.alice, approved=False, spam=True)
        out = self.service.update_comment(comment.id, "Please reconsider", claims_for(self.alice))
        self.assertTrue(out.is_spam)
        self.assertFalse(out.is_approved)

    def test_nobody_else_may_edit(self) -> None:
        comment = add_comment(self.db, self.article, self.alice)
        for user in (self.bob, self.mod, self.admin, self.superadmin):
            with self.subTest(role=user.role):
                with self.assertRaises(AuthorizationError):
                    self.service.update_comment(comment.id, "Hijacked", claims_for(user))

    def test_edit_validates_content(self) -> None:
        comment = add_comment(self.db, self.article, self.alice)
        with self.assertRaises(ValidationError):
            self.service.update_comment(comment.id, " a ", claims_for(self.alice))

    def test_edit_missing_comment(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.service.update_comment("missing", "Hello there", claims_for(self.alice))
        self.assertEqual(ctx.exception.code, "COMMENT_NOT_FOUND")

    def test_author_deletes(self) -> None:
        comment = add_comment(self.db, self.article, self.alice)
        result = self.service.delete_comment(comment.id, claims_for(self.alice))
        self.assertEqual(result, {"success": True, "message": "Comment deleted successfully"})
        self.assertIsNone(self.db.get(Comment, comment.id))

    def test_moderator_and_admin_delete_any(self) -> None:
        for user in (self.mod, self.admin):
            comment = add_comment(self.db, self.article, self.alice)
            with self.subTest(role=user.role):
                self.service.delete_comment(comment.id, claims_for(user))
                self.assertIsNone(self.db.get(Comment, comment.id))

    def test_other_users_cannot_delete(self) -> None:
        comment = add_comment(self.db, self.article, self.alice)
        for user in (self.bob, self.superadmin):
            with self.subTest(role=user.role):
                with self.assertRaises(AuthorizationError):
                    self.service.delete_comment(comment.id, claims_for(user))
        self.assertIsNotNone(self.db.get(Comment, comment.id))

    def test_second_delete_is_not_found(self) -> None:
        comment = add_comment(self.db, self.article, self.alice)
        self.service.delete_comment(comment.id, claims_for(self.alice))
        with self.assertRaises(NotFoundError):
            self.service.delete_comment(comment.id, claims_for(self.alice))


class TestModeration(CommentServiceTestCase):
    def test_spam_then_approve(self) -> None:
        comment = add_comment(self.db, self.article, self.alice)
        out = self.service.mark_as_spam(comment.id, claims_for(self.mod))
        self.assertTrue(out.is_spam)
        self.assertFalse(out.is_approved)

        out = self.service.approve_comment(comment.id, claims_for(self.admin))
        self.assertTrue(out.is_approved)
        self.assertFalse(out.is_spam)

    def test_marking_spam_twice_is_a_no_op(self) -> None:
        comment = add_comment(self.db, self.article, self.alice)
        self.service.mark_as_spam(comment.id, claims_for(self.mod))
        out = self.service.mark_as_spam(comment.id, claims_for(self.mod))
        self.assertTrue(out.is_spam)
        self.assertFalse(out.is_approved)

    def test_approve_pending(self) -> None:
        comment = add_comment(self.db, self.article, self.alice, approved=False)
        out = self.service.approve_comment(comment.id, claims_for(self.mod))
        self.assertTrue(out.is_approved)

    def test_only_admin_and_moderator(self) -> None:
        comment = add_comment(self.db, self.article, self.bob)
        for user in (self.alice, self.bob, self.superadmin):
            with self.subTest(role=user.role):
                with self.assertRaises(AuthorizationError):
                    self.service.mark_as_spam(comment.id, claims_for(user))
                with self.assertRaises(AuthorizationError):
                    self.service.approve_comment(comment.id, claims_for(user))

    def test_missing_comment(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.approve_comment("missing", claims_for(self.mod))


class TestListing(CommentServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        base = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
        self.approved = add_comment(self.db, self.article, self.alice, "First approved", created_at=base)
        self.pending = add_comment(
            self.db, self.article, self.bob, "Waiting for review", approved=False, created_at=base + timedelta(minutes=1)
        )
        self.spam = add_comment(
            self.db, self.article, self.bob, "Spammy words", approved=False, spam=True, created_at=base + timedelta(minutes=2)
        )
        self.later = add_comment(self.db, self.article, self.bob, "Second approved", created_at=base + timedelta(minutes=3))

    def _ids(self, items) -> list[str]:
        return [c.id for c in items]

    def test_anonymous_sees_approved_oldest_first(self) -> None:
        items, meta = self.service.list_by_article(self.article.id)
        self.assertEqual(self._ids(items), [self.approved.id, self.later.id])
        self.assertEqual(meta.total, 2)
        self.assertEqual(meta.page, 1)

    def test_include_flags_ignored_for_regular_users(self) -> None:
        for viewer in (None, claims_for(self.alice), claims_for(self.superadmin)):
            with self.subTest(viewer=viewer and viewer.role):
                items, _ = self.service.list_by_article(
                    self.article.id, include_spam=True, include_unapproved=True, viewer=viewer
                )
                self.assertEqual(self._ids(items), [self.approved.id, self.later.id])

    def test_moderator_can_widen_view(self) -> None:
        mod = claims_for(self.mod)
        items, meta = self.service.list_by_article(self.article.id, include_spam=True, include_unapproved=True, viewer=mod)
        self.assertEqual(
            self._ids(items), [self.approved.id, self.pending.id, self.spam.id, self.later.id]
        )
        self.assertEqual(meta.total, 4)

        items, _ = self.service.list_by_article(self.article.id, include_unapproved=True, viewer=mod)
        self.assertNotIn(self.spam.id, self._ids(items))
        self.assertIn(self.pending.id, self._ids(items))

    def test_spam_hidden_from_public_after_moderation(self) -> None:
        self.service.mark_as_spam(self.later.id, claims_for(self.mod))
        items, _ = self.service.list_by_article(self.article.id)
        self.assertEqual(self._ids(items), [self.approved.id])

    def test_pagination(self) -> None:
        items, meta = self.service.list_by_article(self.article.id, page="2", limit="1")
        self.assertEqual(self._ids(items), [self.later.id])
        self.assertEqual(meta.total_pages, 2)
        self.assertFalse(meta.has_next)
        self.assertTrue(meta.has_prev)

    def test_garbage_page_params_use_defaults(self) -> None:
        items, meta = self.service.list_by_article(self.article.id, page="abc", limit="-3")
        self.assertEqual(meta.page, 1)
        self.assertEqual(meta.limit, 20)
        self.assertEqual(len(items), 2)

    def test_stats_count_public_comments(self) -> None:
        self.assertEqual(self.service.article_stats(self.article.id).total, 2)
        self.assertEqual(self.service.article_stats("missing").total, 0)

    def test_own_history_includes_every_state_newest_first(self) -> None:
        items, meta = self.service.list_user_comments(None, claims_for(self.bob))
        self.assertEqual(self._ids(items), [self.later.id, self.spam.id, self.pending.id])
        self.assertEqual(meta.total, 3)
        self.assertEqual(items[0].article.slug, self.article.slug)

    def test_others_history_needs_moderator(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.list_user_comments(self.bob.id, claims_for(self.alice))
        items, _ = self.service.list_user_comments(self.bob.id, claims_for(self.admin))
        self.assertEqual(len(items), 3)

    def test_pending_queue(self) -> None:
        items, meta = self.service.list_pending(claims_for(self.mod))
        self.assertEqual(self._ids(items), [self.pending.id])
        self.assertEqual(meta.limit, 50)
        with self.assertRaises(AuthorizationError):
            self.service.list_pending(claims_for(self.alice))

    def test_recent_excludes_hidden(self) -> None:
        items = self.service.list_recent(claims_for(self.admin))
        self.assertEqual(self._ids(items), [self.later.id, self.approved.id])
        self.assertEqual(len(self.service.list_recent(claims_for(self.admin), limit=1)), 1)
        with self.assertRaises(AuthenticationError):
            self.service.list_recent(None)


if __name__ == "__main__":
    unittest.main()
