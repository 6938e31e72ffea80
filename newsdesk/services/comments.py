"""Comment moderation engine: ownership and role checks, state transitions, visibility-filtered listing."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from newsdesk.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
)
from newsdesk.core.permissions import Action, can
from newsdesk.core.security import TokenClaims
from newsdesk.models import Comment
from newsdesk.repositories import (
    ArticleRepository,
    CommentFilter,
    CommentRepository,
)
from newsdesk.schemas.comments import CommentOut, CommentStats, UserCommentOut
from newsdesk.schemas.common import PaginationMeta
from newsdesk.services.moderation import (
    CommentState,
    screen_for_spam,
    transition,
    validate_comment_content,
)
from newsdesk.services.pagination import (
    MODERATION_DEFAULT_LIMIT,
    MODERATION_MAX_LIMIT,
    USER_VIEW_DEFAULT_LIMIT,
    USER_VIEW_MAX_LIMIT,
    build_pagination_meta,
    normalize_page_params,
)

logger = logging.getLogger(__name__)

RECENT_DEFAULT_LIMIT = 10


def _require_identity(viewer: TokenClaims | None) -> TokenClaims:
    if viewer is None:
        raise AuthenticationError("Authentication required", "AUTH_REQUIRED")
    return viewer


def _require(viewer: TokenClaims, action: Action, message: str, *, is_owner: bool = False) -> None:
    if not can(viewer.role, action, is_owner=is_owner):
        raise AuthorizationError(message, "INSUFFICIENT_PERMISSIONS")


def to_comment_out(comment: Comment) -> CommentOut:
    return CommentOut.model_validate(comment)


class CommentService:
    """
    Comment lifecycle: created PENDING or APPROVED (never SPAM), moderated between
    APPROVED and SPAM by ADMIN/MODERATOR, edited only by its author, deleted by its
    author or a moderator. Concurrent moderation is last-write-wins.
    """

    def __init__(self, db: Session, auto_approve: bool = True, spam_blocking: bool = False) -> None:
        self.comments = CommentRepository(db)
        self.articles = ArticleRepository(db)
        self.auto_approve = auto_approve
        self.spam_blocking = spam_blocking

    def _get_or_404(self, comment_id: str) -> Comment:
        comment = self.comments.find_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found", "COMMENT_NOT_FOUND")
        return comment

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_comment(self, content: str, article_id: str, author: TokenClaims | None) -> CommentOut:
        author = _require_identity(author)
        _require(author, Action.COMMENT_CREATE, "You cannot post comments")
        trimmed = validate_comment_content(content)

        article = self.articles.find_published(article_id)
        if article is None:
            raise NotFoundError("Article not found", "ARTICLE_NOT_FOUND")

        screen_for_spam(
            trimmed,
            blocking=self.spam_blocking,
            article_id=article_id,
            author_id=author.id,
        )
        state = CommentState.APPROVED if self.auto_approve else CommentState.PENDING
        comment = self.comments.create(
            content=trimmed,
            article_id=article_id,
            author_id=author.id,
            **state.to_flags(),
        )
        self.comments.commit()
        logger.info(
            "Comment created",
            extra={"comment_id": comment.id, "article_id": article_id, "author_id": author.id},
        )
        return to_comment_out(comment)

    def update_comment(self, comment_id: str, content: str, requester: TokenClaims | None) -> CommentOut:
        requester = _require_identity(requester)
        comment = self._get_or_404(comment_id)
        _require(
            requester,
            Action.COMMENT_UPDATE_OWN,
            "You can only edit your own comments",
            is_owner=comment.author_id == requester.id,
        )
        trimmed = validate_comment_content(content)
        screen_for_spam(
            trimmed,
            blocking=self.spam_blocking,
            article_id=comment.article_id,
            author_id=requester.id,
        )
        self.comments.update(comment, touch=True, content=trimmed)
        self.comments.commit()
        logger.info("Comment updated", extra={"comment_id": comment_id, "author_id": requester.id})
        return to_comment_out(comment)

    def delete_comment(self, comment_id: str, requester: TokenClaims | None) -> dict[str, Any]:
        requester = _require_identity(requester)
        comment = self._get_or_404(comment_id)
        is_owner = comment.author_id == requester.id
        if not (
            can(requester.role, Action.COMMENT_DELETE_OWN, is_owner=is_owner)
            or can(requester.role, Action.COMMENT_DELETE_ANY)
        ):
            raise AuthorizationError(
                "You can only delete your own comments", "INSUFFICIENT_PERMISSIONS"
            )
        original_author = comment.author_id
        self.comments.delete(comment)
        self.comments.commit()
        logger.info(
            "Comment deleted",
            extra={
                "comment_id": comment_id,
                "deleted_by": requester.id,
                "original_author": original_author,
            },
        )
        return {"success": True, "message": "Comment deleted successfully"}

    def _moderate(self, comment_id: str, moderator: TokenClaims | None, target: CommentState) -> CommentOut:
        moderator = _require_identity(moderator)
        _require(
            moderator,
            Action.COMMENT_MODERATE,
            "Only admins and moderators can moderate comments",
        )
        comment = self._get_or_404(comment_id)
        current = CommentState.from_flags(comment.is_approved, comment.is_spam)
        new_state = transition(current, target)
        self.comments.update(comment, **new_state.to_flags())
        self.comments.commit()
        logger.info(
            "Comment moderated",
            extra={
                "comment_id": comment_id,
                "moderator_id": moderator.id,
                "from_state": current.value,
                "to_state": new_state.value,
            },
        )
        return to_comment_out(comment)

    def mark_as_spam(self, comment_id: str, moderator: TokenClaims | None) -> CommentOut:
        return self._moderate(comment_id, moderator, CommentState.SPAM)

    def approve_comment(self, comment_id: str, moderator: TokenClaims | None) -> CommentOut:
        return self._moderate(comment_id, moderator, CommentState.APPROVED)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_by_article(
        self,
        article_id: str,
        page: Any = None,
        limit: Any = None,
        include_spam: bool = False,
        include_unapproved: bool = False,
        viewer: TokenClaims | None = None,
    ) -> tuple[list[CommentOut], PaginationMeta]:
        """
        Article thread, oldest first. The include flags are dropped unless the viewer's
        role may read hidden comments, whatever the caller passed in.
        """
        can_see_hidden = viewer is not None and can(viewer.role, Action.COMMENT_READ_HIDDEN)
        flt = CommentFilter(
            article_id=article_id,
            include_spam=include_spam and can_see_hidden,
            include_unapproved=include_unapproved and can_see_hidden,
        )
        params = normalize_page_params(page, limit, USER_VIEW_DEFAULT_LIMIT, USER_VIEW_MAX_LIMIT)
        rows = self.comments.list_comments(flt, params.skip, params.limit, order="asc")
        total = self.comments.count_comments(flt)
        logger.debug(
            "Listed article comments",
            extra={"article_id": article_id, "count": len(rows), "hidden_included": can_see_hidden},
        )
        return (
            [to_comment_out(c) for c in rows],
            build_pagination_meta(params.page, params.limit, total),
        )

    def article_stats(self, article_id: str) -> CommentStats:
        total = self.comments.count_comments(CommentFilter(article_id=article_id))
        return CommentStats(article_id=article_id, total=total)

    def list_user_comments(
        self,
        target_user_id: str | None,
        viewer: TokenClaims | None,
        page: Any = None,
        limit: Any = None,
    ) -> tuple[list[UserCommentOut], PaginationMeta]:
        """A user's history, newest first. Owners and moderators see every state."""
        viewer = _require_identity(viewer)
        target = target_user_id or viewer.id
        if not can(viewer.role, Action.COMMENT_READ_OWN_HIDDEN, is_owner=target == viewer.id):
            _require(viewer, Action.COMMENT_VIEW_OTHERS_HISTORY, "You can only view your own comments")
        flt = CommentFilter(author_id=target, include_spam=True, include_unapproved=True)
        params = normalize_page_params(page, limit, USER_VIEW_DEFAULT_LIMIT, USER_VIEW_MAX_LIMIT)
        rows = self.comments.list_comments(flt, params.skip, params.limit, order="desc")
        total = self.comments.count_comments(flt)
        return (
            [UserCommentOut.model_validate(c) for c in rows],
            build_pagination_meta(params.page, params.limit, total),
        )

    def list_recent(self, viewer: TokenClaims | None, limit: Any = None) -> list[CommentOut]:
        """Latest visible comments across all articles for the admin dashboard."""
        viewer = _require_identity(viewer)
        _require(viewer, Action.COMMENT_READ_HIDDEN, "Insufficient permissions")
        params = normalize_page_params(1, limit, RECENT_DEFAULT_LIMIT, USER_VIEW_MAX_LIMIT)
        rows = self.comments.list_comments(CommentFilter(), 0, params.limit, order="desc")
        return [to_comment_out(c) for c in rows]

    def list_pending(
        self,
        viewer: TokenClaims | None,
        page: Any = None,
        limit: Any = None,
    ) -> tuple[list[CommentOut], PaginationMeta]:
        """Moderation queue: comments neither approved nor spam, newest first."""
        viewer = _require_identity(viewer)
        _require(viewer, Action.COMMENT_MODERATE, "Insufficient permissions")
        flt = CommentFilter(only_pending=True)
        params = normalize_page_params(page, limit, MODERATION_DEFAULT_LIMIT, MODERATION_MAX_LIMIT)
        rows = self.comments.list_comments(flt, params.skip, params.limit, order="desc")
        total = self.comments.count_comments(flt)
        return (
            [to_comment_out(c) for c in rows],
            build_pagination_meta(params.page, params.limit, total),
        )
