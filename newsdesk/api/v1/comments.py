"""Comment endpoints: public article threads, authoring, and the moderation queue."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from newsdesk.api.deps import CurrentUser, OptionalUser, get_comment_service, require_role
from newsdesk.api.responses import envelope
from newsdesk.core.permissions import Role
from newsdesk.core.security import TokenClaims
from newsdesk.schemas.comments import (
    CommentOut,
    CommentStats,
    CreateCommentRequest,
    UpdateCommentRequest,
    UserCommentOut,
)
from newsdesk.schemas.common import ApiResponse
from newsdesk.services.comments import CommentService

router = APIRouter()

Comments = Annotated[CommentService, Depends(get_comment_service)]
Moderator = Annotated[TokenClaims, Depends(require_role(Role.ADMIN, Role.MODERATOR))]
# Raw strings: unparseable page/limit fall back to defaults instead of failing the request.
PageQuery = Annotated[str | None, Query()]
LimitQuery = Annotated[str | None, Query()]

# Static paths are declared before /{article_id} so they are matched first.


@router.get("/me", response_model=ApiResponse[list[UserCommentOut]])
def my_comments(
    user: CurrentUser,
    request: Request,
    comments: Comments,
    page: PageQuery = None,
    limit: LimitQuery = None,
) -> ApiResponse:
    items, pagination = comments.list_user_comments(None, user, page, limit)
    return envelope(request, items, f"Retrieved {len(items)} comments", pagination)


@router.get("/user/{user_id}", response_model=ApiResponse[list[UserCommentOut]])
def user_comments(
    user_id: str,
    user: CurrentUser,
    request: Request,
    comments: Comments,
    page: PageQuery = None,
    limit: LimitQuery = None,
) -> ApiResponse:
    """A user's comment history; other users' history is visible to admins and moderators only."""
    items, pagination = comments.list_user_comments(user_id, user, page, limit)
    return envelope(request, items, f"Retrieved {len(items)} comments", pagination)


@router.get("/admin/recent", response_model=ApiResponse[list[CommentOut]])
def recent_comments(
    user: Moderator,
    request: Request,
    comments: Comments,
    limit: LimitQuery = None,
) -> ApiResponse:
    items = comments.list_recent(user, limit)
    return envelope(request, items, f"Retrieved {len(items)} recent comments")


@router.get("/admin/pending", response_model=ApiResponse[list[CommentOut]])
def pending_comments(
    user: Moderator,
    request: Request,
    comments: Comments,
    page: PageQuery = None,
    limit: LimitQuery = None,
) -> ApiResponse:
    items, pagination = comments.list_pending(user, page, limit)
    return envelope(request, items, f"Retrieved {len(items)} pending comments", pagination)


@router.get("/stats/{article_id}", response_model=ApiResponse[CommentStats])
def comment_stats(article_id: str, request: Request, comments: Comments) -> ApiResponse:
    return envelope(request, comments.article_stats(article_id), "Comment statistics retrieved")


@router.get("/{article_id}", response_model=ApiResponse[list[CommentOut]])
def article_comments(
    article_id: str,
    viewer: OptionalUser,
    request: Request,
    comments: Comments,
    page: PageQuery = None,
    limit: LimitQuery = None,
    include_spam: Annotated[bool, Query(alias="includeSpam")] = False,
    include_unapproved: Annotated[bool, Query(alias="includeUnapproved")] = False,
) -> ApiResponse:
    """
    Comments for an article, oldest first. includeSpam / includeUnapproved only take
    effect for admins and moderators; everyone else sees approved, non-spam comments.
    """
    items, pagination = comments.list_by_article(
        article_id,
        page,
        limit,
        include_spam=include_spam,
        include_unapproved=include_unapproved,
        viewer=viewer,
    )
    return envelope(request, items, f"Retrieved {len(items)} comments", pagination)


@router.post("", response_model=ApiResponse[CommentOut], status_code=status.HTTP_201_CREATED)
def create_comment(
    body: CreateCommentRequest, user: CurrentUser, request: Request, comments: Comments
) -> ApiResponse:
    comment = comments.create_comment(body.content, body.article_id, user)
    return envelope(request, comment, "Comment created successfully")


@router.put("/{comment_id}", response_model=ApiResponse[CommentOut])
def update_comment(
    comment_id: str,
    body: UpdateCommentRequest,
    user: CurrentUser,
    request: Request,
    comments: Comments,
) -> ApiResponse:
    comment = comments.update_comment(comment_id, body.content, user)
    return envelope(request, comment, "Comment updated successfully")


@router.delete("/{comment_id}", response_model=ApiResponse[None])
def delete_comment(
    comment_id: str, user: CurrentUser, request: Request, comments: Comments
) -> ApiResponse:
    result = comments.delete_comment(comment_id, user)
    return envelope(request, None, result["message"])


@router.post("/{comment_id}/spam", response_model=ApiResponse[CommentOut])
def mark_spam(comment_id: str, user: Moderator, request: Request, comments: Comments) -> ApiResponse:
    comment = comments.mark_as_spam(comment_id, user)
    return envelope(request, comment, "Comment marked as spam")


@router.post("/{comment_id}/approve", response_model=ApiResponse[CommentOut])
def approve(comment_id: str, user: Moderator, request: Request, comments: Comments) -> ApiResponse:
    comment = comments.approve_comment(comment_id, user)
    return envelope(request, comment, "Comment approved successfully")
