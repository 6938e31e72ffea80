"""Pydantic request/response schemas."""

from newsdesk.schemas.auth import (
    AdminUserItem,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    SafeUser,
)
from newsdesk.schemas.comments import (
    CommentOut,
    CreateCommentRequest,
    UpdateCommentRequest,
    UserCommentOut,
)
from newsdesk.schemas.common import ApiResponse, ErrorItem, ErrorResponse, PaginationMeta
from newsdesk.schemas.health import HealthResponse

__all__ = [
    "AdminUserItem",
    "ApiResponse",
    "ChangePasswordRequest",
    "CommentOut",
    "CreateCommentRequest",
    "ErrorItem",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "PaginationMeta",
    "RegisterRequest",
    "SafeUser",
    "UpdateCommentRequest",
    "UserCommentOut",
]
