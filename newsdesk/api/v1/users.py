"""User administration endpoints (ADMIN and SUPERADMIN)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from newsdesk.api.deps import get_user_admin_service, require_role
from newsdesk.api.responses import envelope
from newsdesk.core.permissions import Role
from newsdesk.core.security import TokenClaims
from newsdesk.schemas.auth import AdminUserItem, ChangeRoleRequest, ChangeStatusRequest
from newsdesk.schemas.common import ApiResponse
from newsdesk.services.users import UserAdminService

router = APIRouter()

Admin = Annotated[TokenClaims, Depends(require_role(Role.ADMIN, Role.SUPERADMIN))]
Users = Annotated[UserAdminService, Depends(get_user_admin_service)]


@router.get("", response_model=ApiResponse[list[AdminUserItem]])
def list_users(
    admin: Admin,
    request: Request,
    users: Users,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ApiResponse:
    """List users (no credentials)."""
    items, pagination = users.list_users(admin, page, limit)
    return envelope(request, items, f"Retrieved {len(items)} users", pagination)


@router.patch("/{user_id}/role", response_model=ApiResponse[AdminUserItem])
def change_role(
    user_id: str, body: ChangeRoleRequest, admin: Admin, request: Request, users: Users
) -> ApiResponse:
    """Change a user's role. Takes effect on the user's next sign-in."""
    return envelope(request, users.change_role(user_id, body.role, admin), "User role updated")


@router.patch("/{user_id}/status", response_model=ApiResponse[AdminUserItem])
def change_status(
    user_id: str, body: ChangeStatusRequest, admin: Admin, request: Request, users: Users
) -> ApiResponse:
    """Ban/unban or suspend/unsuspend. Blocks the user's existing tokens immediately."""
    item = users.set_status(user_id, admin, status=body.status, is_suspended=body.is_suspended)
    return envelope(request, item, "User status updated")
