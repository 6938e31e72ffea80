"""User administration: role and account-status changes by ADMIN/SUPERADMIN."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from newsdesk.core.errors import AuthorizationError, NotFoundError, ValidationError
from newsdesk.core.permissions import PRIVILEGED_ROLES, AccountStatus, Action, Role, can
from newsdesk.core.security import TokenClaims
from newsdesk.models import User
from newsdesk.repositories import UserRepository
from newsdesk.schemas.auth import AdminUserItem
from newsdesk.schemas.common import PaginationMeta
from newsdesk.services.pagination import (
    MODERATION_DEFAULT_LIMIT,
    MODERATION_MAX_LIMIT,
    build_pagination_meta,
    normalize_page_params,
)

logger = logging.getLogger(__name__)


class UserAdminService:
    """Nobody changes their own role or status; only SUPERADMIN touches ADMIN/SUPERADMIN accounts."""

    def __init__(self, db: Session) -> None:
        self.users = UserRepository(db)

    def _target_for(self, target_id: str, actor: TokenClaims) -> User:
        if not can(actor.role, Action.USER_MANAGE):
            raise AuthorizationError("Insufficient permissions", "INSUFFICIENT_PERMISSIONS")
        if target_id == actor.id:
            raise AuthorizationError("You cannot change your own account", "SELF_MODIFICATION")
        user = self.users.find_by_id(target_id)
        if user is None:
            raise NotFoundError("User not found", "USER_NOT_FOUND")
        if Role(user.role) in PRIVILEGED_ROLES and not can(actor.role, Action.USER_MANAGE_PRIVILEGED):
            raise AuthorizationError(
                "Only a superadmin can change an administrator", "INSUFFICIENT_PERMISSIONS"
            )
        return user

    def list_users(
        self, actor: TokenClaims, page: Any = None, limit: Any = None
    ) -> tuple[list[AdminUserItem], PaginationMeta]:
        if not can(actor.role, Action.USER_MANAGE):
            raise AuthorizationError("Insufficient permissions", "INSUFFICIENT_PERMISSIONS")
        params = normalize_page_params(page, limit, MODERATION_DEFAULT_LIMIT, MODERATION_MAX_LIMIT)
        rows = self.users.list_users(params.skip, params.limit)
        total = self.users.count_users()
        return (
            [AdminUserItem.model_validate(u) for u in rows],
            build_pagination_meta(params.page, params.limit, total),
        )

    def change_role(self, target_id: str, role: Role, actor: TokenClaims) -> AdminUserItem:
        user = self._target_for(target_id, actor)
        if role in PRIVILEGED_ROLES and not can(actor.role, Action.USER_MANAGE_PRIVILEGED):
            raise AuthorizationError(
                "Only a superadmin can grant administrator roles", "INSUFFICIENT_PERMISSIONS"
            )
        previous = Role(user.role)
        self.users.update(user, role=role)
        self.users.commit()
        # Existing tokens keep the old role until they expire or the user signs in again.
        logger.info(
            "User role changed",
            extra={
                "target_id": target_id,
                "actor_id": actor.id,
                "from_role": previous.value,
                "to_role": role.value,
            },
        )
        return AdminUserItem.model_validate(user)

    def set_status(
        self,
        target_id: str,
        actor: TokenClaims,
        status: AccountStatus | None = None,
        is_suspended: bool | None = None,
    ) -> AdminUserItem:
        if status is None and is_suspended is None:
            raise ValidationError("Nothing to change: pass status or isSuspended", "MISSING_FIELDS")
        user = self._target_for(target_id, actor)
        changes: dict[str, Any] = {}
        if status is not None:
            changes["status"] = status
        if is_suspended is not None:
            changes["is_suspended"] = is_suspended
        self.users.update(user, **changes)
        self.users.commit()
        logger.info(
            "User status changed",
            extra={
                "target_id": target_id,
                "actor_id": actor.id,
                "status": AccountStatus(user.status).value,
                "is_suspended": user.is_suspended,
            },
        )
        return AdminUserItem.model_validate(user)
