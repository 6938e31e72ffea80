"""Request dependencies: service construction and the access-control guards."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from newsdesk.core.container import Components
from newsdesk.core.database import get_db
from newsdesk.core.errors import (
    AuthenticationError,
    AuthorizationError,
    SubscriptionRequiredError,
    TokenExpired,
    TokenInvalid,
)
from newsdesk.core.permissions import Role
from newsdesk.core.security import TokenClaims
from newsdesk.repositories import UserRepository
from newsdesk.services.auth import AuthService
from newsdesk.services.comments import CommentService
from newsdesk.services.users import UserAdminService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_components(request: Request) -> Components:
    return request.app.state.components


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    components: Annotated[Components, Depends(get_components)],
) -> AuthService:
    return AuthService(
        db,
        hasher=components.hasher,
        codec=components.codec,
        email_sender=components.email_sender,
        verification_ttl=components.verification_ttl,
    )


def get_comment_service(
    db: Annotated[Session, Depends(get_db)],
    components: Annotated[Components, Depends(get_components)],
) -> CommentService:
    return CommentService(
        db,
        auto_approve=components.settings.COMMENT_AUTO_APPROVE,
        spam_blocking=components.settings.COMMENT_SPAM_BLOCKING,
    )


def get_user_admin_service(db: Annotated[Session, Depends(get_db)]) -> UserAdminService:
    return UserAdminService(db)


def _extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    cookie_name: str,
) -> str | None:
    """Bearer header first, then the session cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(cookie_name) or None


def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    components: Annotated[Components, Depends(get_components)],
) -> TokenClaims | None:
    """
    Identity if a token is presented, None for anonymous requests. A presented but
    bad token is rejected rather than downgraded to anonymous.
    """
    token = _extract_token(request, credentials, components.settings.AUTH_COOKIE_NAME)
    if token is None:
        return None
    try:
        claims = components.codec.verify(token)
    except TokenExpired:
        raise AuthenticationError("Token expired", "TOKEN_EXPIRED")
    except TokenInvalid:
        raise AuthenticationError("Invalid token", "INVALID_TOKEN")

    # Role and subscriber flag stay as minted; the account row only decides whether it may still sign in.
    user = UserRepository(db).find_by_id(claims.id)
    if user is None:
        raise AuthenticationError("Invalid token", "INVALID_TOKEN")
    if not user.can_authenticate:
        logger.warning("Rejected token for suspended account", extra={"user_id": user.id})
        raise AuthenticationError("Account suspended. Please contact support.", "ACCOUNT_SUSPENDED")
    request.state.user_id = claims.id
    return claims


def get_current_user(
    user: Annotated[TokenClaims | None, Depends(get_optional_user)],
) -> TokenClaims:
    """Dependency: require a valid session token. Raises 401 AUTH_REQUIRED when none is presented."""
    if user is None:
        raise AuthenticationError("Authentication required", "AUTH_REQUIRED")
    return user


def require_role(*roles: Role) -> Callable[..., TokenClaims]:
    """Dependency factory: 403 unless the token's role is one of roles. Always runs after authentication."""
    allowed = frozenset(roles)

    def _require_role(
        user: Annotated[TokenClaims, Depends(get_current_user)],
    ) -> TokenClaims:
        if user.role not in allowed:
            raise AuthorizationError("Insufficient permissions", "INSUFFICIENT_PERMISSIONS")
        return user

    return _require_role


def require_subscriber(
    user: Annotated[TokenClaims, Depends(get_current_user)],
) -> TokenClaims:
    """
    Dependency: 403 SUBSCRIPTION_REQUIRED unless the token says subscriber.
    The flag is read from the token, so a new subscription needs a fresh sign-in.
    """
    if not user.is_subscriber:
        raise SubscriptionRequiredError()
    return user


CurrentUser = Annotated[TokenClaims, Depends(get_current_user)]
OptionalUser = Annotated[TokenClaims | None, Depends(get_optional_user)]
