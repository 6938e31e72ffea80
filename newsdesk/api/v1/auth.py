"""Auth endpoints: registration, email verification, login/logout, profile and password."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from newsdesk.api.deps import CurrentUser, get_auth_service, get_components, require_subscriber
from newsdesk.api.responses import envelope
from newsdesk.core.container import Components
from newsdesk.core.security import TokenClaims
from newsdesk.schemas.auth import (
    ChangePasswordRequest,
    LoginData,
    LoginRequest,
    MessageData,
    PremiumAccess,
    RegisterRequest,
    ResendVerificationRequest,
    UpdateProfileRequest,
    UserEnvelope,
)
from newsdesk.schemas.common import ApiResponse
from newsdesk.services.auth import AuthService

router = APIRouter()

Auth = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/register", response_model=ApiResponse[MessageData], status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, request: Request, auth: Auth) -> ApiResponse:
    """Create an unverified account and email a verification link."""
    result = auth.register(body.name, body.email, body.password)
    return envelope(request, MessageData(**result), "User registered successfully")


@router.post("/login", response_model=ApiResponse[LoginData])
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    auth: Auth,
    components: Annotated[Components, Depends(get_components)],
) -> ApiResponse:
    """
    Authenticate with email and password. The session token is set as an httpOnly cookie
    and also returned so API clients can send it as: Authorization: Bearer <token>
    """
    result = auth.login(body.email, body.password)
    settings = components.settings
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        result.token,
        **auth.get_cookie_options(settings.is_production),
    )
    return envelope(request, LoginData(user=result.user, token=result.token), "Login successful")


@router.get("/me", response_model=ApiResponse[UserEnvelope])
def me(user: CurrentUser, request: Request, auth: Auth) -> ApiResponse:
    profile = auth.get_profile(user.id)
    return envelope(request, UserEnvelope(user=profile), "Profile retrieved successfully")


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    request: Request,
    response: Response,
    components: Annotated[Components, Depends(get_components)],
) -> ApiResponse:
    settings = components.settings
    response.delete_cookie(
        settings.AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return envelope(request, None, "Logged out successfully")


@router.patch("/password-change", response_model=ApiResponse[None])
def change_password(
    body: ChangePasswordRequest, user: CurrentUser, request: Request, auth: Auth
) -> ApiResponse:
    auth.change_password(user.id, body.old_password, body.new_password)
    return envelope(request, None, "Password changed successfully")


@router.get("/verify-email", response_model=ApiResponse[MessageData])
def verify_email(
    request: Request,
    auth: Auth,
    token: Annotated[str, Query(min_length=1, max_length=256)],
) -> ApiResponse:
    result = auth.verify_email(token)
    return envelope(request, MessageData(**result), result["message"])


@router.post("/resend-verification", response_model=ApiResponse[MessageData])
def resend_verification(body: ResendVerificationRequest, request: Request, auth: Auth) -> ApiResponse:
    result = auth.resend_verification(body.email)
    return envelope(request, MessageData(**result), result["message"])


@router.put("/profile", response_model=ApiResponse[UserEnvelope])
def update_profile(
    body: UpdateProfileRequest, user: CurrentUser, request: Request, auth: Auth
) -> ApiResponse:
    profile = auth.update_profile(user.id, name=body.name, email=body.email, bio=body.bio)
    return envelope(request, UserEnvelope(user=profile), "Profile updated successfully")


@router.get("/premium-access", response_model=ApiResponse[PremiumAccess])
def premium_access(
    user: Annotated[TokenClaims, Depends(require_subscriber)], request: Request
) -> ApiResponse:
    """Subscriber-only probe; clients call it before showing premium features."""
    return envelope(
        request,
        PremiumAccess(is_subscriber=True, token_expires_at=user.exp),
        "Subscription active",
    )
