"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import EmailStr, Field

from newsdesk.core.permissions import AccountStatus, Role
from newsdesk.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN
from newsdesk.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    # Blank fields are allowed through so the service can report MISSING_FIELDS uniformly.
    name: str = Field(default="", max_length=NAME_MAX_LEN, description="Display name")
    email: str = Field(default="", max_length=320, description="Email address")
    password: str = Field(default="", max_length=PASSWORD_MAX_LEN, description="Password")


class LoginRequest(CamelModel):
    """Credentials for login."""

    email: str = Field(..., max_length=320, description="Email address")
    password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Password")


class ResendVerificationRequest(CamelModel):
    email: EmailStr


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class UpdateProfileRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LEN)
    email: EmailStr | None = None
    bio: str | None = Field(default=None, max_length=2000)


class MessageData(CamelModel):
    message: str


class SafeUser(CamelModel):
    """User projection returned to clients; never includes credential or token hashes."""

    id: str
    name: str
    email: str
    role: Role
    is_verified: bool
    is_subscriber: bool = False
    profile_image: str | None = None
    bio: str | None = None
    created_at: datetime | None = None


class LoginData(CamelModel):
    """Login result; the token is also set as an httpOnly cookie."""

    user: SafeUser
    token: str
    token_type: str = "bearer"


class UserEnvelope(CamelModel):
    user: SafeUser


class PremiumAccess(CamelModel):
    is_subscriber: bool
    token_expires_at: datetime | None = None


class AdminUserItem(CamelModel):
    """User entry for the admin list (no credentials)."""

    id: str
    name: str
    email: str
    role: Role
    status: AccountStatus
    is_suspended: bool
    is_verified: bool
    created_at: datetime | None = None


class ChangeRoleRequest(CamelModel):
    role: Role


class ChangeStatusRequest(CamelModel):
    status: AccountStatus | None = None
    is_suspended: bool | None = None
