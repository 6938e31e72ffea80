"""ORM models for user accounts and their subscription (auth and RBAC)."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, String, Text, func
from sqlalchemy.orm import relationship

from newsdesk.core.permissions import AccountStatus, Role
from newsdesk.models.base import Base


def new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    User account for session-token authentication and role-based access control.

    Created unverified at registration; verified once by redeeming the emailed token.
    verification_selector locates the row for a raw token, verification_token_hash proves it.
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)
    status = Column(
        Enum(AccountStatus, name="account_status"),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    is_suspended = Column(Boolean, nullable=False, default=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    verification_selector = Column(String(64), nullable=True, index=True)
    verification_token_hash = Column(String(255), nullable=True)
    verification_sent_at = Column(DateTime(timezone=True), nullable=True)
    google_id = Column(String(255), nullable=True, unique=True)
    profile_image = Column(String(2048), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    subscription = relationship("Subscription", back_populates="user", uselist=False)

    @property
    def can_authenticate(self) -> bool:
        return not self.is_suspended and self.status == AccountStatus.ACTIVE
