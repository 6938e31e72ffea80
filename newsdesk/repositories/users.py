"""User and subscription lookups."""

from typing import Any

from sqlalchemy import func

from newsdesk.models import Subscription, SubscriptionStatus, User
from newsdesk.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    def find_by_email(self, email: str) -> User | None:
        return (
            self._db.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def find_by_id(self, user_id: str) -> User | None:
        return self._db.get(User, user_id)

    def find_by_google_id(self, google_id: str) -> User | None:
        return self._db.query(User).filter(User.google_id == google_id).first()

    def find_by_verification_selector(self, selector: str) -> User | None:
        return self._db.query(User).filter(User.verification_selector == selector).first()

    def create(self, **fields: Any) -> User:
        user = User(**fields)
        self._db.add(user)
        self._db.flush()
        return user

    def update(self, user: User, **fields: Any) -> User:
        for key, value in fields.items():
            setattr(user, key, value)
        self._db.flush()
        return user

    def has_active_subscription(self, user_id: str) -> bool:
        return (
            self._db.query(Subscription.id)
            .filter(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
            .first()
            is not None
        )

    def list_users(self, skip: int, take: int) -> list[User]:
        return (
            self._db.query(User)
            .order_by(User.created_at.desc(), User.id)
            .offset(skip)
            .limit(take)
            .all()
        )

    def count_users(self) -> int:
        return self._db.query(func.count(User.id)).scalar() or 0
