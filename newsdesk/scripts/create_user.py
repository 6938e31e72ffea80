"""
Create a verified user (e.g. first admin) without going through email verification.
Run from project root:
  python -m newsdesk.scripts.create_user EMAIL PASSWORD [--name NAME] [--role ROLE]
Example:
  python -m newsdesk.scripts.create_user admin@example.com your-secure-password --role SUPERADMIN
"""
import argparse
import sys

from newsdesk.core.config import settings
from newsdesk.core.database import SessionLocal
from newsdesk.core.errors import AppError
from newsdesk.core.permissions import Role
from newsdesk.core.security import PasswordHasher
from newsdesk.repositories import UserRepository
from newsdesk.services.auth import normalize_email, validate_new_password


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a verified Newsdesk user.")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("--name", default=None, help="Display name (defaults to the email local part)")
    parser.add_argument("--role", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    try:
        email = normalize_email(args.email)
        validate_new_password(args.password)
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    name = (args.name or email.split("@")[0]).strip()

    db = SessionLocal()
    try:
        users = UserRepository(db)
        if users.find_by_email(email) is not None:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        users.create(
            name=name,
            email=email,
            password_hash=PasswordHasher(rounds=settings.BCRYPT_ROUNDS).hash(args.password),
            role=Role(args.role),
            is_verified=True,
        )
        users.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
