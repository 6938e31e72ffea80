"""Shared builders for tests: in-memory database, fast hasher, token codec and seeded rows."""

from datetime import datetime

from sqlalchemy.orm import Session, sessionmaker

from newsdesk.core.config import Settings
from newsdesk.core.database import build_engine
from newsdesk.core.permissions import Role
from newsdesk.core.security import PasswordHasher, TokenClaims, TokenCodec
from newsdesk.models import Article, ArticleStatus, Base, Comment, Subscription, User

TEST_SECRET = "unit-test-secret-0123456789abcdefghijklmnop"
DEFAULT_PASSWORD = "correct-horse-battery"

# Minimum bcrypt cost keeps the suite fast; production settings never go below 10.
FAST_HASHER = PasswordHasher(rounds=4)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with every table created."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_session() -> Session:
    return make_session_factory()()


def make_settings(**overrides: object) -> Settings:
    values = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "EMAIL_API_KEY": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_codec(expires_in: str = "7d") -> TokenCodec:
    return TokenCodec(TEST_SECRET, expires_in=expires_in)


def add_user(
    db: Session,
    email: str = "reader@example.com",
    name: str = "Reader",
    role: Role = Role.USER,
    password: str = DEFAULT_PASSWORD,
    verified: bool = True,
    subscribed: bool = False,
    **fields: object,
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=FAST_HASHER.hash(password),
        role=role,
        is_verified=verified,
        **fields,
    )
    db.add(user)
    db.flush()
    if subscribed:
        db.add(Subscription(user_id=user.id))
    db.commit()
    return user


def add_article(
    db: Session,
    slug: str = "city-council-votes",
    premium: bool = False,
    status: ArticleStatus = ArticleStatus.PUBLISHED,
) -> Article:
    article = Article(title=slug.replace("-", " ").title(), slug=slug, is_premium=premium, status=status)
    db.add(article)
    db.commit()
    return article


def add_comment(
    db: Session,
    article: Article,
    author: User,
    content: str = "A thoughtful comment",
    approved: bool = True,
    spam: bool = False,
    created_at: datetime | None = None,
) -> Comment:
    comment = Comment(
        content=content,
        article_id=article.id,
        author_id=author.id,
        is_approved=approved,
        is_spam=spam,
    )
    if created_at is not None:
        comment.created_at = created_at
        comment.updated_at = created_at
    db.add(comment)
    db.commit()
    return comment


def claims_for(user: User, is_subscriber: bool = False) -> TokenClaims:
    """Identity as the auth layer would produce it for this user."""
    return TokenClaims(
        id=user.id,
        email=user.email,
        name=user.name,
        role=Role(user.role),
        is_subscriber=is_subscriber,
    )
