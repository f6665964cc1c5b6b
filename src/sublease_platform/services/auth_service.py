"""Authentication service: membership gate, password hashing and JWT tokens."""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.app.config import Settings
from sublease_platform.domain.errors import (
    DomainRejected,
    DuplicateUser,
    InvalidCredential,
    InvalidCredentials,
    InvalidSignup,
    NotFound,
    Unauthenticated,
    WeakPassword,
)
from sublease_platform.domain.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user: User, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expiration_minutes)
    payload = {"sub": str(user.id), "uid": user.uid, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict | None:
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def resolve_caller(token: str | None, settings: Settings) -> int:
    """Verify a bearer token and return the caller's user id.

    Signature and expiry are checked against the signing secret only; the
    store is not consulted.

    Raises:
        Unauthenticated: no token supplied.
        InvalidCredential: bad signature, expired, or malformed subject.
    """
    if not token or not token.strip():
        raise Unauthenticated()
    payload = decode_token(token.strip(), settings)
    if not payload or "sub" not in payload:
        raise InvalidCredential()
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidCredential()


def is_member_email(email: str, settings: Settings) -> bool:
    """Membership is an exact, case-sensitive suffix match on the email."""
    return email.endswith(settings.allowed_email_domain)


class AuthService:
    """Sign-up and sign-in against the users table."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def sign_up(self, email: str, password: str, name: str) -> tuple[str, User]:
        """Create a member account and return ``(token, user)``.

        All validation runs before the single insert.
        """
        email = email.strip()
        if not is_member_email(email, self.settings):
            raise DomainRejected()
        if len(password) < self.settings.password_min_length:
            raise WeakPassword(
                f"Password must be at least {self.settings.password_min_length} characters"
            )
        if not name or not name.strip():
            raise InvalidSignup()
        if await self.get_user_by_email(email):
            raise DuplicateUser()

        user = User(email=email, password_hash=hash_password(password), name=name.strip())
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await self.db.rollback()
            raise DuplicateUser()
        await self.db.refresh(user)

        logger.info("Created user %s (%s)", user.id, user.email)
        return create_access_token(user, self.settings), user

    async def sign_in(self, email: str, password: str) -> tuple[str, User]:
        email = email.strip()
        if not is_member_email(email, self.settings):
            raise DomainRejected()

        user = await self.get_user_by_email(email)
        if user is None:
            # Equalize timing with the wrong-password path
            pwd_context.dummy_verify()
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        logger.debug("User %s signed in", user.id)
        return create_access_token(user, self.settings), user
