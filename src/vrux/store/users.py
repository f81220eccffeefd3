"""
User Store
Accounts, password hashing and cookie sessions, held in memory.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal

from passlib.context import CryptContext
from pydantic import Field, field_validator

from ..core import ApiModel, ConflictError, NotFoundError, get_logger, is_valid_email
from ..core.id import new_session_token, new_user_id
from ..core.validate import MIN_PASSWORD_LENGTH

logger = get_logger(__name__)

Plan = Literal["free", "pro", "enterprise"]

UNLIMITED = -1
FREE_PLAN_CALLS = 100

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class User(ApiModel):
    """Public view of an account; never carries the password hash."""

    id: str
    email: str
    name: str
    created_at: datetime
    plan: Plan = "free"
    api_calls: int = 0
    max_api_calls: int = FREE_PLAN_CALLS
    is_admin: bool = False

    @property
    def has_quota(self) -> bool:
        return self.max_api_calls == UNLIMITED or self.api_calls < self.max_api_calls


class StoredUser(User):
    password_hash: str

    def public(self) -> User:
        return User.model_validate(self.model_dump(exclude={"password_hash"}))


@dataclass
class Session:
    token: str
    user_id: str
    expires_at: datetime

    def expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SignUpRequest(ApiModel):
    email: str
    password: str
    name: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_email(v):
            raise ValueError("Invalid email format")
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return v


class SignInRequest(ApiModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ProfileUpdate(ApiModel):
    name: str | None = None
    email: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not is_valid_email(v):
            raise ValueError("Invalid email format")
        return v.lower()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserStore:
    """
    In-memory accounts keyed by lowercased email, plus opaque session tokens.

    Seeds a demo account and an unlimited enterprise admin unless ``seed``
    is False.
    """

    def __init__(self, session_ttl: float = 86_400, seed: bool = True) -> None:
        self.session_ttl = timedelta(seconds=session_ttl)
        self._users: dict[str, StoredUser] = {}
        self._sessions: dict[str, Session] = {}
        if seed:
            self._seed()

    def _seed(self) -> None:
        self.create_user("demo@vrux.dev", "demo123", "Demo User")
        admin = self.create_user("admin@vrux.dev", "admin123", "Admin User")
        stored = self._users[admin.email]
        stored.is_admin = True
        stored.plan = "enterprise"
        stored.max_api_calls = UNLIMITED

    def __len__(self) -> int:
        return len(self._users)

    def create_user(self, email: str, password: str, name: str | None = None) -> User:
        """
        Register an account.

        Raises:
            ConflictError: Email already registered
        """
        key = email.strip().lower()
        if key in self._users:
            raise ConflictError("User already exists", code="USER_EXISTS")

        user = StoredUser(
            id=new_user_id(),
            email=key,
            name=name or key.split("@")[0],
            created_at=_now(),
            password_hash=pwd_context.hash(password),
        )
        self._users[key] = user
        logger.info("user_created", user_id=user.id, email=key)
        return user.public()

    def find_by_email(self, email: str) -> StoredUser | None:
        return self._users.get(email.strip().lower())

    def find_by_id(self, user_id: str) -> StoredUser | None:
        return next((u for u in self._users.values() if u.id == user_id), None)

    def verify_password(self, user: StoredUser, password: str) -> bool:
        return pwd_context.verify(password, user.password_hash)

    def authenticate(self, email: str, password: str) -> User | None:
        """Public user for matching credentials, None for any mismatch."""
        user = self.find_by_email(email)
        if user is None or not self.verify_password(user, password):
            return None
        return user.public()

    def _prune_sessions(self, now: datetime) -> None:
        expired = [token for token, s in self._sessions.items() if s.expired(now)]
        for token in expired:
            del self._sessions[token]

    def create_session(self, user_id: str) -> str:
        now = _now()
        self._prune_sessions(now)
        token = new_session_token()
        self._sessions[token] = Session(token=token, user_id=user_id, expires_at=now + self.session_ttl)
        logger.debug("session_created", user_id=user_id, sessions=len(self._sessions))
        return token

    def get_session(self, token: str) -> Session | None:
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.expired(_now()):
            del self._sessions[token]
            return None
        return session

    def delete_session(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    def validate_session(self, token: str) -> User | None:
        session = self.get_session(token)
        if session is None:
            return None
        user = self.find_by_id(session.user_id)
        return user.public() if user else None

    def update_user(self, user_id: str, name: str | None = None, email: str | None = None) -> User:
        """
        Change name and/or email; an email change re-keys the account.

        Raises:
            NotFoundError: Unknown user
            ConflictError: Email taken by another account
        """
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        if email is not None:
            key = email.strip().lower()
            if key != user.email:
                other = self._users.get(key)
                if other is not None and other.id != user_id:
                    raise ConflictError("Email already in use", code="EMAIL_IN_USE")
                del self._users[user.email]
                user.email = key
                self._users[key] = user

        if name is not None:
            user.name = name

        logger.info("user_updated", user_id=user_id)
        return user.public()

    def increment_api_calls(self, user_id: str) -> int:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        user.api_calls += 1
        return user.api_calls
