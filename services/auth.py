"""User registration, login and bearer-token handling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from models.records import UserRole, normalize_role
from models.tables import User
from services.errors import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller of one request, decoded from its bearer token."""

    user_id: int
    email: str
    role: UserRole

    def require_role(self, allowed: Iterable[UserRole]) -> None:
        # Admins pass every role check.
        if self.role == UserRole.admin:
            return
        allowed_roles = set(allowed)
        if self.role not in allowed_roles:
            required = ", ".join(sorted(role.value for role in allowed_roles))
            raise PermissionDeniedError(
                f"Insufficient permissions: requires {required}, current role is {self.role.value}"
            )


class TokenService:
    """Issues and verifies signed access tokens."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._expire_minutes = settings.jwt_expire_minutes

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self._expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> AuthContext:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise AuthenticationError("Invalid token") from exc

        role = normalize_role(payload.get("role"))
        subject = payload.get("sub")
        if role is None or subject is None or not str(subject).isdigit():
            raise AuthenticationError("Invalid token")
        return AuthContext(user_id=int(subject), email=str(payload.get("email", "")), role=role)


class AuthService:
    """Account use cases backed by the ``users`` table."""

    def __init__(self, session: Session, tokens: TokenService) -> None:
        self._session = session
        self._tokens = tokens

    def register(
        self,
        *,
        email: Optional[str],
        password: Optional[str],
        role: object = UserRole.employee.value,
        firstname: Optional[str] = None,
        lastname: Optional[str] = None,
    ) -> User:
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required")

        if self._find_by_email(email) is not None:
            raise ValidationError("Email already registered")

        normalized = normalize_role(role)
        if normalized is None:
            raise ValidationError("Invalid role")

        user = User(
            email=email,
            password_hash=generate_password_hash(password),
            role=normalized,
            firstname=firstname,
            lastname=lastname,
        )
        self._session.add(user)
        self._session.commit()
        logger.info("Registered user", extra={"user_id": user.id})
        return user

    def login(self, *, email: Optional[str], password: Optional[str]) -> tuple[str, User]:
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self._find_by_email(email)
        if user is None or not check_password_hash(user.password_hash, password):
            raise AuthenticationError("Invalid credentials")

        token = self._tokens.issue(user)
        logger.info("User logged in", extra={"user_id": user.id})
        return token, user

    def profile(self, context: AuthContext) -> User:
        user = self._session.get(User, context.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _find_by_email(self, email: str) -> Optional[User]:
        return self._session.scalars(select(User).where(User.email == email)).first()
