# src/registry/core/security.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from jose import jwt, JWTError
from passlib.context import CryptContext

from src.registry.core.config import Settings
from src.registry.core.errors import AuthError


@dataclass(frozen=True)
class AdminClaims:
    """Verified contents of an admin session token."""

    admin_id: int
    username: str
    issued_at: datetime
    expires_at: datetime
    password_change_required: bool = False


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CredentialService:
    """Password hashing and stateless session tokens for the admin account."""

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        expire_minutes: int = 60 * 8,
        bcrypt_rounds: int = 12,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_delta = timedelta(minutes=expire_minutes)
        self._pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialService":
        return cls(
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )

    # Password
    def hash_password(self, password: str) -> str:
        return self._pwd_context.hash(password)

    def verify_password(self, password: str, hashed: str) -> bool:
        try:
            return self._pwd_context.verify(password, hashed)
        except (ValueError, TypeError):
            # unknown or corrupt hash format
            return False

    def dummy_verify(self) -> None:
        self._pwd_context.dummy_verify()

    # Tokens
    def issue_token(
        self,
        admin_id: int,
        username: str,
        *,
        password_change_required: bool = False,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        iat = _now()
        exp = iat + (expires_delta if expires_delta is not None else self._expire_delta)
        payload = {
            "sub": str(admin_id),
            "username": username,
            "jti": str(uuid4()),
            "iat": int(iat.timestamp()),
            "exp": int(exp.timestamp()),
            "pwd_change": password_change_required,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify_token(self, token: Optional[str]) -> AdminClaims:
        if not token:
            raise AuthError()
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            raise AuthError() from exc

        sub = payload.get("sub")
        username = payload.get("username")
        if not sub or not username or "exp" not in payload:
            raise AuthError()
        try:
            admin_id = int(sub)
        except ValueError as exc:
            raise AuthError() from exc

        return AdminClaims(
            admin_id=admin_id,
            username=username,
            issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            password_change_required=bool(payload.get("pwd_change", False)),
        )
