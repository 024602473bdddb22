# src/registry/services/auth.py
import logging

from src.registry.core.errors import AuthError, ValidationError
from src.registry.core.security import AdminClaims, CredentialService
from src.registry.core.store import RegistryStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Admin login and password rotation."""

    def __init__(self, store: RegistryStore, credentials: CredentialService):
        self._store = store
        self._credentials = credentials

    async def login(self, username: str, password: str) -> str:
        admin = await self._store.get_admin(username) if username else None
        if admin is None:
            # same cost as a real check, unknown users are indistinguishable
            self._credentials.dummy_verify()
            logger.warning("Failed admin login", extra={"username": username})
            raise AuthError(INVALID_CREDENTIALS, code="invalid_credentials")
        if not self._credentials.verify_password(password or "", admin.password_hash):
            logger.warning("Failed admin login", extra={"username": username})
            raise AuthError(INVALID_CREDENTIALS, code="invalid_credentials")

        logger.info("Admin %s logged in", admin.username, extra={"username": admin.username})
        return self._credentials.issue_token(
            admin.id,
            admin.username,
            password_change_required=admin.must_change_password,
        )

    async def change_password(self, claims: AdminClaims, current_password: str, new_password: str) -> str:
        admin = await self._store.get_admin(claims.username)
        if admin is None or admin.id != claims.admin_id:
            raise AuthError()
        if not self._credentials.verify_password(current_password or "", admin.password_hash):
            raise AuthError(INVALID_CREDENTIALS, code="invalid_credentials")
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                fields={"newPassword": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}
            )
        if new_password == current_password:
            raise ValidationError(fields={"newPassword": "New password must differ from the current one"})

        await self._store.update_admin_password(admin.id, self._credentials.hash_password(new_password))
        logger.info("Admin %s rotated password", admin.username, extra={"username": admin.username})
        return self._credentials.issue_token(admin.id, admin.username)
