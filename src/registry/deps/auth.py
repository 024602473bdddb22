#src.registry.deps.auth.py

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.registry.core.errors import AuthError, PasswordChangeRequired
from src.registry.core.security import AdminClaims, CredentialService

bearer_scheme = HTTPBearer(auto_error=False)


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credentials


async def get_token_claims(
    auth: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    credentials: CredentialService = Depends(get_credential_service),
) -> AdminClaims:
    if auth is None:
        raise AuthError()
    return credentials.verify_token(auth.credentials)


async def get_current_admin(claims: AdminClaims = Depends(get_token_claims)) -> AdminClaims:
    if claims.password_change_required:
        raise PasswordChangeRequired()
    return claims
