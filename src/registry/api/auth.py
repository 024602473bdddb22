# src/registry/api/auth.py
from fastapi import APIRouter, Depends

from src.registry.core.security import AdminClaims
from src.registry.deps.auth import get_token_claims
from src.registry.deps.services import get_auth_service
from src.registry.schemas.admin import LoginRequest, PasswordChangeRequest, TokenResponse
from src.registry.services.auth import AuthService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=TokenResponse)
async def login_admin(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    token = await auth.login(body.username, body.password)
    return TokenResponse(token=token)


# reachable while the provisioning password is still active
@router.post("/password", response_model=TokenResponse)
async def change_password(
    body: PasswordChangeRequest,
    claims: AdminClaims = Depends(get_token_claims),
    auth: AuthService = Depends(get_auth_service),
):
    token = await auth.change_password(claims, body.current_password, body.new_password)
    return TokenResponse(token=token)
