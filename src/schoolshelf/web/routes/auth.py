"""Authentication endpoints."""

from fastapi import APIRouter, Depends

from schoolshelf.core.auth_service import AuthService
from schoolshelf.core.models import UserRecord
from schoolshelf.core.security import TokenClaims
from schoolshelf.web.deps import get_auth_service, require_auth
from schoolshelf.web.schemas import LoginRequest, LoginResponse, MessageResponse, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> LoginResponse:
    """Exchange email and password for a bearer token."""
    result = auth.login(body.email, body.password)
    return LoginResponse(token=result.token, user=UserResponse.model_validate(result.user))


@router.post("/logout", response_model=MessageResponse)
def logout() -> MessageResponse:
    """Tokens are stateless; the client discards its token."""
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def me(
    claims: TokenClaims = Depends(require_auth),
    auth: AuthService = Depends(get_auth_service),
) -> UserRecord:
    return auth.get_current_user(claims)
