"""FastAPI dependencies resolving collaborators from ``app.state``."""

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.tryon_service import TryOnService
from ..models.schemas import UserSession
from ..providers.identity import IdentityProvider
from ..providers.supabase_storage import OutfitStore
from ..utils.errors import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)

UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


def get_tryon_service(request: Request) -> TryOnService:
    service = getattr(request.app.state, "tryon_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return service


def get_identity(service: TryOnService = Depends(get_tryon_service)) -> IdentityProvider:
    return service.identity


def get_store(service: TryOnService = Depends(get_tryon_service)) -> OutfitStore:
    return service.store


def bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def current_user(
    token: Optional[str] = Depends(bearer_token),
    identity: IdentityProvider = Depends(get_identity),
) -> Optional[UserSession]:
    """User behind this request's bearer token; None when there is no token."""
    if token is None:
        return None
    try:
        return await identity.verify(token)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e), headers=UNAUTHORIZED_HEADERS)


def require_user(user: Optional[UserSession] = Depends(current_user)) -> UserSession:
    if user is None:
        raise HTTPException(
            status_code=401, detail="You must be signed in.", headers=UNAUTHORIZED_HEADERS
        )
    return user
