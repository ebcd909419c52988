"""Sign-in, sign-up and session endpoints.

Sign-in hands back an access token; every other route reads it from the
``Authorization: Bearer`` header. The server keeps no session of its own.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from .dependencies import UNAUTHORIZED_HEADERS, bearer_token, get_identity, require_user
from ..models.schemas import UserSession
from ..providers.identity import IdentityProvider
from ..utils.errors import AuthenticationError

router = APIRouter()


class Credentials(BaseModel):
    email: str
    password: str


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSession


def _issued(user: UserSession) -> AccessToken:
    if not user.access_token:
        raise HTTPException(status_code=502, detail="Identity service returned no access token")
    return AccessToken(access_token=user.access_token, user=user)


@router.post("/sign-in", response_model=AccessToken)
async def sign_in(credentials: Credentials, identity: IdentityProvider = Depends(get_identity)):
    try:
        user = await identity.sign_in(credentials.email, credentials.password, remember=False)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return _issued(user)


@router.post("/sign-up", response_model=AccessToken, status_code=201)
async def sign_up(credentials: Credentials, identity: IdentityProvider = Depends(get_identity)):
    try:
        user = await identity.sign_up(credentials.email, credentials.password, remember=False)
    except AuthenticationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _issued(user)


@router.post("/sign-out", status_code=204)
async def sign_out(
    token: Optional[str] = Depends(bearer_token),
    identity: IdentityProvider = Depends(get_identity),
):
    if token is None:
        raise HTTPException(status_code=401, detail="You must be signed in.", headers=UNAUTHORIZED_HEADERS)
    try:
        await identity.sign_out(token)
    except AuthenticationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/me", response_model=UserSession)
async def me(user: UserSession = Depends(require_user)):
    return user
