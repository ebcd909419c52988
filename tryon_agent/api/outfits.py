"""Saved outfits and token ledger endpoints for the signed-in user."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from .dependencies import get_store, require_user
from ..models.enums import TokenType
from ..models.schemas import OutfitRecord, TokenRecord, UserSession
from ..providers.supabase_storage import OutfitStore, tokens_by_type, total_token_value
from ..utils.errors import StorageError
from ..utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


class TokenLedger(BaseModel):
    tokens: List[TokenRecord]
    total_value: float
    by_type: Dict[str, int]


class NewToken(BaseModel):
    token_name: str
    token_value: float
    token_type: TokenType = TokenType.OTHER
    description: Optional[str] = None


def _storage_failure(e: StorageError) -> HTTPException:
    logger.error("Storage request failed", extra={"error": str(e)})
    return HTTPException(status_code=502, detail=str(e))


@router.get("/outfits", response_model=List[OutfitRecord])
async def list_outfits(
    user: UserSession = Depends(require_user),
    store: OutfitStore = Depends(get_store),
):
    try:
        return await run_in_threadpool(store.list_outfits, user.user_id)
    except StorageError as e:
        raise _storage_failure(e)


@router.delete("/outfits/{outfit_id}", status_code=204)
async def delete_outfit(
    outfit_id: str,
    user: UserSession = Depends(require_user),
    store: OutfitStore = Depends(get_store),
):
    try:
        outfits = await run_in_threadpool(store.list_outfits, user.user_id)
        if not any(outfit.id == outfit_id for outfit in outfits):
            raise HTTPException(status_code=404, detail="Outfit not found")
        await run_in_threadpool(store.delete_outfit, outfit_id)
    except StorageError as e:
        raise _storage_failure(e)


@router.get("/tokens", response_model=TokenLedger)
async def list_tokens(
    user: UserSession = Depends(require_user),
    store: OutfitStore = Depends(get_store),
):
    try:
        tokens = await run_in_threadpool(store.list_tokens, user.user_id)
    except StorageError as e:
        raise _storage_failure(e)

    return TokenLedger(
        tokens=tokens,
        total_value=total_token_value(tokens),
        by_type={token_type: len(group) for token_type, group in tokens_by_type(tokens).items()},
    )


@router.post("/tokens", response_model=TokenRecord, status_code=201)
async def add_token(
    token: NewToken,
    user: UserSession = Depends(require_user),
    store: OutfitStore = Depends(get_store),
):
    try:
        return await run_in_threadpool(
            store.add_token,
            user.user_id,
            token.token_name,
            token.token_value,
            token.token_type,
            token.description,
        )
    except StorageError as e:
        raise _storage_failure(e)
