"""
Supabase persistence for accepted try-on images and the token ledger.

Handles:
- Uploading result images to object storage
- Outfit records (``outfits`` table)
- Reward tokens (``tokens`` table)

Environment variables:
- SUPABASE_URL
- SUPABASE_ANON_KEY
- SUPABASE_BUCKET
"""

import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from supabase import create_client

from ..models.enums import ClothingState, ClothingType, FitStyle, TokenType
from ..models.schemas import OutfitRecord, TokenRecord
from ..utils.errors import ConfigurationError, StorageError
from ..utils.logger import get_logger

logger = get_logger(__name__)

OUTFITS_TABLE = "outfits"
TOKENS_TABLE = "tokens"


def create_supabase_client(url: Optional[str], key: Optional[str]) -> Any:
    """
    Create a Supabase client.

    Raises:
        ConfigurationError: If URL or key is missing
    """
    if not url or not key:
        raise ConfigurationError("Supabase not configured (SUPABASE_URL or SUPABASE_ANON_KEY missing)")

    client = create_client(url, key)
    logger.info("Supabase client initialized successfully")
    return client


class OutfitStore(ABC):
    """Persistence contract used by the try-on service and the API."""

    @abstractmethod
    def upload_image(self, image_bytes: bytes, user_id: str, content_type: str = "image/jpeg") -> str:
        pass

    @abstractmethod
    def save_outfit_record(
        self,
        user_id: str,
        image_url: str,
        clothing_type: ClothingType,
        fit_style: FitStyle,
        clothing_state: ClothingState,
    ) -> OutfitRecord:
        pass

    @abstractmethod
    def list_outfits(self, user_id: str) -> List[OutfitRecord]:
        pass

    @abstractmethod
    def delete_outfit(self, outfit_id: str) -> None:
        pass

    @abstractmethod
    def list_tokens(self, user_id: str) -> List[TokenRecord]:
        pass

    @abstractmethod
    def add_token(
        self,
        user_id: str,
        name: str,
        value: float,
        token_type: TokenType,
        description: Optional[str] = None,
    ) -> TokenRecord:
        pass


def total_token_value(tokens: Iterable[TokenRecord]) -> float:
    """Sum of token values."""
    return sum(token.token_value for token in tokens)


def tokens_by_type(tokens: Iterable[TokenRecord]) -> Dict[str, List[TokenRecord]]:
    """Group tokens by their type, keeping input order within each group."""
    grouped: Dict[str, List[TokenRecord]] = defaultdict(list)
    for token in tokens:
        grouped[token.token_type].append(token)
    return dict(grouped)


class SupabaseStorage(OutfitStore):
    """
    OutfitStore backed by Supabase storage and Postgres tables.

    Every failure raises StorageError; nothing is retried here.
    """

    def __init__(self, client: Any, bucket: str = "try-on-images"):
        """
        Args:
            client: A ``supabase.Client``
            bucket: Storage bucket for result images
        """
        self._client = client
        self.bucket = bucket

    # ==================== IMAGES ====================

    def upload_image(self, image_bytes: bytes, user_id: str, content_type: str = "image/jpeg") -> str:
        """
        Upload an image under the user's folder.

        Returns:
            Public URL of the stored object
        """
        extension = "png" if content_type == "image/png" else "jpg"
        path = f"{user_id}/{uuid.uuid4()}.{extension}"

        try:
            bucket = self._client.storage.from_(self.bucket)
            bucket.upload(path, image_bytes, {"content-type": content_type})
            url = bucket.get_public_url(path)
        except Exception as e:
            logger.error(f"Failed to upload image: {e}", extra={"user_id": user_id, "path": path})
            raise StorageError(f"Failed to upload image: {e}") from e

        logger.info(
            "Uploaded try-on image",
            extra={"user_id": user_id, "path": path, "size_kb": len(image_bytes) / 1024}
        )
        return url

    # ==================== OUTFITS ====================

    def save_outfit_record(
        self,
        user_id: str,
        image_url: str,
        clothing_type: ClothingType,
        fit_style: FitStyle,
        clothing_state: ClothingState,
    ) -> OutfitRecord:
        """Insert an outfit row and return it as stored."""
        row = {
            "user_id": user_id,
            "image_url": image_url,
            "clothing_type": clothing_type.value,
            "fit_style": fit_style.value,
            "clothing_state": clothing_state.value,
        }

        try:
            result = self._client.table(OUTFITS_TABLE).insert(row).execute()
        except Exception as e:
            raise StorageError(f"Failed to save outfit: {e}") from e

        if not result.data:
            raise StorageError("Failed to save outfit: no row returned")

        logger.info("Saved outfit record", extra={"user_id": user_id})
        return OutfitRecord(**result.data[0])

    def list_outfits(self, user_id: str) -> List[OutfitRecord]:
        """Outfits for a user, newest first."""
        try:
            result = self._client.table(OUTFITS_TABLE)\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise StorageError(f"Failed to fetch outfits: {e}") from e

        return [OutfitRecord(**row) for row in result.data or []]

    def delete_outfit(self, outfit_id: str) -> None:
        try:
            self._client.table(OUTFITS_TABLE)\
                .delete()\
                .eq("id", outfit_id)\
                .execute()
        except Exception as e:
            raise StorageError(f"Failed to delete outfit {outfit_id}: {e}") from e

        logger.info("Deleted outfit record", extra={"outfit_id": outfit_id})

    # ==================== TOKENS ====================

    def list_tokens(self, user_id: str) -> List[TokenRecord]:
        """Tokens for a user, most recently earned first."""
        try:
            result = self._client.table(TOKENS_TABLE)\
                .select("*")\
                .eq("user_id", user_id)\
                .order("earned_date", desc=True)\
                .execute()
        except Exception as e:
            raise StorageError(f"Failed to fetch tokens: {e}") from e

        return [TokenRecord(**row) for row in result.data or []]

    def add_token(
        self,
        user_id: str,
        name: str,
        value: float,
        token_type: TokenType,
        description: Optional[str] = None,
    ) -> TokenRecord:
        row = {
            "user_id": user_id,
            "token_name": name,
            "token_value": float(value),
            "token_type": TokenType(token_type).value,
            "description": description or "",
        }

        try:
            result = self._client.table(TOKENS_TABLE).insert(row).execute()
        except Exception as e:
            raise StorageError(f"Failed to add token: {e}") from e

        if not result.data:
            raise StorageError("Failed to add token: no row returned")

        logger.info(
            "Added token",
            extra={"user_id": user_id, "token_type": row["token_type"], "value": row["token_value"]}
        )
        return TokenRecord(**result.data[0])
