"""Caller-side try-on flow: compose, keep the result, describe failures."""

import asyncio
from typing import Optional

from .orchestrator import Orchestrator
from ..models.enums import ClothingState, ClothingType, FitStyle
from ..models.schemas import GenerationResult, OutfitRecord, UserMessage, UserSession
from ..providers.identity import IdentityProvider
from ..providers.supabase_storage import OutfitStore
from ..utils.errors import (
    AuthenticationError,
    Cancelled,
    GenerationError,
    StorageError,
    TryOnAgentError,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def describe_error(error: Exception) -> Optional[UserMessage]:
    """
    Translate an error into text for people.

    Returns:
        UserMessage, or None when nothing should be shown (cancellation)
    """
    if isinstance(error, Cancelled):
        return None
    if isinstance(error, GenerationError):
        return UserMessage(message=error.user_message, retry_suggested=error.retry_suggested)
    if isinstance(error, AuthenticationError):
        return UserMessage(message="You must be signed in to save photos to the cloud.")
    if isinstance(error, StorageError):
        return UserMessage(message=f"Failed to save to cloud: {error}", retry_suggested=True)
    if isinstance(error, TryOnAgentError):
        return UserMessage(message=str(error))
    return UserMessage(message="Something went wrong. Please try again.", retry_suggested=True)


class TryOnService:
    """Wires the orchestrator to the identity provider and outfit store."""

    def __init__(
        self,
        orchestrator: Orchestrator,
        identity: IdentityProvider,
        store: OutfitStore,
    ):
        self.orchestrator = orchestrator
        self.identity = identity
        self.store = store

    async def try_on(
        self,
        person_image: bytes,
        clothing_image: bytes,
        clothing_type: ClothingType,
        fit_style: FitStyle,
        clothing_state: ClothingState,
    ) -> GenerationResult:
        return await self.orchestrator.compose(
            person_image=person_image,
            clothing_image=clothing_image,
            clothing_type=clothing_type,
            fit_style=fit_style,
            clothing_state=clothing_state,
        )

    async def keep_result(
        self,
        result: GenerationResult,
        clothing_type: ClothingType,
        fit_style: FitStyle,
        clothing_state: ClothingState,
        user: Optional[UserSession] = None,
    ) -> OutfitRecord:
        """
        Upload an accepted image and record the outfit.

        Args:
            user: Owner of the outfit; defaults to the identity's remembered user

        Raises:
            AuthenticationError: If no user is given and nobody is signed in
            GenerationError: If the result holds no image
            StorageError: If upload or insert fails
        """
        if user is None:
            user = self.identity.require_user()
        image = result.unwrap()

        url = await asyncio.to_thread(
            self.store.upload_image, image.image_bytes, user.user_id, image.mime_type
        )
        record = await asyncio.to_thread(
            self.store.save_outfit_record,
            user.user_id,
            url,
            clothing_type,
            fit_style,
            clothing_state,
        )

        logger.info(
            "Try-on result kept",
            extra={"user_id": user.user_id, "outfit_id": record.id}
        )
        return record
