"""Try-on endpoint."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from .dependencies import current_user, get_tryon_service
from ..core.tryon_service import TryOnService, describe_error
from ..models.enums import ClothingState, ClothingType, FitStyle
from ..models.schemas import GenerationAttempt, GenerationResult, OutfitRecord, UserSession
from ..utils.errors import (
    AuthenticationError,
    Cancelled,
    EncodingError,
    RetryableHttpError,
    StorageError,
)
from ..utils.images import bytes_to_base64
from ..utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Non-standard "client closed request"
STATUS_CLIENT_CLOSED = 499


class TryOnResponse(BaseModel):
    """Successful composition."""
    status: str
    image_base64: str
    mime_type: str
    width: int
    height: int
    attempts: List[GenerationAttempt]
    backoff_seconds: float
    outfit: Optional[OutfitRecord] = None
    save_error: Optional[str] = None


def _status_for(result: GenerationResult) -> int:
    error = result.error
    if isinstance(error, Cancelled):
        return STATUS_CLIENT_CLOSED
    if isinstance(error, RetryableHttpError):
        return 503
    if isinstance(error, EncodingError):
        return 422
    return 502


def _error_detail(result: GenerationResult) -> dict:
    message = describe_error(result.error)
    return {
        "status": result.state.value,
        "error": type(result.error).__name__,
        "message": message.message if message else None,
        "retry_suggested": message.retry_suggested if message else False,
        "attempts": result.attempt_count,
    }


@router.post("", response_model=TryOnResponse)
async def try_on(
    person_image: UploadFile = File(...),
    clothing_image: UploadFile = File(...),
    clothing_type: ClothingType = Form(...),
    fit_style: FitStyle = Form(FitStyle.REGULAR),
    clothing_state: ClothingState = Form(ClothingState.CLOSED),
    keep: bool = Form(False),
    service: TryOnService = Depends(get_tryon_service),
    user: Optional[UserSession] = Depends(current_user),
):
    """
    Compose the clothing photo onto the person photo.

    With ``keep`` set, the result is also uploaded and recorded for the
    user behind the bearer token. A failed save does not discard the
    generated image.
    """
    person_bytes = await person_image.read()
    clothing_bytes = await clothing_image.read()

    result = await service.try_on(
        person_image=person_bytes,
        clothing_image=clothing_bytes,
        clothing_type=clothing_type,
        fit_style=fit_style,
        clothing_state=clothing_state,
    )

    if not result.succeeded:
        raise HTTPException(status_code=_status_for(result), detail=_error_detail(result))

    outfit = None
    save_error = None
    if keep and user is None:
        save_error = describe_error(AuthenticationError("No access token on request")).message
    elif keep:
        try:
            outfit = await service.keep_result(
                result, clothing_type, fit_style, clothing_state, user=user
            )
        except (AuthenticationError, StorageError) as e:
            save_error = describe_error(e).message
            logger.warning(
                "Generated image not saved",
                extra={"error_type": type(e).__name__, "error": str(e)}
            )

    image = result.image
    return TryOnResponse(
        status=result.state.value,
        image_base64=bytes_to_base64(image.image_bytes),
        mime_type=image.mime_type,
        width=image.width,
        height=image.height,
        attempts=result.attempts,
        backoff_seconds=result.total_backoff_seconds,
        outfit=outfit,
        save_error=save_error,
    )
