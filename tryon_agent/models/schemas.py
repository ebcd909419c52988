"""Pydantic schemas for data validation."""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone

from .enums import AttemptState, ClothingState, ClothingType, FitStyle, Outcome
from ..utils.errors import GenerationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerationRequest(BaseModel):
    """One composition request: two photos and the style parameters."""
    person_image: bytes
    clothing_image: bytes
    clothing_type: ClothingType
    fit_style: FitStyle = FitStyle.REGULAR
    clothing_state: ClothingState = ClothingState.CLOSED

    @field_validator("person_image", "clothing_image")
    @classmethod
    def _not_empty(cls, value: bytes) -> bytes:
        if not value:
            raise ValueError("image must not be empty")
        return value

    @property
    def effective_state(self) -> Optional[ClothingState]:
        """Open/closed state, or None when the garment has no such state."""
        if self.clothing_type.supports_open_closed:
            return self.clothing_state
        return None


class GeneratedImage(BaseModel):
    """Decoded output image."""
    image_bytes: bytes
    mime_type: str
    width: int
    height: int


class GenerationAttempt(BaseModel):
    """Bookkeeping for a single try."""
    attempt_number: int = Field(..., ge=1)
    backoff_delay: float
    status_code: Optional[int] = None
    outcome: Optional[Outcome] = None
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=_utcnow)


class Classification(BaseModel):
    """Outcome of classifying one transport response."""
    outcome: Outcome
    image: Optional[GeneratedImage] = None
    error: Optional[GenerationError] = None

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def success(cls, image: GeneratedImage) -> "Classification":
        return cls(outcome=Outcome.SUCCESS, image=image)

    @classmethod
    def retryable(cls, error: GenerationError) -> "Classification":
        return cls(outcome=Outcome.RETRYABLE, error=error)

    @classmethod
    def fatal(cls, error: GenerationError) -> "Classification":
        return cls(outcome=Outcome.FATAL, error=error)


class GenerationResult(BaseModel):
    """Terminal outcome of one orchestration."""
    state: AttemptState
    image: Optional[GeneratedImage] = None
    error: Optional[GenerationError] = None
    attempts: List[GenerationAttempt] = Field(default_factory=list)
    total_backoff_seconds: float = 0.0

    class Config:
        arbitrary_types_allowed = True

    @property
    def succeeded(self) -> bool:
        return self.state == AttemptState.SUCCEEDED

    @property
    def cancelled(self) -> bool:
        return self.state == AttemptState.CANCELLED

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    def unwrap(self) -> GeneratedImage:
        """Return the image or raise the classified error."""
        if self.image is not None:
            return self.image
        raise self.error


class UserMessage(BaseModel):
    """Human-readable rendering of an error."""
    message: str
    retry_suggested: bool = False


class UserSession(BaseModel):
    """Signed-in user as seen by the identity provider."""
    user_id: str
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    access_token: Optional[str] = Field(default=None, exclude=True, repr=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class OutfitRecord(BaseModel):
    """Saved try-on result."""
    id: str
    user_id: str
    image_url: str
    clothing_type: ClothingType
    fit_style: FitStyle
    clothing_state: ClothingState
    created_at: Optional[datetime] = None


class TokenRecord(BaseModel):
    """One entry in a user's reward ledger."""
    id: str
    user_id: str
    token_name: str
    token_value: float
    token_type: str
    description: Optional[str] = None
    earned_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
