"""Data models and schemas for the try-on agent."""

from .schemas import (
    GenerationRequest,
    GeneratedImage,
    GenerationAttempt,
    Classification,
    GenerationResult,
    UserMessage,
    UserSession,
    OutfitRecord,
    TokenRecord,
)
from .enums import (
    ClothingType,
    FitStyle,
    ClothingState,
    AttemptState,
    Outcome,
    TokenType,
)

__all__ = [
    "GenerationRequest",
    "GeneratedImage",
    "GenerationAttempt",
    "Classification",
    "GenerationResult",
    "UserMessage",
    "UserSession",
    "OutfitRecord",
    "TokenRecord",
    "ClothingType",
    "FitStyle",
    "ClothingState",
    "AttemptState",
    "Outcome",
    "TokenType",
]
