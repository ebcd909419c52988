"""Enumerations for the try-on agent."""

from enum import Enum


class ClothingType(str, Enum):
    """Kind of garment in the clothing photo."""
    T_SHIRT = "T-Shirt"
    SHIRT = "Shirt"
    HOODIE = "Hoodie"
    JACKET = "Jacket"
    SWEATER = "Sweater"
    DRESS = "Dress"
    PANTS = "Pants"
    SHORTS = "Shorts"
    SKIRT = "Skirt"

    @property
    def supports_open_closed(self) -> bool:
        return self in (
            ClothingType.JACKET,
            ClothingType.HOODIE,
            ClothingType.SHIRT,
            ClothingType.DRESS,
        )

    @property
    def is_zippered(self) -> bool:
        return self in (ClothingType.JACKET, ClothingType.HOODIE)


class FitStyle(str, Enum):
    """How tightly the garment should sit on the body."""
    TIGHT = "Tight"
    REGULAR = "Regular"
    RELAXED = "Relaxed"
    OVERSIZE = "Oversize"


class ClothingState(str, Enum):
    """Whether a fastenable garment is worn open or closed."""
    OPEN = "Open"
    CLOSED = "Closed"


class AttemptState(str, Enum):
    """State of the retry controller."""
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


class Outcome(str, Enum):
    """Classification of one response."""
    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"


class TokenType(str, Enum):
    """Kinds of reward tokens in the ledger."""
    STYLE = "style"
    PHOTO = "photo"
    DAILY = "daily"
    ACHIEVEMENT = "achievement"
    SOCIAL = "social"
    OTHER = "other"
