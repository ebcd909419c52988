"""Custom exception classes for the try-on agent."""

from typing import Optional


RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


class TryOnAgentError(Exception):
    """Base exception for all agent errors."""
    pass


class ConfigurationError(TryOnAgentError):
    """Configuration or initialization errors."""
    pass


class AuthenticationError(TryOnAgentError):
    """Sign-in, sign-up or session errors."""
    pass


class StorageError(TryOnAgentError):
    """Object storage or table errors."""
    pass


class GenerationError(TryOnAgentError):
    """Base class for composition errors.

    ``user_message`` is the text a caller shows to people;
    ``retry_suggested`` tells it whether to offer a manual retry.
    """

    user_message: Optional[str] = "Something went wrong while creating your try-on."
    retry_suggested: bool = False


class EncodingError(GenerationError):
    """Image could not be compressed or request could not be serialized."""

    user_message = "Failed to process images. Try a different photo."


class TransportError(GenerationError):
    """Connectivity, TLS or timeout failure talking to the generation API."""

    user_message = "Could not reach the try-on service. Check your connection."


class HttpStatusError(GenerationError):
    """Non-200 response from the generation API."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"HTTP error: {status_code}")


class RetryableHttpError(HttpStatusError):
    """Transient server-side status (rate limit, temporary unavailability)."""

    retry_suggested = True

    @property
    def user_message(self) -> str:
        if self.status_code == 429:
            return "Too many requests. Please wait a moment and try again."
        if self.status_code == 503:
            return "Service temporarily unavailable. Please try again in a moment."
        return "Server temporarily unavailable. Please try again."


class FatalHttpError(HttpStatusError):
    """Any other non-200 status; resubmitting will fail the same way."""

    @property
    def user_message(self) -> str:
        if self.status_code == 400:
            return "The try-on request was rejected by the service."
        if self.status_code in (401, 403):
            return "The try-on service refused our credentials."
        return f"The try-on service failed (HTTP {self.status_code})."


class MalformedResponseError(GenerationError):
    """200 response whose body does not have the expected structure."""

    user_message = "Failed to read the response from the try-on service."


class NoImageInResponseError(GenerationError):
    """Well-formed response without a usable inline image."""

    user_message = "The try-on service did not return an image. Try different photos."


class ImageDecodeError(GenerationError):
    """Inline image payload is not valid base64 or not a valid image."""

    user_message = "Failed to decode the generated image."


class Cancelled(GenerationError):
    """Caller abandoned the composition at a suspension point."""

    user_message = None


def http_error_for_status(status_code: int, message: Optional[str] = None) -> HttpStatusError:
    """Build the retryable or fatal error matching a non-200 status code."""
    if status_code in RETRYABLE_STATUS_CODES:
        return RetryableHttpError(status_code, message)
    return FatalHttpError(status_code, message)
