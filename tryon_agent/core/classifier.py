"""Classifies generateContent responses into success, retryable or fatal."""

import json
from typing import Optional, Union

from pydantic import ValidationError

from ..models.gemini import GeminiResponse, InlineData
from ..models.schemas import Classification, GeneratedImage
from ..utils.errors import (
    ImageDecodeError,
    MalformedResponseError,
    NoImageInResponseError,
    RetryableHttpError,
    http_error_for_status,
)
from ..utils.images import base64_to_bytes, decode_image


def _first_inline_image(response: GeminiResponse) -> Optional[InlineData]:
    if not response.candidates:
        return None
    for part in response.candidates[0].content.parts:
        if part.inline_data is not None and part.inline_data.data:
            return part.inline_data
    return None


def classify_response(status_code: int, body: Union[bytes, str]) -> Classification:
    """
    Turn a transport outcome into Success, Retryable or Fatal.

    Pure: no I/O and no logging.

    Args:
        status_code: HTTP status code
        body: Raw response body

    Returns:
        Classification
    """
    if status_code != 200:
        error = http_error_for_status(status_code)
        if isinstance(error, RetryableHttpError):
            return Classification.retryable(error)
        return Classification.fatal(error)

    try:
        document = json.loads(body)
    except (ValueError, TypeError) as e:
        return Classification.fatal(MalformedResponseError(f"Response is not JSON: {e}"))

    try:
        response = GeminiResponse.model_validate(document)
    except ValidationError as e:
        return Classification.fatal(
            MalformedResponseError(f"Unexpected response structure: {e.error_count()} errors")
        )

    inline = _first_inline_image(response)
    if inline is None:
        return Classification.fatal(NoImageInResponseError("No image found in API response"))

    try:
        image_bytes = base64_to_bytes(inline.data)
        mime_type, width, height = decode_image(image_bytes)
    except ImageDecodeError as e:
        return Classification.fatal(e)

    return Classification.success(
        GeneratedImage(
            image_bytes=image_bytes,
            mime_type=inline.mime_type or mime_type,
            width=width,
            height=height,
        )
    )
