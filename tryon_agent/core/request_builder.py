"""Builds generateContent requests from two photos and style parameters."""

from typing import List, Optional

from pydantic import BaseModel, ValidationError

from ..models.enums import ClothingState, ClothingType, FitStyle
from ..models.gemini import Content, GeminiRequest, GenerationConfig, InlineData, Part
from ..models.schemas import GenerationRequest
from ..utils.config import GenerationSettings
from ..utils.errors import EncodingError
from ..utils.images import bytes_to_base64, encode_jpeg
from ..utils.logger import get_logger

logger = get_logger(__name__)

JPEG_MIME_TYPE = "image/jpeg"

FIT_DESCRIPTIONS = {
    FitStyle.TIGHT: (
        "the clothing should hug the body closely, showing the body's contours "
        "and silhouette. Minimal fabric bunching or looseness."
    ),
    FitStyle.REGULAR: (
        "the clothing should fit comfortably with a standard amount of room. "
        "Not too tight, not too loose - just right for everyday wear."
    ),
    FitStyle.RELAXED: (
        "the clothing should be loose and comfortable with extra room throughout. "
        "The fabric should drape naturally with some slack."
    ),
    FitStyle.OVERSIZE: (
        "the clothing should be significantly oversized with plenty of extra fabric. "
        "Think street style - loose, baggy, and intentionally large. "
        "The garment should hang well past normal fitting points."
    ),
}


def fit_description(fit_style: FitStyle) -> str:
    return FIT_DESCRIPTIONS[fit_style]


def state_directive(clothing_type: ClothingType, clothing_state: ClothingState) -> Optional[str]:
    """Open/closed sentence for the prompt, or None if the garment has no state."""
    if not clothing_type.supports_open_closed:
        return None

    fastening = "zipped" if clothing_type.is_zippered else "buttoned"

    if clothing_state == ClothingState.CLOSED:
        return f"The garment should be fully {fastening} up and closed."
    return f"The garment should be un{fastening} and open, showing what's underneath."


def build_prompt(
    clothing_type: ClothingType,
    fit_style: FitStyle,
    clothing_state: ClothingState,
) -> str:
    """
    Synthesize the instruction text for a composition.

    The text is a pure function of its arguments.
    """
    garment = clothing_type.value.lower()
    fit = fit_style.value.lower()
    description = fit_description(fit_style)
    directive = state_directive(clothing_type, clothing_state)

    header = [
        f"Create a photorealistic image showing the person from the first image "
        f"wearing the {garment} from the second image.",
        "",
        f"Clothing Type: {clothing_type.value}",
        f"Fit Style: {fit_style.value}",
    ]
    if directive is not None:
        header.append(f"State: {clothing_state.value}")

    steps = [
        "Analyze the person's body position, lighting, and proportions in the first image",
        f"Take the {garment} from the second image and fit it onto the person",
        f"Apply a {fit} fit: {description}",
    ]
    if directive is not None:
        steps.append(directive)
    steps.extend([
        "Adjust the clothing's size, perspective, and lighting to match the person's photo",
        "Ensure the clothing drapes and fits according to the specified fit style",
        "Maintain the original background and lighting of the person's photo",
        "Generate a high-quality, photorealistic composite image",
    ])

    lines = header + ["", "Instructions:"]
    lines += [f"{number}. {step}" for number, step in enumerate(steps, start=1)]
    lines += [
        "",
        f"Important: The fit should be {fit} - {description}",
        "",
        "Return only the final composite image showing the person wearing the clothing.",
    ]
    return "\n".join(lines)


class BuiltRequest(BaseModel):
    """A serialized request ready for dispatch."""
    payload: GeminiRequest
    body: bytes
    prompt: str
    person_image_bytes: int
    clothing_image_bytes: int


class RequestBuilder:
    """Turns a GenerationRequest into a generateContent body."""

    def __init__(self, settings: Optional[GenerationSettings] = None):
        self.settings = settings or GenerationSettings()

    def _encode(self, image_bytes: bytes, role: str) -> bytes:
        try:
            encoded = encode_jpeg(image_bytes, self.settings.compression_quality)
        except EncodingError as e:
            raise EncodingError(f"{role} image: {e}")

        if len(encoded) > self.settings.max_image_bytes:
            raise EncodingError(
                f"{role} image is {len(encoded)} bytes after compression, "
                f"limit is {self.settings.max_image_bytes}"
            )
        return encoded

    def generation_config(self) -> GenerationConfig:
        return GenerationConfig(
            temperature=self.settings.temperature,
            top_k=self.settings.top_k,
            top_p=self.settings.top_p,
            max_output_tokens=self.settings.max_output_tokens,
        )

    def build(self, request: GenerationRequest) -> BuiltRequest:
        """
        Build and serialize the request.

        Args:
            request: Photos and style parameters

        Returns:
            BuiltRequest holding the payload model and its JSON body

        Raises:
            EncodingError: If an image cannot be encoded or the body cannot
                be serialized
        """
        person_jpeg = self._encode(request.person_image, "person")
        clothing_jpeg = self._encode(request.clothing_image, "clothing")

        prompt = build_prompt(request.clothing_type, request.fit_style, request.clothing_state)

        parts: List[Part] = [
            Part(text=prompt),
            Part(inline_data=InlineData(mime_type=JPEG_MIME_TYPE, data=bytes_to_base64(person_jpeg))),
            Part(inline_data=InlineData(mime_type=JPEG_MIME_TYPE, data=bytes_to_base64(clothing_jpeg))),
        ]

        try:
            payload = GeminiRequest(
                contents=[Content(parts=parts)],
                generation_config=self.generation_config(),
            )
            body = payload.to_json_bytes()
        except (ValidationError, ValueError, TypeError) as e:
            raise EncodingError(f"Failed to serialize request: {e}")

        logger.debug(
            "Built composition request",
            extra={
                "clothing_type": request.clothing_type.value,
                "fit_style": request.fit_style.value,
                "person_image_kb": len(person_jpeg) / 1024,
                "clothing_image_kb": len(clothing_jpeg) / 1024,
                "body_kb": len(body) / 1024,
            }
        )

        return BuiltRequest(
            payload=payload,
            body=body,
            prompt=prompt,
            person_image_bytes=len(person_jpeg),
            clothing_image_bytes=len(clothing_jpeg),
        )
