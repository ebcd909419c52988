"""Wire models for the Gemini generateContent endpoint."""

from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field


class InlineData(BaseModel):
    """Base64 image embedded in a part."""
    mime_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("mime_type", "mimeType"),
    )
    data: str


class Part(BaseModel):
    """Request part: either text or an inline image."""
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None


class Content(BaseModel):
    parts: List[Part]


class GenerationConfig(BaseModel):
    """Sampling parameters, serialized with the API's camelCase names."""
    temperature: float
    top_k: int = Field(..., serialization_alias="topK")
    top_p: float = Field(..., serialization_alias="topP")
    max_output_tokens: int = Field(..., serialization_alias="maxOutputTokens")


class GeminiRequest(BaseModel):
    contents: List[Content]
    generation_config: GenerationConfig = Field(..., serialization_alias="generationConfig")

    def to_json_bytes(self) -> bytes:
        """Serialize to the exact body sent over the wire."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


class ResponsePart(BaseModel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = Field(
        default=None,
        validation_alias=AliasChoices("inline_data", "inlineData"),
    )


class ResponseContent(BaseModel):
    parts: List[ResponsePart] = Field(default_factory=list)


class Candidate(BaseModel):
    content: ResponseContent


class GeminiResponse(BaseModel):
    candidates: List[Candidate]
