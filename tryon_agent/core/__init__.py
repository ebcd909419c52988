"""Core business logic components."""

from .request_builder import RequestBuilder, BuiltRequest, build_prompt
from .classifier import classify_response
from .orchestrator import Orchestrator
from .tryon_service import TryOnService, describe_error

__all__ = [
    "RequestBuilder",
    "BuiltRequest",
    "build_prompt",
    "classify_response",
    "Orchestrator",
    "TryOnService",
    "describe_error",
]
