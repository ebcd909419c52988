"""External service providers."""

from .gemini import GeminiTransport, TransportResponse
from .identity import IdentityProvider, SupabaseIdentityProvider
from .supabase_storage import OutfitStore, SupabaseStorage, create_supabase_client

__all__ = [
    "GeminiTransport",
    "TransportResponse",
    "IdentityProvider",
    "SupabaseIdentityProvider",
    "OutfitStore",
    "SupabaseStorage",
    "create_supabase_client",
]
