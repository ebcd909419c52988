"""API route handlers."""

from . import auth, health, outfits, tryon

__all__ = ["auth", "health", "outfits", "tryon"]
