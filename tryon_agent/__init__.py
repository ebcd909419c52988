"""Virtual try-on composition service."""

__version__ = "1.0.0"
