"""Configuration management for the try-on agent."""

import os
from pathlib import Path
from typing import Literal, Optional
import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_PATH = Path("config/tryon.yaml")
DEFAULT_GEMINI_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.5-flash-image-preview:generateContent"
)


class GenerationSettings(BaseModel):
    """Tunable constants for building and sending composition requests."""
    # JPEG quality on Pillow's 1-95 scale; 50 corresponds to 0.5
    compression_quality: int = Field(default=50, ge=1, le=95)
    max_image_bytes: int = 4 * 1024 * 1024
    timeout_seconds: float = 90.0
    temperature: float = 0.4
    top_k: int = 32
    top_p: float = 1.0
    max_output_tokens: int = 4096
    max_retries: int = Field(default=3, ge=1)
    base_delay_seconds: float = 1.0


class Config(BaseModel):
    """Main application configuration."""

    # API Keys
    gemini_api_key: str = Field(..., alias="GEMINI_API_KEY")
    gemini_endpoint: str = Field(default=DEFAULT_GEMINI_ENDPOINT, alias="GEMINI_ENDPOINT")
    gemini_credential_mode: Literal["header", "query"] = Field(
        default="header", alias="GEMINI_CREDENTIAL_MODE"
    )

    # Backend
    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")
    supabase_bucket: str = Field(default="try-on-images", alias="SUPABASE_BUCKET")

    # Application Settings
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    generation: GenerationSettings = Field(default_factory=GenerationSettings)

    class Config:
        populate_by_name = True

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


# Global config instance
_config: Optional[Config] = None


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration from environment and the YAML file.

    The default YAML file is optional. Keys present in the YAML file win over
    environment variables of the same name.

    Args:
        path: YAML file to read (defaults to config/tryon.yaml)

    Returns:
        Config instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config

    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    try:
        file_config = {}
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        elif path is not None:
            raise ConfigurationError(f"Config file not found at {config_path}")

        config_data = {
            **os.environ,
            **file_config,
        }

        _config = Config(**config_data)

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}")

    logger.info(
        "Configuration loaded successfully",
        extra={
            "environment": _config.app_env,
            "credential_mode": _config.gemini_credential_mode,
            "supabase_configured": _config.supabase_configured,
            "max_retries": _config.generation.max_retries,
        }
    )

    return _config


def get_config() -> Config:
    """
    Get the current configuration instance.

    Raises:
        ConfigurationError: If config not loaded
    """
    if _config is None:
        raise ConfigurationError("Configuration not loaded. Call load_config() first.")
    return _config
