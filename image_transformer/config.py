"""Configuration management using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the image transformer service."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_TRANSFORMER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API Settings
    api_version: str = "1.0.0"
    api_description: str = "Re-encodes uploaded PNG, JPEG and WebP images as lossy WebP"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_allow_origins: list[str] = ["*"]

    # Limits
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, gt=0)
    pipeline_timeout_seconds: float = Field(default=30.0, gt=0)
    pipeline_workers: int | None = Field(default=None, gt=0)
    # Pillow's decompression bomb threshold; None = unbounded
    max_output_pixels: int | None = Field(default=178_956_970, gt=0)

    # Transform policy
    default_quality: float = Field(default=100.0, ge=0.0, le=100.0)
    strict_quality: bool = False  # reject unparseable quality instead of ignoring it


# Global settings instance
settings = Settings()
