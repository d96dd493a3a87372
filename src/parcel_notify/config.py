"""Configuration and environment loading for Parcel Notify."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    public_base_url: str | None = None  # Overrides scheme://host in links

    # Branding shown in emails and pages
    brand_name: str = "Parcel Notify"

    # Authorization tokens
    token_ttl_seconds: int = Field(default=1200, ge=1)
    token_entropy_bits: int = Field(default=256, ge=128)
    token_max_live: int = Field(default=10_000, ge=1)
    token_sweep_interval_seconds: int = Field(default=60, ge=1)
    authorize_requires_confirmation: bool = False

    # SMTP
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_timeout: float = 30.0
    mail_from: str | None = None
    admin_email: str | None = None  # Receives a copy when a package is authorized

    # Cloudinary image hosting
    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    upload_folder_standard: str = "parcel-tasks"
    upload_folder_suspended: str = "parcel-suspended"
    max_upload_size_mb: int = Field(default=5, ge=1)

    # Maps
    mapbox_token: str | None = None
    map_width: int = 600
    map_height: int = 300

    # Localization
    default_locale: str = "en"

    @field_validator("token_entropy_bits")
    @classmethod
    def _whole_bytes(cls, value: int) -> int:
        if value % 8:
            raise ValueError("token_entropy_bits must be a multiple of 8")
        return value

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def mail_configured(self) -> bool:
        return bool(self.smtp_username and self.smtp_password)

    @property
    def uploads_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
