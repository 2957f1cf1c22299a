"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly. The SAP_* variables keep the names
the warehouse deployment already uses, e.g. SAP_BASE_API_URL.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # ==========================================================================
    # SAP backend
    # ==========================================================================
    sap_base_api_url: Optional[str] = None
    sap_product_filter_field: str = "ProductStandardID"

    # Auth precedence: user+pass > literal basic token > bearer token
    sap_basic_auth: Optional[str] = None
    sap_basic_auth_user: Optional[str] = None
    sap_basic_auth_pass: Optional[str] = None
    sap_api_token: Optional[str] = None

    # Extra API-key header sent alongside whichever auth mode applies
    sap_api_key_header: Optional[str] = None
    sap_api_key_value: Optional[str] = None

    # None means no timeout on the outbound calls
    sap_request_timeout: Optional[float] = None

    # ==========================================================================
    # Stock policy
    # ==========================================================================
    warehouse_storage_location: str = "FG01"
    warehouse_stock_type: str = "01"

    # Scanner policy; the HTTP endpoint only applies it when enforced
    barcode_length: int = 13
    enforce_barcode_length: bool = False

    # Security
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    auth_required: bool = True

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_prefix: str = "/api"

    # Rate limiting
    rate_limit_enabled: bool = True

    @field_validator("sap_base_api_url", "sap_basic_auth", "sap_api_token")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("barcode_length")
    @classmethod
    def validate_barcode_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError("BARCODE_LENGTH must be a positive integer")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate settings for production safety."""
        import warnings

        if not self.debug:
            if self.auth_required and self.secret_key == "change-me-in-production":
                raise ValueError(
                    "FATAL: Cannot start in production mode with default SECRET_KEY. "
                    "Set a secure SECRET_KEY environment variable (minimum 32 characters)."
                )
            if self.sap_base_api_url and self.sap_base_api_url.startswith("http://"):
                warnings.warn(
                    "SAP_BASE_API_URL uses plain http in production mode; "
                    "credentials will be sent unencrypted.",
                    UserWarning,
                    stacklevel=2,
                )

        return self

    @property
    def sap_configured(self) -> bool:
        return bool(self.sap_base_api_url)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
