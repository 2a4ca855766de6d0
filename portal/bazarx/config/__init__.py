"""
Application Configuration
"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Tuple
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "BazarXpress Portal"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Upstream BazarXpress REST API
    API_URL: str = Field(
        "http://localhost:5000/api",
        validation_alias=AliasChoices("API_URL", "NEXT_PUBLIC_API_URL"),
    )
    # Applied to every upstream call
    UPSTREAM_TIMEOUT_SECONDS: float = 15.0

    # Geocoding
    GOOGLE_MAPS_API_KEY: str = Field(
        "",
        validation_alias=AliasChoices("GOOGLE_MAPS_API_KEY", "NEXT_PUBLIC_GOOGLE_MAPS_API_KEY"),
    )
    OPENCAGE_API_KEY: str = Field(
        "",
        validation_alias=AliasChoices("OPENCAGE_API_KEY", "NEXT_PUBLIC_OPENCAGE_API_KEY"),
    )
    GOOGLE_GEOCODE_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"
    OPENCAGE_GEOCODE_URL: str = "https://api.opencagedata.com/geocode/v1/json"
    DEFAULT_MAP_CENTER: Tuple[float, float] = (28.6139, 77.2090)  # Delhi

    # Session JWT
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = 60 * 24 * 7
    SESSION_COOKIE_NAME: str = "bx_session"
    # Upper bound on in-memory per-session state stores
    MAX_SESSION_STORES: int = 10000
    LOGIN_REDIRECT_URL: str = "/"

    # Encryption (for the upstream bearer token kept inside the session)
    ENCRYPTION_KEY: str = ""  # Generate with: from cryptography.fernet import Fernet; Fernet.generate_key()

    # Public storefront, used in links placed in outgoing mail
    SITE_URL: str = "http://localhost:3000"

    # Display
    CURRENCY: str = "INR"
    LOCALE: str = "en_IN"
    DEFAULT_COUNTRY: str = "India"

    # CORS / hosts
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    ALLOWED_HOSTS: List[str] = ["*"]

    # Pagination
    NEWSLETTER_PAGE_SIZE: int = 10

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 100
    PUBLIC_RATE_LIMIT: str = "10/minute"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
