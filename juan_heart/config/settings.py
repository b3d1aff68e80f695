"""Application configuration and settings."""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service Configuration
    service_name: str = "juan-heart-referral"
    referral_service_port: int = 8006
    environment: str = "development"
    cors_allow_origins: str = "http://localhost:5173"

    # MongoDB Configuration
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "juan_heart"
    mongodb_collection_referrals: str = "referral_summaries"
    mongodb_timeout_ms: int = 5000

    # Facility Directory Configuration
    facility_directory_backend: str = "static"  # "static" or "http"
    facility_directory_url: str = "http://localhost:8000/api/v1"
    facility_directory_api_key: Optional[str] = None
    facility_directory_timeout_s: float = 15.0

    # Facility Search Defaults
    facility_search_max_distance_km: float = 25.0
    facility_search_max_results: int = 15
    emergency_search_max_results: int = 5
    nearest_filter_count: int = 5
    public_facility_keywords: str = "government,quezon city,veterans"

    # Referral Rules
    booking_offer_min_score: int = 10
    default_locale: str = "en"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def public_keywords(self) -> list[str]:
        return [
            k.strip().lower()
            for k in self.public_facility_keywords.split(",")
            if k.strip()
        ]

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


# Global settings instance
settings = Settings()
