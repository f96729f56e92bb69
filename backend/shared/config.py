"""
Centralized configuration for the Baaba backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, AUTH_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Baaba API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # Profile storage
    profiles_table: str = "users"

    # Frontend URLs (for redirects)
    frontend_url: str = "http://localhost:5173"

    # Route targets used by the authorization gate
    sign_in_path: str = "/login"
    onboarding_path: str = "/onboarding"
    root_path: str = "/"

    # Federated sign-in
    oauth_provider: str = "google"

    @property
    def oauth_redirect_url(self) -> str:
        """Where the identity provider sends users after federated sign-in."""
        return f"{self.frontend_url.rstrip('/')}{self.onboarding_path}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
