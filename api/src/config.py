"""
Application Configuration

Uses pydantic-settings for environment variable loading with validation.
All configuration is centralized here for easy management.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can be set directly or via .env file.
    Firebase credentials should be provided via environment variables in production.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPSDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Runtime environment"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # ==========================================================================
    # Document Store
    # ==========================================================================
    document_store: Literal["memory", "firestore"] = Field(
        default="memory",
        description="Document store backend ('memory' keeps data in-process)"
    )

    firebase_credentials_file: str | None = Field(
        default=None,
        description="Path to the Firebase service account JSON (None uses application default credentials)"
    )

    firebase_project_id: str | None = Field(
        default=None,
        description="Firebase project ID (optional, taken from credentials when unset)"
    )

    # ==========================================================================
    # Report Autosave
    # ==========================================================================
    autosave_delay_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Idle window after the last edit before an automatic save"
    )

    # ==========================================================================
    # Translation
    # ==========================================================================
    translate_url: str = Field(
        default="https://translate.googleapis.com/translate_a/single",
        description="Translation endpoint used for generated reports"
    )

    translate_source_language: str = Field(
        default="en",
        description="Source language of generated reports"
    )

    translate_target_language: str = Field(
        default="zh-CN",
        description="Target language for report translation"
    )

    translate_timeout_seconds: float = Field(
        default=15.0,
        description="HTTP timeout for the translation request"
    )

    # ==========================================================================
    # Access
    # ==========================================================================
    admin_emails: str = Field(
        default="",
        description="Comma-separated list of admin emails (manage viewer-agent connections)"
    )

    agent_email_map: str = Field(
        default="",
        description="Extra email prefix to agent mappings, e.g. 'anna=ANNA,bo=BOBBY'"
    )

    @computed_field
    @property
    def admin_emails_list(self) -> list[str]:
        """Parse admin emails into a lower-cased list."""
        return [e.strip().lower() for e in self.admin_emails.split(",") if e.strip()]

    @computed_field
    @property
    def agent_email_overrides(self) -> dict[str, str]:
        """Parse agent_email_map into a prefix -> agent name dict."""
        overrides: dict[str, str] = {}
        for pair in self.agent_email_map.split(","):
            if "=" not in pair:
                continue
            prefix, agent = pair.split("=", 1)
            if prefix.strip() and agent.strip():
                overrides[prefix.strip().lower()] = agent.strip()
        return overrides

    # ==========================================================================
    # Server
    # ==========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server host"
    )

    port: int = Field(
        default=8000,
        description="Server port"
    )

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
