"""Pydantic Settings model for application configuration."""

from datetime import date
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from github_release_notes.configuration.models import ArtifactMode, CompositionPolicy, LookbackAnchor
from github_release_notes.utils.constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_INSTALL_OFFSET_DAYS,
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_OPENAI_API_URL,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_PATCH_EXCERPT_MAX_CHARS,
)


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # GitHub API settings
    GITHUB_API_URL: str = DEFAULT_GITHUB_API_URL
    REPO: str | None = None

    # GitHub PAT settings
    GITHUB_PAT_TOKEN: str | None = None

    # GitHub App settings
    GITHUB_APP_ID: int | None = None
    GITHUB_APP_PRIVATE_KEY_PATH: Path | None = None
    GITHUB_APP_INSTALLATION_ID: int | None = None

    # Webhook settings
    GITHUB_WEBHOOK_SECRET: str | None = None

    # Text generation settings
    OPENAI_API_KEY: str | None = None
    OPENAI_API_URL: str = DEFAULT_OPENAI_API_URL
    OPENAI_MODEL: str = DEFAULT_OPENAI_MODEL

    # Release notes settings
    COMPOSITION_POLICY: CompositionPolicy = CompositionPolicy.FLAT
    INCLUDE_OVERALL_SUMMARY: bool = True
    CATEGORY_MARKERS: dict[str, list[str]] | None = None
    LOOKBACK_ANCHOR: LookbackAnchor = LookbackAnchor.NOW
    LOOKBACK_DAYS: int = DEFAULT_LOOKBACK_DAYS
    PACKAGE_INSTALLED_DATE: date | None = None
    INSTALL_OFFSET_DAYS: int = DEFAULT_INSTALL_OFFSET_DAYS
    PATCH_EXCERPT_MAX_CHARS: int = DEFAULT_PATCH_EXCERPT_MAX_CHARS
    MAX_CONCURRENCY: int = DEFAULT_MAX_CONCURRENCY
    HTTP_TIMEOUT_SECONDS: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    RELEASE_NOTES_ARTIFACT_PATH: Path | None = None
    RELEASE_NOTES_ARTIFACT_MODE: ArtifactMode = ArtifactMode.OVERWRITE


def get_settings() -> Settings:
    """Read the settings from the environment and the .env file."""
    return Settings()
