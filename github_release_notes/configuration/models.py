"""Configuration models produced by reconciling CLI arguments and environment variables."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path

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


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


class CompositionPolicy(str, Enum):
    """How rewritten commits are aggregated into a release document."""

    FLAT = "flat"
    CATEGORIZED = "categorized"


class LookbackAnchor(str, Enum):
    """What the window start falls back to when no prior release exists."""

    NOW = "now"
    INSTALL_DATE = "install_date"


class ArtifactMode(str, Enum):
    """Whether the local release notes artifact is overwritten or appended to."""

    OVERWRITE = "overwrite"
    APPEND = "append"


@dataclass
class GitHubConfig:
    """Resolved GitHub connection settings."""

    repo: str
    api_url: str = DEFAULT_GITHUB_API_URL
    authentication_type: GitHubAuthenticationType = GitHubAuthenticationType.PAT
    pat_token: str | None = field(default=None, repr=False)
    app_id: int | None = None
    app_private_key_path: Path | None = None
    app_installation_id: int | None = None


@dataclass
class TextGenerationConfig:
    """Resolved chat-completions connection settings."""

    api_key: str = field(repr=False)
    api_url: str = DEFAULT_OPENAI_API_URL
    model: str = DEFAULT_OPENAI_MODEL


@dataclass
class PipelineConfig:
    """Everything one release notes run needs, resolved up front.

    The pipeline reads nothing from the process environment; callers build this
    object once (see ``configuration.reconcile``) and pass it in.
    """

    github: GitHubConfig
    text_generation: TextGenerationConfig
    debug: bool = False
    composition_policy: CompositionPolicy = CompositionPolicy.FLAT
    include_overall_summary: bool = True
    category_markers: dict[str, list[str]] | None = None
    lookback_anchor: LookbackAnchor = LookbackAnchor.NOW
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    install_date: date | None = None
    install_offset_days: int = DEFAULT_INSTALL_OFFSET_DAYS
    patch_excerpt_max_chars: int = DEFAULT_PATCH_EXCERPT_MAX_CHARS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    artifact_path: Path | None = None
    artifact_mode: ArtifactMode = ArtifactMode.OVERWRITE
    webhook_secret: str | None = field(default=None, repr=False)
