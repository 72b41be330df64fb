"""Reconciles configuration between CLI arguments and environment variables."""

from pathlib import Path

import structlog

from github_release_notes.configuration.env import Settings
from github_release_notes.configuration.exceptions import (
    ConfigurationError,
    GitHubAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from github_release_notes.configuration.models import (
    ArtifactMode,
    CompositionPolicy,
    GitHubAuthenticationType,
    GitHubConfig,
    LookbackAnchor,
    PipelineConfig,
    TextGenerationConfig,
)
from github_release_notes.release_notes.categories import parse_category_markers
from github_release_notes.utils.github import split_repository_in_configuration

logger = structlog.get_logger(__name__)


APP_SETTINGS = (
    ("GitHub App ID", "github_app_id", "GITHUB_APP_ID"),
    ("GitHub App private key path", "github_app_private_key_path", "GITHUB_APP_PRIVATE_KEY_PATH"),
    ("GitHub App installation ID", "github_app_installation_id", "GITHUB_APP_INSTALLATION_ID"),
)
"""(name, CLI option, environment variable) of each setting GitHub App authentication needs."""


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Decide between PAT and GitHub App authentication.

    Exactly one of the two must be configured, and a GitHub App configuration
    must be complete.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If both or neither are defined, or the App settings are incomplete.
    """
    app_values = (github_app_id, github_app_private_key_path, github_app_installation_id)
    if github_pat_token and any(app_values):
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")
    if github_pat_token:
        return GitHubAuthenticationType.PAT
    if all(app_values):
        return GitHubAuthenticationType.APP
    if not any(app_values):
        raise GitHubAuthenticationConfigurationUndefinedError(
            "No GitHub authentication configuration provided. Please provide either a PAT or a GitHub App configuration."
        )

    missing = ", ".join(
        f"{name} (command line option {cli_name}, environment variable {env_name})"
        for (name, cli_name, env_name), value in zip(APP_SETTINGS, app_values)
        if not value
    )
    raise GitHubAuthenticationConfigurationUndefinedError(f"Incomplete GitHub App configuration - missing settings include {missing}")


async def reconcile_pipeline_configuration(
    settings: Settings,
    cli_repo: str | None = None,
    cli_composition_policy: CompositionPolicy | None = None,
    cli_artifact_path: Path | None = None,
    cli_artifact_mode: ArtifactMode | None = None,
    cli_debug: bool | None = None,
) -> PipelineConfig:
    """Resolve settings and CLI overrides into a single pipeline configuration.

    CLI values win over environment values when given. Every check runs here,
    before any network call is made.

    Raises:
        RequiredConfigurationElementError: If the repository or the text generation API key is missing.
        GitHubAuthenticationConfigurationUndefinedError: If the GitHub credentials are missing or ambiguous.
        ConfigurationError: If a numeric setting is out of range or the repository is malformed.
    """
    repo = cli_repo or settings.REPO
    if not repo:
        raise RequiredConfigurationElementError(name="Repository", cli_name="repo", env_name="REPO")
    try:
        await split_repository_in_configuration(repo)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if not settings.OPENAI_API_KEY:
        raise RequiredConfigurationElementError(name="Text generation API key", cli_name="openai_api_key", env_name="OPENAI_API_KEY")

    auth_type = await validate_github_authentication_configuration(
        github_pat_token=settings.GITHUB_PAT_TOKEN,
        github_app_id=settings.GITHUB_APP_ID,
        github_app_private_key_path=settings.GITHUB_APP_PRIVATE_KEY_PATH,
        github_app_installation_id=settings.GITHUB_APP_INSTALLATION_ID,
    )

    if settings.PATCH_EXCERPT_MAX_CHARS < 1:
        raise ConfigurationError(f"PATCH_EXCERPT_MAX_CHARS must be at least 1, got {settings.PATCH_EXCERPT_MAX_CHARS}")
    if settings.MAX_CONCURRENCY < 1:
        raise ConfigurationError(f"MAX_CONCURRENCY must be at least 1, got {settings.MAX_CONCURRENCY}")
    if settings.LOOKBACK_DAYS < 0:
        raise ConfigurationError(f"LOOKBACK_DAYS must not be negative, got {settings.LOOKBACK_DAYS}")
    if settings.CATEGORY_MARKERS:
        try:
            parse_category_markers(settings.CATEGORY_MARKERS)
        except ValueError as e:
            raise ConfigurationError(f"Invalid CATEGORY_MARKERS: {e}") from e
    if settings.LOOKBACK_ANCHOR == LookbackAnchor.INSTALL_DATE and settings.PACKAGE_INSTALLED_DATE is None:
        logger.info("No PACKAGE_INSTALLED_DATE set, install date anchor will use the lookback days before now as install date")

    config = PipelineConfig(
        github=GitHubConfig(
            repo=repo,
            api_url=settings.GITHUB_API_URL,
            authentication_type=auth_type,
            pat_token=settings.GITHUB_PAT_TOKEN,
            app_id=settings.GITHUB_APP_ID,
            app_private_key_path=settings.GITHUB_APP_PRIVATE_KEY_PATH,
            app_installation_id=settings.GITHUB_APP_INSTALLATION_ID,
        ),
        text_generation=TextGenerationConfig(
            api_key=settings.OPENAI_API_KEY,
            api_url=settings.OPENAI_API_URL,
            model=settings.OPENAI_MODEL,
        ),
        debug=settings.DEBUG if cli_debug is None else cli_debug,
        composition_policy=cli_composition_policy or settings.COMPOSITION_POLICY,
        include_overall_summary=settings.INCLUDE_OVERALL_SUMMARY,
        category_markers=settings.CATEGORY_MARKERS,
        lookback_anchor=settings.LOOKBACK_ANCHOR,
        lookback_days=settings.LOOKBACK_DAYS,
        install_date=settings.PACKAGE_INSTALLED_DATE,
        install_offset_days=settings.INSTALL_OFFSET_DAYS,
        patch_excerpt_max_chars=settings.PATCH_EXCERPT_MAX_CHARS,
        max_concurrency=settings.MAX_CONCURRENCY,
        http_timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
        artifact_path=cli_artifact_path or settings.RELEASE_NOTES_ARTIFACT_PATH,
        artifact_mode=cli_artifact_mode or settings.RELEASE_NOTES_ARTIFACT_MODE,
        webhook_secret=settings.GITHUB_WEBHOOK_SECRET,
    )
    logger.debug(
        "Reconciled pipeline configuration",
        repo=repo,
        github_auth_type=auth_type.value,
        composition_policy=config.composition_policy.value,
        lookback_anchor=config.lookback_anchor.value,
    )
    return config
