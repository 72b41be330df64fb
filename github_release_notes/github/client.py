"""Sets up the authenticated githubkit client."""

from typing import TypeAlias

import structlog
from githubkit import GitHub
from githubkit.auth import AppAuthStrategy, AppInstallationAuthStrategy, TokenAuthStrategy
from githubkit.exception import GitHubException
from githubkit.versions.latest.models import Installation

from github_release_notes.configuration.models import GitHubAuthenticationType, GitHubConfig
from github_release_notes.utils.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from github_release_notes.utils.github import split_repository_in_configuration

logger = structlog.get_logger(__name__)

GitHubClient: TypeAlias = GitHub[AppInstallationAuthStrategy] | GitHub[TokenAuthStrategy]


def _new_client(auth: AppAuthStrategy | TokenAuthStrategy, config: GitHubConfig, timeout: float) -> GitHub:
    # No response cache and no githubkit retries: every run must see fresh
    # release data, and rate limits are retried by retry_on_rate_limit.
    return GitHub(auth=auth, base_url=config.api_url, http_cache=False, auto_retry=False, timeout=timeout)


async def _installation_client(config: GitHubConfig, timeout: float) -> GitHub[AppInstallationAuthStrategy]:
    """Authenticate as the GitHub App, then as its installation on the configured repository."""
    if not (config.app_id and config.app_private_key_path and config.app_installation_id):
        raise RuntimeError("GitHub App authentication requires app_id, private_key_path, and installation_id in config.")

    try:
        private_key = config.app_private_key_path.read_text()
    except OSError as e:
        raise ValueError(f"Could not read GitHub App private key {config.app_private_key_path}: {e}") from e

    app_client = _new_client(AppAuthStrategy(app_id=config.app_id, private_key=private_key), config, timeout)
    owner, repo_name = await split_repository_in_configuration(config.repo)
    try:
        response = await app_client.rest.apps.async_get_repo_installation(owner=owner, repo=repo_name)
    except GitHubException as e:
        raise ValueError(f"Failed to get GitHub App installation for {config.repo}: {e}") from e

    installation: Installation = response.parsed_data
    if installation.id != config.app_installation_id:
        logger.warning(
            "Repository installation differs from configured installation ID",
            repo=config.repo,
            installation_id=installation.id,
            configured_installation_id=config.app_installation_id,
        )
    return app_client.with_auth(app_client.auth.as_installation(installation.id))


async def get_github_client(config: GitHubConfig, timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS) -> GitHubClient:
    """Returns an authenticated GitHub client using either GitHub App or PAT credentials.

    The API URL may point at a GitHub Enterprise Server instance.

    Raises:
        RuntimeError: If the credentials for the selected authentication type are missing.
        ValueError: If the App private key or the repository installation cannot be loaded.
    """
    if config.authentication_type == GitHubAuthenticationType.APP:
        return await _installation_client(config, timeout)
    if config.authentication_type == GitHubAuthenticationType.PAT:
        if not config.pat_token:
            raise RuntimeError("GitHub PAT authentication requires github_pat_token in config.")
        return _new_client(TokenAuthStrategy(config.pat_token), config, timeout)
    raise RuntimeError(f"Unsupported GitHub authentication type: {config.authentication_type}")
