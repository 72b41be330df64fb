"""GitHub client adapter for the githubkit library."""

from functools import wraps
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit.exception import RequestFailed
from githubkit.versions.latest.models import Release

from github_release_notes.configuration.models import GitHubConfig
from github_release_notes.utils.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, GITHUB_MAX_PER_PAGE
from github_release_notes.utils.github import split_repository_in_configuration
from github_release_notes.utils.retry import retry_on_rate_limit

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])
T = TypeVar("T")


def _unprocessable_detail(exc: RequestFailed) -> tuple[str, list[Any]]:
    try:
        error_data = exc.response.json()
    except ValueError:
        error_data = {}
    return error_data.get("message", "Unprocessable Entity"), error_data.get("errors", [])


def handle_github_422(func: F) -> F:
    """Turn GitHub 422 Unprocessable Entity errors into ValueError carrying GitHub's message."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RequestFailed as exc:
            if exc.response.status_code != 422:
                raise
            message, errors = _unprocessable_detail(exc)
            logger.error("GitHub rejected request as unprocessable", function=func.__name__, message=message, errors=errors)
            raise ValueError(f"GitHub 422 error in {func.__name__}: {message} | errors: {errors}") from exc

    return wrapper  # type: ignore


async def paginate(fetch_page: Callable[[int], Awaitable[list[T]]], per_page: int) -> list[T]:
    """Collect every page, stopping at the first empty or short page."""
    items: list[T] = []
    page = 1
    while True:
        batch = await fetch_page(page)
        logger.debug("Fetched page", page=page, items=len(batch))
        items.extend(batch)
        if len(batch) < per_page:
            return items
        page += 1


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library, bound to one repository."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name

    @classmethod
    async def create(cls, config: GitHubConfig, timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS) -> Self:
        """Authenticate against GitHub and bind the adapter to the configured repository.

        Args:
            config: Resolved GitHub connection settings
            timeout: Timeout in seconds applied to every request

        Raises:
            ValueError: If the repository is malformed or the App installation cannot be found
            RuntimeError: If the credentials for the authentication type are missing
        """
        owner, repo_name = await split_repository_in_configuration(config.repo)
        logger.info(
            "Creating client for GitHub instance and repository",
            github_api_url=config.api_url,
            owner=owner,
            repo_name=repo_name,
            auth_type=config.authentication_type.value,
        )
        return cls(await get_github_client(config, timeout=timeout), owner, repo_name)

    # Release Operations
    @handle_github_422
    async def list_releases(self, per_page: int = GITHUB_MAX_PER_PAGE) -> list[Release]:
        """List every release of the repository, newest first as GitHub returns them."""

        @retry_on_rate_limit()
        async def _fetch_page(page: int) -> list[Release]:
            response = await self.client.rest.repos.async_list_releases(owner=self.owner, repo=self.repo_name, per_page=per_page, page=page)
            return response.parsed_data

        releases = await paginate(_fetch_page, per_page)
        logger.info("Listed releases", owner=self.owner, repo=self.repo_name, total_releases=len(releases))
        return releases

    async def find_release_by_tag(self, tag_name: str) -> Release | None:
        """Find the release for a tag in the repository's release list.

        The release list is used instead of the get-by-tag endpoint because the
        latter does not return draft releases.
        """
        release = next((r for r in await self.list_releases() if r.tag_name == tag_name), None)
        logger.debug("Looked up release by tag", tag_name=tag_name, release_id=release.id if release else None)
        return release

    @handle_github_422
    @retry_on_rate_limit()
    async def create_release(self, tag_name: str, name: str, body: str, draft: bool = False, prerelease: bool = False) -> Release:
        """Create a release (and its tag on the default branch, when the tag does not exist yet)."""
        response = await self.client.rest.repos.async_create_release(
            owner=self.owner,
            repo=self.repo_name,
            tag_name=tag_name,
            name=name,
            body=body,
            draft=draft,
            prerelease=prerelease,
        )
        logger.info("Created release", tag_name=tag_name, release_id=response.parsed_data.id)
        return response.parsed_data

    @handle_github_422
    @retry_on_rate_limit()
    async def update_release_body(self, release_id: int, body: str) -> Release:
        """Replace the body of an existing release; tag and name stay as they are."""
        response = await self.client.rest.repos.async_update_release(owner=self.owner, repo=self.repo_name, release_id=release_id, body=body)
        logger.info("Updated release body", release_id=release_id)
        return response.parsed_data

    # Commit Operations
    @handle_github_422
    async def list_commits(self, since: str | None = None, until: str | None = None, per_page: int = GITHUB_MAX_PER_PAGE) -> list[dict[str, Any]]:
        """List the commits of the default branch between two ISO 8601 timestamps, newest first.

        Raw dictionaries are returned; only the SHA and message are read from them.
        """
        bounds = {key: value for key, value in (("since", since), ("until", until)) if value is not None}

        @retry_on_rate_limit()
        async def _fetch_page(page: int) -> list[dict[str, Any]]:
            response = await self.client.rest.repos.async_list_commits(owner=self.owner, repo=self.repo_name, per_page=per_page, page=page, **bounds)
            return response.json()

        commits = await paginate(_fetch_page, per_page)
        logger.info("Listed commits", owner=self.owner, repo=self.repo_name, since=since, until=until, total_commits=len(commits))
        return commits

    @handle_github_422
    @retry_on_rate_limit()
    async def get_commit(self, commit_sha: str) -> dict[str, Any]:
        """Get one commit with its 'files' list.

        The raw JSON is returned because githubkit's Commit model requires
        verification.verified_at, which this endpoint does not always send.
        """
        response = await self.client.rest.repos.async_get_commit(owner=self.owner, repo=self.repo_name, ref=commit_sha)
        return response.json()
