"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod
from typing import Any


class GitHubClientBase(ABC):
    """The GitHub operations the release notes pipeline needs from a host.

    Releases are returned as objects exposing ``id``, ``tag_name``, ``draft``
    and ``published_at``; commits are returned as raw API dictionaries.
    """

    # Release Operations
    @abstractmethod
    async def list_releases(self) -> list[Any]:
        """List every release of the repository."""
        pass

    @abstractmethod
    async def find_release_by_tag(self, tag_name: str) -> Any | None:
        """Find the release for a tag, or None when the tag has no release."""
        pass

    @abstractmethod
    async def create_release(self, tag_name: str, name: str, body: str, draft: bool = False, prerelease: bool = False) -> Any:
        """Create a release for a tag."""
        pass

    @abstractmethod
    async def update_release_body(self, release_id: int, body: str) -> Any:
        """Replace the body of an existing release, leaving its other fields unchanged."""
        pass

    # Commit Operations
    @abstractmethod
    async def list_commits(self, since: str | None = None, until: str | None = None) -> list[dict[str, Any]]:
        """List commits made between two ISO 8601 timestamps."""
        pass

    @abstractmethod
    async def get_commit(self, commit_sha: str) -> dict[str, Any]:
        """Get one commit, including its changed files."""
        pass
