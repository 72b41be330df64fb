"""Fetch commit and per-commit file data for a release window."""

import asyncio
from datetime import UTC, datetime
from typing import Any

import structlog
from githubkit.exception import GitHubException

from ..github.abc import GitHubClientBase
from ..utils.constants import DEFAULT_MAX_CONCURRENCY, DEFAULT_PATCH_EXCERPT_MAX_CHARS
from ..utils.truncation import truncate_patch
from .exceptions import CommitListError
from .models import CommitRecord, FileChange, ReleaseWindow

logger = structlog.get_logger(__name__)


def format_github_timestamp(value: datetime) -> str:
    """Format a datetime as the ISO 8601 UTC timestamp GitHub expects, e.g. 2024-05-01T12:00:00Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


class CommitFetcher:
    """Retrieves the commits of a release window and their file changes."""

    def __init__(
        self,
        adapter: GitHubClientBase,
        patch_excerpt_max_chars: int = DEFAULT_PATCH_EXCERPT_MAX_CHARS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        """Initialize with GitHub adapter, the patch excerpt cap and the concurrency bound."""
        self.adapter = adapter
        self.patch_excerpt_max_chars = patch_excerpt_max_chars
        self.max_concurrency = max_concurrency

    async def fetch_commits(self, window: ReleaseWindow) -> list[CommitRecord]:
        """List the commits made within the window, in the order GitHub returns them.

        The records carry the raw commit message but no file changes yet.

        Raises:
            CommitListError: If the commits cannot be listed. Nothing can be
                summarized without them, so this ends the run.
        """
        since = format_github_timestamp(window.start)
        until = format_github_timestamp(window.end)
        try:
            raw_commits = await self.adapter.list_commits(since=since, until=until)
        except (GitHubException, ValueError) as e:
            logger.error("Failed to list commits", since=since, until=until, error=str(e))
            raise CommitListError(f"Failed to fetch commits from GitHub between {since} and {until}: {e}") from e

        records = [
            CommitRecord(sha=raw["sha"], raw_message=(raw.get("commit") or {}).get("message") or "")
            for raw in raw_commits
            if raw.get("sha")
        ]
        logger.info("Fetched commits in window", since=since, until=until, commit_count=len(records))
        return records

    def build_file_changes(self, files: list[dict[str, Any]]) -> list[FileChange]:
        """Turn the 'files' of a commit detail response into bounded file changes."""
        changes = []
        for file_data in files:
            filename = file_data.get("filename")
            if not filename:
                continue
            excerpt, was_truncated = truncate_patch(file_data.get("patch"), self.patch_excerpt_max_chars)
            if was_truncated:
                logger.debug("Truncated patch excerpt", filename=filename, max_chars=self.patch_excerpt_max_chars)
            changes.append(FileChange(path=filename, patch_excerpt=excerpt))
        return changes

    async def fetch_commit_detail(self, commit: CommitRecord) -> CommitRecord:
        """Fetch the file changes of one commit.

        A failed request does not raise: the record comes back with
        ``detail_error`` set so the commit degrades to a placeholder entry.
        """
        try:
            detail = await self.adapter.get_commit(commit.sha)
        except (GitHubException, ValueError) as e:
            logger.warning("Failed to fetch commit details", sha=commit.sha, error=str(e))
            return CommitRecord(sha=commit.sha, raw_message=commit.raw_message, detail_error="changes unavailable")

        files = detail.get("files") or []
        raw_message = commit.raw_message or (detail.get("commit") or {}).get("message") or ""
        return CommitRecord(sha=commit.sha, raw_message=raw_message, changed_files=self.build_file_changes(files))

    async def fetch_all_details(self, commits: list[CommitRecord]) -> list[CommitRecord]:
        """Fetch file changes for every commit with bounded concurrency, keeping input order."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(commit: CommitRecord) -> CommitRecord:
            async with semaphore:
                return await self.fetch_commit_detail(commit)

        detailed = await asyncio.gather(*(_bounded(commit) for commit in commits))
        failed = sum(1 for record in detailed if record.detail_error)
        if failed:
            logger.warning("Some commit details could not be fetched", failed=failed, total=len(detailed))
        return list(detailed)
