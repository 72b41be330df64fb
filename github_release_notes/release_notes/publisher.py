"""Create-or-update publishing of release notes to GitHub releases."""

import structlog
from githubkit.exception import GitHubException

from ..github.abc import GitHubClientBase
from ..utils.constants import RELEASE_NAME_TEMPLATE
from .exceptions import PublishError
from .models import PublishOutcome

logger = structlog.get_logger(__name__)


class ReleasePublisher:
    """Publishes a release body for a tag, creating the release or updating the existing one.

    A release is identified by its tag name, so publishing twice for the same
    tag updates the release created by the first call instead of creating a
    second one.
    """

    def __init__(self, adapter: GitHubClientBase) -> None:
        """Initialize with GitHub adapter."""
        self.adapter = adapter

    async def publish(self, tag: str, body: str) -> PublishOutcome:
        """Create or update the release for ``tag`` with ``body``.

        Raises:
            PublishError: If the lookup, create or update request fails. The
                error carries the GitHub error detail and is not retried.
        """
        try:
            existing = await self.adapter.find_release_by_tag(tag)
            if existing is not None:
                await self.adapter.update_release_body(existing.id, body)
                logger.info("Updated existing release", tag=tag, release_id=existing.id)
                return PublishOutcome.UPDATED

            await self.adapter.create_release(
                tag_name=tag,
                name=RELEASE_NAME_TEMPLATE.format(tag=tag),
                body=body,
                draft=False,
                prerelease=False,
            )
        except (GitHubException, ValueError) as e:
            logger.error("Failed to publish release", tag=tag, error=str(e))
            raise PublishError(tag, str(e)) from e

        logger.info("Created release", tag=tag)
        return PublishOutcome.CREATED
