"""Exceptions raised by the release notes pipeline."""


class ReleaseNotesError(Exception):
    """Base class for release notes pipeline errors."""

    pass


class TransportError(ReleaseNotesError):
    """Raised when a call to the GitHub API fails in a way the pipeline cannot absorb."""

    pass


class CommitListError(TransportError):
    """Raised when the commits of the release window cannot be listed."""

    pass


class PublishError(TransportError):
    """Raised when the release cannot be looked up, created or updated."""

    def __init__(self, tag: str, detail: str) -> None:
        """Initializes the exception with the tag being published and the host's error detail."""
        super().__init__(f"Failed to publish release for tag {tag}: {detail}")
        self.tag = tag
        self.detail = detail
