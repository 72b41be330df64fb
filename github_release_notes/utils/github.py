"""Contains utility functions for GitHub interactions."""

from github_release_notes.utils.constants import TAG_REF_PREFIX


async def split_repository_in_configuration(repo: str | None) -> tuple[str, str]:
    """Splits the repository in the configuration into owner and repository."""
    if repo is None:
        raise ValueError("GitHub operations require repo in config.")
    repo = repo.strip("/")
    parts = repo.split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError("Repository must be in the format 'owner/repo' with no leading/trailing slashes or extra parts.")
    owner, repository = parts
    return owner, repository


def tag_from_ref(ref: str | None) -> str | None:
    """Return the tag name of a 'refs/tags/<tag>' ref, or None for any other ref."""
    if not ref or not ref.startswith(TAG_REF_PREFIX):
        return None
    tag = ref[len(TAG_REF_PREFIX) :]
    return tag or None
