"""Utilities for bounding diff patches before they are embedded in prompts."""

from __future__ import annotations

import structlog

from github_release_notes.utils.constants import DEFAULT_PATCH_EXCERPT_MAX_CHARS

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def truncate_patch(patch: str | None, max_length: int = DEFAULT_PATCH_EXCERPT_MAX_CHARS) -> tuple[str, bool]:
    """Cut a patch down to at most ``max_length`` characters.

    The cut is a hard character cap: it is not line-aware and no marker is
    appended, so a patch longer than the cap comes back exactly ``max_length``
    characters long.

    Args:
        patch: The diff text; None is treated as an empty patch.
        max_length: Maximum number of characters to keep.

    Returns:
        Tuple of (excerpt, was_truncated).
    """
    if max_length < 0:
        raise ValueError(f"max_length must not be negative, got {max_length}")
    if not patch:
        return "", False
    if len(patch) <= max_length:
        return patch, False
    return patch[:max_length], True
