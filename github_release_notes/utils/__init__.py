"""Utility modules for shared functionality."""

from .constants import (
    DEFAULT_PATCH_EXCERPT_MAX_CHARS,
    DEFAULT_RELEASE_NOTES_PATH,
    TAG_REF_PREFIX,
)
from .retry import retry_on_rate_limit
from .truncation import truncate_patch

__all__ = [
    "DEFAULT_PATCH_EXCERPT_MAX_CHARS",
    "DEFAULT_RELEASE_NOTES_PATH",
    "TAG_REF_PREFIX",
    "retry_on_rate_limit",
    "truncate_patch",
]
