"""GitHub webhook trigger for release notes generation."""

from .app import create_app

__all__ = ["create_app"]
