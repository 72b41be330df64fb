"""Data models for release notes generation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

from pydantic import BaseModel


class ReleaseNotesStatus(str, Enum):
    """Status of release notes generation."""

    SUCCESS = "success"
    NO_CHANGES = "no_changes"
    DRY_RUN = "dry_run"
    ERROR = "error"


class PublishOutcome(str, Enum):
    """What the publisher did to the remote release."""

    CREATED = "created"
    UPDATED = "updated"


class TriggerKind(str, Enum):
    """What started a release notes run."""

    MANUAL = "manual"
    WEBHOOK = "webhook"


class Category(str, Enum):
    """Change categories used by the categorized composition policy, in display order."""

    BUG_FIXES = "Bug Fixes"
    FEATURES = "New Features"
    IMPROVEMENTS = "Improvements"
    OTHER_CHANGES = "Other Changes"


@dataclass(frozen=True)
class ReleaseWindow:
    """The [start, end] time span of commits to summarize."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Release window start {self.start.isoformat()} is after its end {self.end.isoformat()}")


@dataclass(frozen=True)
class FileChange:
    """One file touched by a commit, with its diff cut to a bounded excerpt."""

    path: str
    patch_excerpt: str


@dataclass
class CommitRecord:
    """One commit in the release window.

    ``detail_error`` is set when the per-commit detail request failed; such a
    record has no changed files and is rewritten to a placeholder.
    """

    sha: str
    raw_message: str
    changed_files: list[FileChange] = field(default_factory=list)
    detail_error: str | None = None


@dataclass
class RewrittenCommit:
    """AI-polished description of one commit, or a labeled placeholder."""

    sha: str
    raw_message: str
    text: str
    unavailable_reason: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.unavailable_reason is not None


@dataclass
class ReleaseDocument:
    """The composed release note, before rendering."""

    title: str
    window_start: datetime
    window_end: datetime
    summary_text: str
    entries: list[RewrittenCommit] = field(default_factory=list)
    category_sections: dict[Category, str] | None = None

    @property
    def has_changes(self) -> bool:
        return bool(self.entries)


@dataclass(frozen=True)
class TriggerContext:
    """The trigger that started a run and the tag it targets."""

    kind: TriggerKind
    tag: str


class ReleaseNotesResult(BaseModel):
    """Result of release notes generation."""

    status: ReleaseNotesStatus
    tag: str | None = None
    outcome: PublishOutcome | None = None
    commit_count: int = 0
    error: str | None = None
    generated_content: str | None = None
    artifact_path: str | None = None


class TextGenerator(Protocol):
    """Protocol for text generation services used by the rewriter and summarizer."""

    async def generate(self, system_prompt: str, prompt: str, max_tokens: int) -> str:
        """Generate text for a prompt, raising TextGenerationError or ModelOutputError on failure."""
        ...


class WindowStartPolicy(Protocol):
    """Protocol for computing the window start when no prior release exists."""

    def __call__(self, now: datetime) -> datetime:
        """Return the window start for a run happening at ``now``."""
        ...


class CompositionStrategy(Protocol):
    """Protocol for release notes composition policies."""

    async def compose(self, title: str, window: ReleaseWindow, rewritten: list[RewrittenCommit]) -> ReleaseDocument:
        """Aggregate rewritten commits into one release document.

        Args:
            title: Title handed to the summarizer for the overall summary
            window: The commit window the document covers
            rewritten: One rewritten commit per commit in the window, in source order

        Returns:
            The composed release document
        """
        ...
