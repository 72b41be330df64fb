"""Release notes generation module."""

from .categories import CategoryDetector
from .composer import CategorizedComposer, FlatComposer
from .fetcher import CommitFetcher
from .generator import ReleaseNotesGenerator
from .markdown import MarkdownWriter
from .models import (
    Category,
    CommitRecord,
    CompositionStrategy,
    FileChange,
    PublishOutcome,
    ReleaseDocument,
    ReleaseNotesResult,
    ReleaseNotesStatus,
    ReleaseWindow,
    RewrittenCommit,
    TriggerContext,
    TriggerKind,
)
from .publisher import ReleasePublisher
from .resolver import DaysBeforeNow, InstallDateOffset, WindowResolver
from .rewriter import CommitMessageRewriter, UpdateSummarizer

__all__ = [
    "Category",
    "CommitRecord",
    "CompositionStrategy",
    "FileChange",
    "PublishOutcome",
    "ReleaseDocument",
    "ReleaseNotesResult",
    "ReleaseNotesStatus",
    "ReleaseWindow",
    "RewrittenCommit",
    "TriggerContext",
    "TriggerKind",
    "CategoryDetector",
    "CategorizedComposer",
    "FlatComposer",
    "CommitFetcher",
    "CommitMessageRewriter",
    "UpdateSummarizer",
    "MarkdownWriter",
    "ReleasePublisher",
    "DaysBeforeNow",
    "InstallDateOffset",
    "WindowResolver",
    "ReleaseNotesGenerator",
]
