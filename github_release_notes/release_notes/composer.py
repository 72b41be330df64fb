"""Composition policies turning rewritten commits into a release document."""

import structlog

from github_release_notes.configuration.models import CompositionPolicy, PipelineConfig
from github_release_notes.utils.constants import NO_CHANGES_TEXT

from .categories import CategoryDetector, parse_category_markers
from .models import Category, CompositionStrategy, ReleaseDocument, ReleaseWindow, RewrittenCommit
from .rewriter import UpdateSummarizer

logger = structlog.get_logger(__name__)


def no_changes_document(title: str, window: ReleaseWindow) -> ReleaseDocument:
    """Document for a window without commits; composed without any model call."""
    return ReleaseDocument(title=title, window_start=window.start, window_end=window.end, summary_text=NO_CHANGES_TEXT)


class FlatComposer:
    """Summarizes all rewritten commits together into one "Summary of Updates" section."""

    def __init__(self, summarizer: UpdateSummarizer) -> None:
        self.summarizer = summarizer

    async def compose(self, title: str, window: ReleaseWindow, rewritten: list[RewrittenCommit]) -> ReleaseDocument:
        if not rewritten:
            return no_changes_document(title, window)
        summary = await self.summarizer.summarize(title, [entry.text for entry in rewritten])
        logger.info("Composed flat release document", entries=len(rewritten))
        return ReleaseDocument(
            title=title,
            window_start=window.start,
            window_end=window.end,
            summary_text=summary,
            entries=list(rewritten),
        )


class CategorizedComposer:
    """Groups commits by category marker and summarizes each category on its own.

    Commits are routed on their raw message, not on the rewritten text.
    Commits without a marker are bucketed under the detector's catch-all
    category. An overall summary across the category sections is added when
    ``include_overall_summary`` is set.
    """

    def __init__(self, summarizer: UpdateSummarizer, detector: CategoryDetector, include_overall_summary: bool = True) -> None:
        self.summarizer = summarizer
        self.detector = detector
        self.include_overall_summary = include_overall_summary

    def group(self, rewritten: list[RewrittenCommit]) -> dict[Category, list[RewrittenCommit]]:
        """Route each commit to exactly one category, keeping source order within a category."""
        groups: dict[Category, list[RewrittenCommit]] = {category: [] for category in self.detector.ordered_categories()}
        for entry in rewritten:
            groups[self.detector.detect(entry.raw_message)].append(entry)
        return {category: entries for category, entries in groups.items() if entries}

    async def compose(self, title: str, window: ReleaseWindow, rewritten: list[RewrittenCommit]) -> ReleaseDocument:
        if not rewritten:
            return no_changes_document(title, window)

        sections: dict[Category, str] = {}
        for category, entries in self.group(rewritten).items():
            sections[category] = await self.summarizer.summarize(category.value, [entry.text for entry in entries])
            logger.debug("Summarized category", category=category.value, entries=len(entries))

        if self.include_overall_summary:
            summary = await self.summarizer.summarize(title, [f"{category.value}: {text}" for category, text in sections.items()])
        else:
            summary = "This release includes: " + ", ".join(category.value for category in sections) + "."

        logger.info("Composed categorized release document", entries=len(rewritten), categories=[c.value for c in sections])
        return ReleaseDocument(
            title=title,
            window_start=window.start,
            window_end=window.end,
            summary_text=summary,
            entries=list(rewritten),
            category_sections=sections,
        )


def build_composer(config: PipelineConfig, summarizer: UpdateSummarizer) -> CompositionStrategy:
    """Build the composition strategy selected by the configuration."""
    if config.composition_policy == CompositionPolicy.CATEGORIZED:
        markers = parse_category_markers(config.category_markers) if config.category_markers else None
        return CategorizedComposer(summarizer, CategoryDetector(markers), include_overall_summary=config.include_overall_summary)
    return FlatComposer(summarizer)
