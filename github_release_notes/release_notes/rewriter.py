"""AI rewriting of commits and AI summaries of rewritten commits."""

import asyncio

import structlog

from ..llm.client import ModelOutputError, TextGenerationError
from ..utils.constants import (
    COMMIT_REWRITE_MAX_TOKENS,
    COMMIT_REWRITE_PROMPT,
    COMMIT_REWRITE_SYSTEM_PROMPT,
    DEFAULT_MAX_CONCURRENCY,
    PLACEHOLDER_DETAILS_UNAVAILABLE,
    PLACEHOLDER_MESSAGE_UNAVAILABLE,
    PLACEHOLDER_NO_FILES,
    PLACEHOLDER_NO_SUMMARY,
    PLACEHOLDER_SERVICE_UNAVAILABLE,
    SUMMARY_MAX_TOKENS,
    SUMMARY_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
)
from .models import CommitRecord, RewrittenCommit, TextGenerator

logger = structlog.get_logger(__name__)


def build_commit_prompt(commit: CommitRecord) -> str:
    """Build the rewrite prompt from a commit's file list and bounded patch excerpts."""
    changes = "\n\n".join(f"File: {change.path}\nChanges:\n{change.patch_excerpt}" for change in commit.changed_files)
    return COMMIT_REWRITE_PROMPT.format(changes=changes)


class CommitMessageRewriter:
    """Turns a commit's diff into a polished one-paragraph description.

    Every commit yields exactly one RewrittenCommit. When the commit has no
    usable detail, or the text generation call fails, the text is a labeled
    placeholder and ``unavailable_reason`` says why. Nothing is retried here
    beyond the client's own rate limit retry.
    """

    def __init__(
        self,
        text_generator: TextGenerator,
        max_tokens: int = COMMIT_REWRITE_MAX_TOKENS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        """Initialize with a text generator, the output bound and the concurrency bound."""
        self.text_generator = text_generator
        self.max_tokens = max_tokens
        self.max_concurrency = max_concurrency

    def _placeholder(self, commit: CommitRecord, text: str, reason: str) -> RewrittenCommit:
        return RewrittenCommit(sha=commit.sha, raw_message=commit.raw_message, text=text, unavailable_reason=reason)

    async def rewrite(self, commit: CommitRecord) -> RewrittenCommit:
        """Rewrite one commit, substituting a placeholder on any failure."""
        if commit.detail_error:
            return self._placeholder(commit, PLACEHOLDER_DETAILS_UNAVAILABLE, commit.detail_error)
        if not commit.changed_files:
            return self._placeholder(commit, PLACEHOLDER_NO_FILES, "no files modified")

        try:
            text = await self.text_generator.generate(COMMIT_REWRITE_SYSTEM_PROMPT, build_commit_prompt(commit), self.max_tokens)
        except ModelOutputError:
            logger.warning("No usable rewrite returned for commit", sha=commit.sha)
            return self._placeholder(commit, PLACEHOLDER_MESSAGE_UNAVAILABLE, "empty model output")
        except TextGenerationError as e:
            logger.warning("Text generation failed for commit", sha=commit.sha, error=str(e))
            return self._placeholder(commit, PLACEHOLDER_SERVICE_UNAVAILABLE, "unavailable")

        logger.debug("Rewrote commit", sha=commit.sha, length=len(text))
        return RewrittenCommit(sha=commit.sha, raw_message=commit.raw_message, text=text)

    async def rewrite_all(self, commits: list[CommitRecord]) -> list[RewrittenCommit]:
        """Rewrite every commit with bounded concurrency, keeping source order."""
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _bounded(commit: CommitRecord) -> RewrittenCommit:
            async with semaphore:
                return await self.rewrite(commit)

        rewritten = await asyncio.gather(*(_bounded(commit) for commit in commits))
        placeholders = sum(1 for entry in rewritten if entry.is_placeholder)
        logger.info("Rewrote commits", total=len(rewritten), placeholders=placeholders)
        return list(rewritten)


class UpdateSummarizer:
    """Summarizes a group of rewritten commit messages into one narrative section."""

    def __init__(self, text_generator: TextGenerator, max_tokens: int = SUMMARY_MAX_TOKENS) -> None:
        """Initialize with a text generator and the output bound."""
        self.text_generator = text_generator
        self.max_tokens = max_tokens

    async def summarize(self, category: str, messages: list[str]) -> str:
        """Summarize ``messages`` for ``category``; returns a placeholder when that is not possible."""
        if not messages:
            return PLACEHOLDER_NO_SUMMARY
        prompt = SUMMARY_PROMPT.format(category=category, messages="\n".join(messages))
        try:
            return await self.text_generator.generate(SUMMARY_SYSTEM_PROMPT, prompt, self.max_tokens)
        except (ModelOutputError, TextGenerationError) as e:
            logger.warning("Summary unavailable", category=category, error=str(e))
            return PLACEHOLDER_NO_SUMMARY
