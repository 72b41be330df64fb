"""Main release notes generation orchestration."""

from pathlib import Path

import structlog

from ..configuration.models import ArtifactMode
from ..utils.constants import DEFAULT_RELEASE_TITLE
from .exceptions import ReleaseNotesError
from .fetcher import CommitFetcher
from .markdown import MarkdownWriter
from .models import (
    CompositionStrategy,
    ReleaseNotesResult,
    ReleaseNotesStatus,
    TriggerContext,
)
from .publisher import ReleasePublisher
from .resolver import WindowResolver
from .rewriter import CommitMessageRewriter

logger = structlog.get_logger(__name__)


class ReleaseNotesGenerator:
    """Orchestrates release notes generation as a pipeline of pluggable steps.

    Resolver -> Fetcher -> Rewriter -> Composer -> Publisher. Every step is
    handed in already built, so window, composition and category policies can
    change without touching this class.

    IMPORTANT: publishing is the only step that writes to GitHub and it runs
    once, after the document is fully assembled. A run that fails or is
    cancelled earlier leaves the remote release untouched.

    Empty windows short-circuit before publishing: the result is NO_CHANGES
    and carries the rendered "no changes" note, but no release is written.
    """

    def __init__(
        self,
        resolver: WindowResolver,
        fetcher: CommitFetcher,
        rewriter: CommitMessageRewriter,
        composer: CompositionStrategy,
        publisher: ReleasePublisher,
        writer: MarkdownWriter | None = None,
        title: str = DEFAULT_RELEASE_TITLE,
        artifact_path: Path | None = None,
        artifact_mode: ArtifactMode = ArtifactMode.OVERWRITE,
    ) -> None:
        """Initialize with the pipeline steps and the optional local artifact settings."""
        self.resolver = resolver
        self.fetcher = fetcher
        self.rewriter = rewriter
        self.composer = composer
        self.publisher = publisher
        self.writer = writer or MarkdownWriter()
        self.title = title
        self.artifact_path = artifact_path
        self.artifact_mode = artifact_mode

    def _write_artifact(self, content: str) -> str | None:
        """Write the local artifact, returning its path or None when nothing was written."""
        if self.artifact_path is None:
            return None
        try:
            self.writer.write_artifact(self.artifact_path, content, self.artifact_mode)
        except OSError as e:
            # The artifact is a convenience copy; the release itself is the record.
            logger.warning("Failed to write release notes artifact", path=str(self.artifact_path), error=str(e))
            return None
        return str(self.artifact_path)

    async def generate(self, trigger: TriggerContext, dry_run: bool = False) -> ReleaseNotesResult:
        """Generate release notes for the trigger's tag.

        Args:
            trigger: What started the run and which tag to publish under
            dry_run: If True, compose the notes but don't publish them

        Returns:
            Result of the generation process; failures are reported as ERROR with a cause
        """
        logger.info("Generating release notes", tag=trigger.tag, trigger=trigger.kind.value, dry_run=dry_run)
        try:
            window = await self.resolver.resolve(current_tag=trigger.tag)
            logger.info("Fetching commits", start=window.start.isoformat(), end=window.end.isoformat())

            commits = await self.fetcher.fetch_commits(window)

            if not commits:
                logger.info("No commits found in this period")
                document = await self.composer.compose(self.title, window, [])
                content = self.writer.render(document)
                artifact_path = self._write_artifact(content)
                return ReleaseNotesResult(
                    status=ReleaseNotesStatus.NO_CHANGES, tag=trigger.tag, generated_content=content, artifact_path=artifact_path
                )

            detailed = await self.fetcher.fetch_all_details(commits)
            rewritten = await self.rewriter.rewrite_all(detailed)

            logger.info("Composing release notes", commits=len(rewritten), composer=type(self.composer).__name__)
            document = await self.composer.compose(self.title, window, rewritten)
            content = self.writer.render(document)
            artifact_path = self._write_artifact(content)

            if dry_run:
                logger.info("Dry run mode - not publishing release")
                logger.debug("DRY RUN - release body would be", body=content)
                return ReleaseNotesResult(
                    status=ReleaseNotesStatus.DRY_RUN,
                    tag=trigger.tag,
                    commit_count=len(rewritten),
                    generated_content=content,
                    artifact_path=artifact_path,
                )

            outcome = await self.publisher.publish(trigger.tag, content)
            logger.info("Published release notes", tag=trigger.tag, outcome=outcome.value)
            return ReleaseNotesResult(
                status=ReleaseNotesStatus.SUCCESS,
                tag=trigger.tag,
                outcome=outcome,
                commit_count=len(rewritten),
                generated_content=content,
                artifact_path=artifact_path,
            )

        except ReleaseNotesError as e:
            logger.error("Release notes generation failed", tag=trigger.tag, error=str(e))
            return ReleaseNotesResult(status=ReleaseNotesStatus.ERROR, tag=trigger.tag, error=str(e))
        except Exception as e:
            logger.exception("Unexpected failure while generating release notes", tag=trigger.tag)
            return ReleaseNotesResult(status=ReleaseNotesStatus.ERROR, tag=trigger.tag, error=str(e))
