"""Builds the release notes pipeline from a resolved configuration and runs it."""

from datetime import datetime

import httpx
import structlog

from ..configuration.models import PipelineConfig
from ..github.abc import GitHubClientBase
from ..github.adapter import GitHubKitAdapter
from ..llm.client import ChatCompletionsClient
from ..utils.constants import MANUAL_TAG_FORMAT
from .composer import build_composer
from .fetcher import CommitFetcher
from .generator import ReleaseNotesGenerator
from .models import ReleaseNotesResult, ReleaseNotesStatus, TextGenerator, TriggerContext
from .publisher import ReleasePublisher
from .resolver import Clock, WindowResolver, build_window_start_policy, utc_now
from .rewriter import CommitMessageRewriter, UpdateSummarizer

logger = structlog.get_logger(__name__)


def manual_release_tag(now: datetime) -> str:
    """Tag used by manual runs that do not name one, e.g. v20240501120000."""
    return now.strftime(MANUAL_TAG_FORMAT)


def build_generator(
    config: PipelineConfig,
    adapter: GitHubClientBase,
    text_generator: TextGenerator,
    clock: Clock = utc_now,
) -> ReleaseNotesGenerator:
    """Wire the pipeline steps selected by the configuration around the given services."""
    summarizer = UpdateSummarizer(text_generator)
    return ReleaseNotesGenerator(
        resolver=WindowResolver(adapter.list_releases, build_window_start_policy(config), clock=clock),
        fetcher=CommitFetcher(adapter, patch_excerpt_max_chars=config.patch_excerpt_max_chars, max_concurrency=config.max_concurrency),
        rewriter=CommitMessageRewriter(text_generator, max_concurrency=config.max_concurrency),
        composer=build_composer(config, summarizer),
        publisher=ReleasePublisher(adapter),
        artifact_path=config.artifact_path,
        artifact_mode=config.artifact_mode,
    )


async def run_release_notes_workflow(
    config: PipelineConfig,
    trigger: TriggerContext,
    dry_run: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ReleaseNotesResult:
    """Run one release notes invocation end to end.

    Creates the GitHub adapter and the text generation client from the
    configuration, runs the pipeline and closes the text generation client.
    """
    try:
        adapter = await GitHubKitAdapter.create(config.github, timeout=config.http_timeout_seconds)
    except (ValueError, RuntimeError) as e:
        logger.error("Failed to create GitHub client", repo=config.github.repo, error=str(e))
        return ReleaseNotesResult(status=ReleaseNotesStatus.ERROR, tag=trigger.tag, error=str(e))

    async with ChatCompletionsClient.from_config(config.text_generation, timeout=config.http_timeout_seconds, transport=transport) as text_client:
        generator = build_generator(config, adapter, text_client)
        return await generator.generate(trigger, dry_run=dry_run)
