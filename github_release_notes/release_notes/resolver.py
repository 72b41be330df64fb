"""Resolution of the commit window covered by a release note."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Awaitable, Callable

import structlog
from githubkit.exception import GitHubException

from github_release_notes.configuration.models import LookbackAnchor, PipelineConfig
from github_release_notes.utils.constants import DEFAULT_INSTALL_OFFSET_DAYS, DEFAULT_LOOKBACK_DAYS

from .models import ReleaseWindow, WindowStartPolicy

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]
ReleaseLookup = Callable[[], Awaitable[list[Any]]]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class DaysBeforeNow:
    """Window start policy: a fixed number of days before the run."""

    days: int = DEFAULT_LOOKBACK_DAYS

    def __call__(self, now: datetime) -> datetime:
        return now - timedelta(days=self.days)


@dataclass(frozen=True)
class InstallDateOffset:
    """Window start policy: midnight UTC of the install date plus a fixed offset.

    Without a known install date, the install date is taken to be
    ``fallback_days`` before the run.
    """

    install_date: date | None = None
    offset_days: int = DEFAULT_INSTALL_OFFSET_DAYS
    fallback_days: int = DEFAULT_LOOKBACK_DAYS

    def __call__(self, now: datetime) -> datetime:
        install_date = self.install_date or (now - timedelta(days=self.fallback_days)).date()
        return datetime.combine(install_date + timedelta(days=self.offset_days), time.min, tzinfo=UTC)


def build_window_start_policy(config: PipelineConfig) -> WindowStartPolicy:
    """Build the window start policy selected by the configuration."""
    if config.lookback_anchor == LookbackAnchor.INSTALL_DATE:
        return InstallDateOffset(
            install_date=config.install_date,
            offset_days=config.install_offset_days,
            fallback_days=config.lookback_days,
        )
    return DaysBeforeNow(days=config.lookback_days)


class WindowResolver:
    """Determines the time window of unreleased history."""

    def __init__(self, release_lookup: ReleaseLookup, start_policy: WindowStartPolicy, clock: Clock = utc_now) -> None:
        """Initialize with the release list lookup, the fallback start policy and a clock."""
        self.release_lookup = release_lookup
        self.start_policy = start_policy
        self.clock = clock

    async def find_last_release_date(self, current_tag: str | None = None) -> datetime | None:
        """Publish date of the most recent published release other than ``current_tag``.

        Drafts and releases without a publish date are ignored. A failing lookup
        is logged and treated as "no prior release".
        """
        try:
            releases = await self.release_lookup()
        except (GitHubException, ValueError) as e:
            logger.warning(
                "Could not look up previous releases, falling back to default lookback",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        candidates = [r for r in releases if not r.draft and r.published_at is not None and r.tag_name != current_tag]
        if not candidates:
            logger.info("No previous published release found", current_tag=current_tag)
            return None

        latest = max(candidates, key=lambda r: r.published_at)
        logger.info("Found previous release", tag_name=latest.tag_name, published_at=latest.published_at.isoformat())
        return latest.published_at

    async def resolve(self, current_tag: str | None = None) -> ReleaseWindow:
        """Resolve the window from the last release (or the fallback policy) up to now."""
        end = self.clock()
        start = await self.find_last_release_date(current_tag)
        if start is None:
            start = self.start_policy(end)
            logger.info("Using default lookback for window start", start=start.isoformat())
        if start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        if start > end:
            logger.warning("Window start is in the future, clamping to now", start=start.isoformat(), end=end.isoformat())
            start = end
        return ReleaseWindow(start=start, end=end)
