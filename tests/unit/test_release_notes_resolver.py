"""Unit tests for release window resolution."""

from datetime import UTC, date, datetime, timedelta

import pytest

from conftest import InMemoryGitHub, make_release
from github_release_notes.configuration.models import LookbackAnchor, PipelineConfig
from github_release_notes.release_notes.resolver import DaysBeforeNow, InstallDateOffset, WindowResolver, build_window_start_policy


@pytest.mark.asyncio
async def test_window_starts_at_last_published_release(github: InMemoryGitHub, fixed_now: datetime) -> None:
    github.releases = [
        make_release(1, "v1.0.0", datetime(2024, 3, 1, tzinfo=UTC)),
        make_release(2, "v1.1.0", datetime(2024, 4, 15, 9, 30, tzinfo=UTC)),
    ]
    resolver = WindowResolver(github.list_releases, DaysBeforeNow(30), clock=lambda: fixed_now)

    window = await resolver.resolve("v1.2.0")

    assert window.start == datetime(2024, 4, 15, 9, 30, tzinfo=UTC)
    assert window.end == fixed_now


@pytest.mark.asyncio
async def test_no_release_uses_default_lookback(github: InMemoryGitHub, fixed_now: datetime) -> None:
    """Without a prior release the window covers the last 30 days."""
    resolver = WindowResolver(github.list_releases, DaysBeforeNow(30), clock=lambda: fixed_now)

    window = await resolver.resolve("v1.0.0")

    assert window.start == fixed_now - timedelta(days=30)
    assert window.end == fixed_now


@pytest.mark.asyncio
async def test_current_tag_drafts_and_unpublished_are_ignored(github: InMemoryGitHub, fixed_now: datetime) -> None:
    github.releases = [
        make_release(1, "v1.0.0", datetime(2024, 3, 1, tzinfo=UTC)),
        make_release(2, "v1.1.0", datetime(2024, 4, 30, tzinfo=UTC)),
        make_release(3, "v1.1.1-draft", datetime(2024, 4, 29, tzinfo=UTC), draft=True),
        make_release(4, "v1.1.2", None),
    ]
    resolver = WindowResolver(github.list_releases, DaysBeforeNow(30), clock=lambda: fixed_now)

    window = await resolver.resolve(current_tag="v1.1.0")

    assert window.start == datetime(2024, 3, 1, tzinfo=UTC)


@pytest.mark.asyncio
async def test_release_lookup_failure_falls_back(github: InMemoryGitHub, fixed_now: datetime) -> None:
    github.list_releases_error = ValueError("GitHub 422 error in list_releases")
    resolver = WindowResolver(github.list_releases, DaysBeforeNow(7), clock=lambda: fixed_now)

    window = await resolver.resolve("v1.0.0")

    assert window.start == fixed_now - timedelta(days=7)


@pytest.mark.asyncio
async def test_future_start_is_clamped(github: InMemoryGitHub, fixed_now: datetime) -> None:
    resolver = WindowResolver(github.list_releases, InstallDateOffset(install_date=date(2024, 4, 25), offset_days=15), clock=lambda: fixed_now)

    window = await resolver.resolve("v1.0.0")

    assert window.start == window.end == fixed_now


@pytest.mark.asyncio
async def test_naive_release_date_is_treated_as_utc(github: InMemoryGitHub, fixed_now: datetime) -> None:
    github.releases = [make_release(1, "v1.0.0", datetime(2024, 4, 1, 8, 0))]
    resolver = WindowResolver(github.list_releases, DaysBeforeNow(30), clock=lambda: fixed_now)

    window = await resolver.resolve("v2.0.0")

    assert window.start == datetime(2024, 4, 1, 8, 0, tzinfo=UTC)


def test_install_date_offset(fixed_now: datetime) -> None:
    policy = InstallDateOffset(install_date=date(2024, 3, 1), offset_days=15)
    assert policy(fixed_now) == datetime(2024, 3, 16, tzinfo=UTC)


def test_install_date_offset_without_install_date(fixed_now: datetime) -> None:
    policy = InstallDateOffset(install_date=None, offset_days=15, fallback_days=30)
    # 2024-04-01 is 30 days before the run; plus 15 days
    assert policy(fixed_now) == datetime(2024, 4, 16, tzinfo=UTC)


def test_build_window_start_policy(pipeline_config: PipelineConfig) -> None:
    assert build_window_start_policy(pipeline_config) == DaysBeforeNow(30)

    pipeline_config.lookback_anchor = LookbackAnchor.INSTALL_DATE
    pipeline_config.install_date = date(2024, 1, 1)
    assert build_window_start_policy(pipeline_config) == InstallDateOffset(install_date=date(2024, 1, 1), offset_days=15, fallback_days=30)
