"""End-to-end tests of the release notes pipeline against in-memory GitHub and text generation doubles."""

import logging
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from _pytest.logging import LogCaptureFixture
from pytest import MonkeyPatch

from conftest import InMemoryGitHub, ScriptedTextGenerator, make_commit, make_commit_detail, make_release
from github_release_notes.configuration.models import CompositionPolicy, PipelineConfig
from github_release_notes.release_notes import driver
from github_release_notes.release_notes.driver import build_generator, manual_release_tag, run_release_notes_workflow
from github_release_notes.release_notes.models import PublishOutcome, ReleaseNotesStatus, TriggerContext, TriggerKind
from github_release_notes.utils.constants import NO_CHANGES_TEXT

TRIGGER = TriggerContext(kind=TriggerKind.MANUAL, tag="v1.3.0")


def seed_three_commits(github: InMemoryGitHub) -> None:
    github.commits = [
        make_commit("aaaaaaa1", "Add export -ft"),
        make_commit("bbbbbbb2", "Fix rounding -bf"),
        make_commit("ccccccc3", "Tidy"),
    ]
    github.details = {
        "aaaaaaa1": make_commit_detail("aaaaaaa1", "Add export -ft", [("export.py", "+def export(): ...")]),
        "bbbbbbb2": make_commit_detail("bbbbbbb2", "Fix rounding -bf", [("money.py", "-round(x)\n+round(x, 2)")]),
        "ccccccc3": make_commit_detail("ccccccc3", "Tidy", [("README.md", "+docs")]),
    }


def respond_by_file(system_prompt: str, prompt: str) -> str:
    for name, text in (("export.py", "Adds CSV export."), ("money.py", "Fixes rounding."), ("README.md", "Updates docs.")):
        if f"File: {name}" in prompt:
            return text
    return "Three improvements landed."


@pytest.mark.asyncio
async def test_first_release_is_created(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime) -> None:
    # Given a repository with no releases and three commits in the last 30 days
    seed_three_commits(github)
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    # When
    result = await generator.generate(TRIGGER)

    # Then
    assert result.status == ReleaseNotesStatus.SUCCESS
    assert result.outcome == PublishOutcome.CREATED
    assert result.commit_count == 3
    assert github.list_commits_calls == [{"since": "2024-04-01T12:00:00Z", "until": "2024-05-01T12:00:00Z"}]
    assert len(github.created) == 1
    body = github.created[0]["body"]
    assert body == result.generated_content
    assert "Three improvements landed." in body
    for line in ("- `aaaaaaa` Adds CSV export.", "- `bbbbbbb` Fixes rounding.", "- `ccccccc` Updates docs."):
        assert line in body


@pytest.mark.asyncio
async def test_rerun_for_same_tag_updates_release(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime) -> None:
    seed_three_commits(github)
    github.releases = [make_release(1, "v1.2.0", datetime(2024, 4, 20, tzinfo=UTC))]
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    first = await generator.generate(TRIGGER)
    second = await generator.generate(TRIGGER)

    assert (first.outcome, second.outcome) == (PublishOutcome.CREATED, PublishOutcome.UPDATED)
    assert len([r for r in github.releases if r.tag_name == "v1.3.0"]) == 1
    # The release being updated must not shrink its own window
    assert github.list_commits_calls[0] == github.list_commits_calls[1]
    assert github.list_commits_calls[1]["since"] == "2024-04-20T00:00:00Z"


@pytest.mark.asyncio
async def test_empty_window_publishes_nothing(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime) -> None:
    text_generator = ScriptedTextGenerator()
    generator = build_generator(pipeline_config, github, text_generator, clock=lambda: fixed_now)

    result = await generator.generate(TRIGGER)

    assert result.status == ReleaseNotesStatus.NO_CHANGES
    assert NO_CHANGES_TEXT in result.generated_content
    assert github.created == [] and github.updated == []
    assert text_generator.calls == []


@pytest.mark.asyncio
async def test_dry_run_does_not_publish(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime) -> None:
    seed_three_commits(github)
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    result = await generator.generate(TRIGGER, dry_run=True)

    assert result.status == ReleaseNotesStatus.DRY_RUN
    assert result.commit_count == 3
    assert github.created == []


@pytest.mark.asyncio
async def test_commit_list_failure_is_error_result(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime) -> None:
    github.list_commits_error = ValueError("GitHub 422 error in list_commits")
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(), clock=lambda: fixed_now)

    result = await generator.generate(TRIGGER)

    assert result.status == ReleaseNotesStatus.ERROR
    assert "Failed to fetch commits" in result.error
    assert github.created == []


@pytest.mark.asyncio
async def test_publish_failure_is_error_result(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime) -> None:
    seed_three_commits(github)
    github.publish_error = ValueError("GitHub 422 error in create_release")
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    result = await generator.generate(TRIGGER)

    assert result.status == ReleaseNotesStatus.ERROR
    assert "Failed to publish release for tag v1.3.0" in result.error


@pytest.mark.asyncio
async def test_failed_commit_detail_degrades_to_placeholder(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime) -> None:
    seed_three_commits(github)
    github.failing_details = {"bbbbbbb2"}
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    result = await generator.generate(TRIGGER)

    assert result.status == ReleaseNotesStatus.SUCCESS
    assert result.commit_count == 3
    assert "- `bbbbbbb` **[changes unavailable]**" in result.generated_content


@pytest.mark.asyncio
async def test_categorized_policy_and_artifact(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime, tmp_path: Path) -> None:
    seed_three_commits(github)
    pipeline_config.composition_policy = CompositionPolicy.CATEGORIZED
    pipeline_config.artifact_path = tmp_path / "release-notes.md"
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    result = await generator.generate(TRIGGER)

    content = pipeline_config.artifact_path.read_text(encoding="utf-8")
    assert content == result.generated_content
    assert result.artifact_path == str(pipeline_config.artifact_path)
    assert "#### Bug Fixes" in content
    assert "#### New Features" in content
    assert "#### Other Changes" in content
    assert "#### Improvements" not in content


@pytest.mark.asyncio
async def test_unwritable_artifact_is_not_reported(github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime, tmp_path: Path) -> None:
    # Given an artifact path that is a directory
    seed_three_commits(github)
    pipeline_config.artifact_path = tmp_path
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    # When
    result = await generator.generate(TRIGGER)

    # Then the release is still published but no artifact is reported
    assert result.status == ReleaseNotesStatus.SUCCESS
    assert result.artifact_path is None
    assert len(github.created) == 1


@pytest.mark.asyncio
async def test_dry_run_logs_body_as_field(
    github: InMemoryGitHub, pipeline_config: PipelineConfig, fixed_now: datetime, caplog: LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG)
    seed_three_commits(github)
    generator = build_generator(pipeline_config, github, ScriptedTextGenerator(respond_by_file), clock=lambda: fixed_now)

    result = await generator.generate(TRIGGER, dry_run=True)

    events = [r.msg for r in caplog.records if isinstance(r.msg, dict)]
    dry_run_events = [e for e in events if e.get("event") == "DRY RUN - release body would be"]
    assert len(dry_run_events) == 1
    assert dry_run_events[0]["body"] == result.generated_content


def test_manual_release_tag(fixed_now: datetime) -> None:
    assert manual_release_tag(fixed_now) == "v20240501120000"


@pytest.mark.asyncio
async def test_workflow_reports_client_creation_failure(pipeline_config: PipelineConfig, monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr(driver.GitHubKitAdapter, "create", AsyncMock(side_effect=ValueError("Could not find installation")))

    result = await run_release_notes_workflow(pipeline_config, TRIGGER)

    assert result.status == ReleaseNotesStatus.ERROR
    assert result.error == "Could not find installation"


@pytest.mark.asyncio
async def test_workflow_wires_real_text_client(github: InMemoryGitHub, pipeline_config: PipelineConfig, monkeypatch: MonkeyPatch) -> None:
    """The workflow talks to the chat-completions API through the configured transport."""
    import httpx

    seed_three_commits(github)
    monkeypatch.setattr(driver.GitHubKitAdapter, "create", AsyncMock(return_value=github))
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "Polished."}}]}))

    result = await run_release_notes_workflow(pipeline_config, TRIGGER, dry_run=True, transport=transport)

    assert result.status == ReleaseNotesStatus.DRY_RUN
    assert result.generated_content.count("Polished.") == 4
