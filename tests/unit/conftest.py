"""Fixtures for unit tests."""

import asyncio
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any, Callable, Generator

import pytest
import structlog

from github_release_notes.configuration.models import GitHubConfig, PipelineConfig, TextGenerationConfig
from github_release_notes.github.abc import GitHubClientBase
from github_release_notes.llm.client import ModelOutputError, TextGenerationError


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


def make_release(
    release_id: int,
    tag_name: str,
    published_at: datetime | None,
    draft: bool = False,
    body: str = "",
) -> SimpleNamespace:
    """Build an object shaped like a githubkit Release for the attributes the pipeline reads."""
    return SimpleNamespace(id=release_id, tag_name=tag_name, name=f"Release {tag_name}", body=body, draft=draft, published_at=published_at)


def make_commit(sha: str, message: str) -> dict[str, Any]:
    """Build a raw list-commits entry."""
    return {"sha": sha, "commit": {"message": message}}


def make_commit_detail(sha: str, message: str, files: list[tuple[str, str | None]]) -> dict[str, Any]:
    """Build a raw get-commit response with (filename, patch) file entries."""
    return {
        "sha": sha,
        "commit": {"message": message},
        "files": [{"filename": name, "patch": patch} for name, patch in files],
    }


class InMemoryGitHub(GitHubClientBase):
    """GitHub host double keeping releases in memory and serving canned commits."""

    def __init__(
        self,
        commits: list[dict[str, Any]] | None = None,
        details: dict[str, dict[str, Any]] | None = None,
        releases: list[SimpleNamespace] | None = None,
    ) -> None:
        self.commits = commits or []
        self.details = details or {}
        self.releases = releases or []
        self.failing_details: set[str] = set()
        self.list_commits_error: Exception | None = None
        self.list_releases_error: Exception | None = None
        self.publish_error: Exception | None = None
        self.list_commits_calls: list[dict[str, Any]] = []
        self.created: list[dict[str, Any]] = []
        self.updated: list[tuple[int, str]] = []

    async def list_releases(self) -> list[Any]:
        if self.list_releases_error is not None:
            raise self.list_releases_error
        return list(self.releases)

    async def find_release_by_tag(self, tag_name: str) -> Any | None:
        if self.publish_error is not None:
            raise self.publish_error
        return next((release for release in self.releases if release.tag_name == tag_name), None)

    async def create_release(self, tag_name: str, name: str, body: str, draft: bool = False, prerelease: bool = False) -> Any:
        release = make_release(len(self.releases) + 1, tag_name, datetime.now(UTC), draft=draft, body=body)
        release.name = name
        self.releases.append(release)
        self.created.append({"tag_name": tag_name, "name": name, "body": body, "draft": draft, "prerelease": prerelease})
        return release

    async def update_release_body(self, release_id: int, body: str) -> Any:
        release = next(release for release in self.releases if release.id == release_id)
        release.body = body
        self.updated.append((release_id, body))
        return release

    async def list_commits(self, since: str | None = None, until: str | None = None) -> list[dict[str, Any]]:
        self.list_commits_calls.append({"since": since, "until": until})
        if self.list_commits_error is not None:
            raise self.list_commits_error
        return list(self.commits)

    async def get_commit(self, commit_sha: str) -> dict[str, Any]:
        if commit_sha in self.failing_details:
            raise ValueError(f"GitHub 422 error in get_commit for {commit_sha}")
        return self.details[commit_sha]


class ScriptedTextGenerator:
    """Text generator double answering through a function of the prompt."""

    def __init__(self, respond: Callable[[str, str], str] | None = None) -> None:
        self.respond = respond or (lambda system_prompt, prompt: "Generated text.")
        self.calls: list[dict[str, Any]] = []

    async def generate(self, system_prompt: str, prompt: str, max_tokens: int) -> str:
        self.calls.append({"system_prompt": system_prompt, "prompt": prompt, "max_tokens": max_tokens})
        return self.respond(system_prompt, prompt)


class InFlightCounter:
    """Records how many calls overlap and the order in which they complete."""

    def __init__(self) -> None:
        self.current = 0
        self.peak = 0
        self.completed: list[str] = []

    async def hold(self, key: str, delay: float) -> None:
        self.current += 1
        self.peak = max(self.peak, self.current)
        try:
            await asyncio.sleep(delay)
        finally:
            self.current -= 1
            self.completed.append(key)


class SlowGitHub(InMemoryGitHub):
    """In-memory GitHub whose commit detail requests take a per-commit delay."""

    def __init__(self, delays: dict[str, float], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.delays = delays
        self.counter = InFlightCounter()

    async def get_commit(self, commit_sha: str) -> dict[str, Any]:
        await self.counter.hold(commit_sha, self.delays.get(commit_sha, 0.0))
        return await super().get_commit(commit_sha)


class SlowTextGenerator(ScriptedTextGenerator):
    """Scripted text generator that waits before answering, keyed by a function of the prompt."""

    def __init__(self, key_for: Callable[[str], str], delays: dict[str, float], respond: Callable[[str, str], str] | None = None) -> None:
        super().__init__(respond)
        self.key_for = key_for
        self.delays = delays
        self.counter = InFlightCounter()

    async def generate(self, system_prompt: str, prompt: str, max_tokens: int) -> str:
        key = self.key_for(prompt)
        await self.counter.hold(key, self.delays.get(key, 0.0))
        return await super().generate(system_prompt, prompt, max_tokens)


def raise_unavailable(system_prompt: str, prompt: str) -> str:
    raise TextGenerationError("Text generation request failed: ConnectTimeout")


def raise_empty_output(system_prompt: str, prompt: str) -> str:
    raise ModelOutputError("Text generation response has no content at choices[0].message.content")


@pytest.fixture
def github() -> InMemoryGitHub:
    return InMemoryGitHub()


@pytest.fixture
def text_generator() -> ScriptedTextGenerator:
    return ScriptedTextGenerator()


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    """A resolved configuration pointing at a fake repository."""
    return PipelineConfig(
        github=GitHubConfig(repo="octo/widgets", pat_token="ghp_test"),
        text_generation=TextGenerationConfig(api_key="sk-test", api_url="https://llm.example.test/v1"),
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)
