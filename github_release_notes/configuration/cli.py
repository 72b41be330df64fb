"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Option
from typing_extensions import Annotated

from github_release_notes.configuration.driver import get_pipeline_config
from github_release_notes.configuration.exceptions import ConfigurationError
from github_release_notes.configuration.models import ArtifactMode, CompositionPolicy
from github_release_notes.release_notes.driver import manual_release_tag, run_release_notes_workflow
from github_release_notes.release_notes.models import ReleaseNotesStatus, TriggerContext, TriggerKind
from github_release_notes.release_notes.resolver import utc_now
from github_release_notes.utils.constants import DEFAULT_RELEASE_NOTES_PATH
from github_release_notes.utils.logging import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.command(name="generate")
def generate_cli(
    tag: Annotated[str | None, Option(help="Tag to publish release notes for. Defaults to a timestamp tag such as v20240501120000.")] = None,
    output: Annotated[Path, Option(envvar="RELEASE_NOTES_ARTIFACT_PATH", help="Path of the local release notes artifact.")] = Path(
        DEFAULT_RELEASE_NOTES_PATH
    ),
    append: Annotated[
        bool | None,
        Option("--append/--overwrite", help="Append to the artifact or overwrite it. Defaults to RELEASE_NOTES_ARTIFACT_MODE."),
    ] = None,
    dry_run: Annotated[bool, Option(help="Generate the release notes without publishing them.")] = False,
    policy: Annotated[CompositionPolicy | None, Option(case_sensitive=False, help="How rewritten commits are composed into the document.")] = None,
    repo: Annotated[str | None, Option(help="Repository name in owner/repo format. Defaults to the REPO environment variable.")] = None,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug mode.")] = False,
) -> None:
    """Generate release notes for the commits since the last release and publish them."""
    configure_logging(debug)
    artifact_mode = None
    if append is not None:
        artifact_mode = ArtifactMode.APPEND if append else ArtifactMode.OVERWRITE
    try:
        config = get_pipeline_config(
            repo=repo,
            composition_policy=policy,
            artifact_path=output,
            artifact_mode=artifact_mode,
            debug=debug,
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1) from e

    trigger = TriggerContext(kind=TriggerKind.MANUAL, tag=tag or manual_release_tag(utc_now()))
    typer.echo(f"Generating release notes for {config.github.repo} at tag {trigger.tag}")
    result = asyncio.run(run_release_notes_workflow(config, trigger, dry_run=dry_run))

    if result.status == ReleaseNotesStatus.ERROR:
        typer.echo(f"Release notes generation failed: {result.error}", err=True)
        raise typer.Exit(code=1)

    if result.status == ReleaseNotesStatus.NO_CHANGES:
        typer.echo("No changes since the last release, nothing was published")
    elif result.status == ReleaseNotesStatus.DRY_RUN:
        typer.echo(f"Dry run: release notes for {result.commit_count} commit(s) were not published")
    else:
        typer.echo(f"Release {result.tag} {result.outcome.value if result.outcome else 'published'} with {result.commit_count} commit(s)")
    if result.artifact_path:
        typer.echo(f"Release notes written to {Path(result.artifact_path).absolute()}")
    else:
        typer.echo("Release notes artifact was not written", err=True)


@typer_app.command(name="serve")
def serve_cli(
    host: Annotated[str, Option(envvar="WEBHOOK_HOST", help="Interface the webhook server binds to.")] = "127.0.0.1",
    port: Annotated[int, Option(envvar="WEBHOOK_PORT", help="Port the webhook server listens on.")] = 8000,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug mode.")] = False,
) -> None:
    """Serve the GitHub webhook endpoint that triggers release notes on new tags and releases."""
    import uvicorn

    from github_release_notes.webhook.app import create_app

    configure_logging(debug)
    uvicorn.run(create_app(), host=host, port=port, log_level="debug" if debug else "info")


if __name__ == "__main__":
    typer_app()
