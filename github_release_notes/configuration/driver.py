"""Synchronous driver for configuration reconciliation for the CLI entry point."""

import asyncio
from pathlib import Path

from github_release_notes.configuration import reconcile
from github_release_notes.configuration.env import Settings, get_settings
from github_release_notes.configuration.models import ArtifactMode, CompositionPolicy, PipelineConfig


def get_pipeline_config(
    settings: Settings | None = None,
    repo: str | None = None,
    composition_policy: CompositionPolicy | None = None,
    artifact_path: Path | None = None,
    artifact_mode: ArtifactMode | None = None,
    debug: bool | None = None,
) -> PipelineConfig:
    """Synchronously get the reconciled pipeline configuration."""
    return asyncio.run(
        reconcile.reconcile_pipeline_configuration(
            settings=settings or get_settings(),
            cli_repo=repo,
            cli_composition_policy=composition_policy,
            cli_artifact_path=artifact_path,
            cli_artifact_mode=artifact_mode,
            cli_debug=debug,
        )
    )
