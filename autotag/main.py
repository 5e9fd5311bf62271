"""CLI entry point for autotag."""

import asyncio
import sys
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from autotag.config.settings import (
    CONFIG_FILE_NAME,
    AppSettings,
    CISettings,
    TaggerSettings,
    validate_settings,
)
from autotag.engine.orchestrator import FetchOrchestrator
from autotag.engine.types import FetchOutcome
from autotag.engine.workflow import TaggingWorkflow
from autotag.exceptions import AutotagError
from autotag.fetchers.registry import FetcherRegistry, build_default_registry
from autotag.providers.github_rest import GitHubHostClient
from autotag.providers.local import LocalDirectoryContentProvider
from autotag.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option("--log-level", default="INFO", help="Logging level")
@click.option("--json-logs/--console-logs", default=True, help="Log as JSON lines or for humans")
@click.pass_context
def cli(ctx: click.Context, log_level: str, json_logs: bool) -> None:
    """autotag: create a git tag whenever the project version changes."""
    configure_logging(log_level, json_output=json_logs)
    ctx.obj = {"registry": build_default_registry()}


@cli.command()
@click.pass_context
def ci(ctx: click.Context) -> None:
    """Tag the commit in COMMIT_SHA if it changed the project version.

    Reads GITHUB_TOKEN, GITHUB_REPOSITORY and COMMIT_SHA, plus the optional
    FILE_TYPE, BEHAVIOR, TEMPLATE and VERSION_REGEX overrides.
    """
    try:
        ci_settings = CISettings()  # type: ignore[call-arg]
    except ValidationError as e:
        click.echo(f"Error: invalid CI environment: {e}", err=True)
        sys.exit(1)

    try:
        outcome = asyncio.run(_run_ci(ci_settings, ctx.obj["registry"]))
    except AutotagError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("ci_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    if outcome is None:
        click.echo("Commit has no parent; nothing to compare")
    elif outcome.changed:
        click.echo(f"Added a new version for {ci_settings.github_repository!r}: {outcome.caption!r}")
    else:
        click.echo(f"Version unchanged ({outcome.new_version})")


async def _run_ci(ci_settings: CISettings, registry: FetcherRegistry) -> FetchOutcome | None:
    client = GitHubHostClient(
        ci_settings.github_token.get_secret_value(),
        owner=ci_settings.owner,
        repo=ci_settings.repo,
        base_url=ci_settings.github_api_url,
    )
    await client.connect()
    try:
        workflow = TaggingWorkflow(registry)
        return await workflow.run_ci(ci_settings.tagger_settings(), client, ci_settings.commit_sha)
    finally:
        await client.disconnect()


@cli.command()
@click.option("--host", default=None, help="Bind address (default: ATC_HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Bind port (default: ATC_PORT or 8000)")
def serve(host: str | None, port: int | None) -> None:
    """Run the GitHub App webhook server."""
    import uvicorn

    try:
        app_settings = AppSettings()
    except ValidationError as e:
        click.echo(f"Error: invalid server settings: {e}", err=True)
        sys.exit(1)

    uvicorn.run(
        "autotag.webhook_server:app",
        host=host or app_settings.host,
        port=port or app_settings.port,
        log_level=app_settings.log_level.lower(),
    )


@cli.command("check-config")
@click.argument("config_file", default=CONFIG_FILE_NAME, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def check_config(ctx: click.Context, config_file: Path) -> None:
    """Validate a local .atc.yaml the way the webhook will."""
    if not config_file.exists():
        click.echo(f"Error: no configuration found: {config_file}", err=True)
        sys.exit(1)

    try:
        settings = TaggerSettings.from_yaml_text(config_file.read_text(encoding="utf-8"))
        validate_settings(settings, ctx.obj["registry"])
    except AutotagError as e:
        click.echo(e.message, err=True)
        sys.exit(1)

    click.echo(f"OK: path={settings.path} behavior={settings.behavior} template={settings.template}")


@cli.command()
@click.option(
    "--old",
    "old_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Checkout of the old reference",
)
@click.option(
    "--new",
    "new_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Checkout of the new reference",
)
@click.option("--path", default="", help="Manifest path (default: auto-detect)")
@click.option("--template", default="", help="Caption template (default: v{{.Version}})")
@click.option("--regex", default="", help="Version pattern for unregistered manifests")
@click.pass_context
def detect(ctx: click.Context, old_dir: Path, new_dir: Path, path: str, template: str, regex: str) -> None:
    """Dry-run version detection between two local checkouts."""
    registry: FetcherRegistry = ctx.obj["registry"]
    settings = TaggerSettings(path=path, template=template, regex=regex)

    try:
        validate_settings(settings, registry, require_complete=False)
        old_provider = LocalDirectoryContentProvider(old_dir)
        new_provider = LocalDirectoryContentProvider(new_dir, repo=old_provider.repo)
        outcome = asyncio.run(
            FetchOrchestrator(registry).fetch(settings.with_defaults(), old_provider, new_provider, old_provider.full_name)
        )
    except AutotagError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if outcome.changed:
        click.echo(f"{outcome.source_path}: {outcome.old_version or '(none)'} -> {outcome.new_version}")
        click.echo(f"tag: {outcome.caption}")
    else:
        click.echo(f"{outcome.source_path}: unchanged ({outcome.new_version})")


if __name__ == "__main__":
    cli()
