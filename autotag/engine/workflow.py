"""
Tagging workflow: turns a push into a version tag.

This is the glue between the hosting service and the fetch orchestrator.
Two entry points share it:

- ``handle_push``: a GitHub App webhook delivery. Settings come from
  ``.atc.yaml`` at the pushed commit; failures are reported to the
  repository as commit comments.
- ``run_ci``: a CI job. Settings come from the job environment and the old
  reference is the first parent of the built commit; failures are raised
  so the job fails.
"""

from datetime import UTC, datetime

import structlog

from autotag.config.settings import (
    CONFIG_FILE_NAME,
    TaggerSettings,
    load_settings,
    validate_settings,
)
from autotag.engine.orchestrator import FetchOrchestrator
from autotag.engine.types import FetchOutcome
from autotag.enums import Behavior
from autotag.exceptions import AutotagError, ConfigNotFoundError, ConfigurationError
from autotag.fetchers.registry import FetcherRegistry
from autotag.models.events import PushEvent
from autotag.providers.base import ContentProvider, GitHostClient, Tagger

log = structlog.get_logger(__name__)


class TaggingWorkflow:
    """Runs settings loading, version comparison and tag creation.

    Attributes:
        registry: Manifest fetchers, shared with the settings validator
        orchestrator: Version comparison engine
        config_path: Location of the repository configuration document
    """

    def __init__(
        self,
        registry: FetcherRegistry,
        orchestrator: FetchOrchestrator | None = None,
        config_path: str = CONFIG_FILE_NAME,
    ) -> None:
        self.registry = registry
        self.orchestrator = orchestrator or FetchOrchestrator(registry)
        self.config_path = config_path

    async def handle_push(self, event: PushEvent, client: GitHostClient) -> FetchOutcome | None:
        """Process one push webhook.

        Args:
            event: Parsed push payload
            client: Connected client for the pushed repository

        Returns:
            The fetch outcome when a comparison ran and, for a changed
            version, the tag was created; None when the push was skipped or
            failed (failures are commented on the pushed commit).
        """
        full_name = event.repository.full_name

        if event.deleted or event.created:
            log.info("push_skipped", repository=full_name, ref=event.ref, reason="branch created or deleted")
            return None

        new_provider = client.content_provider(event.after)
        settings = await self._settings_for_push(new_provider, client, event.after)
        if settings is None:
            return None

        branch = settings.branch or event.repository.default_branch
        if event.branch != branch:
            log.info("push_skipped", repository=full_name, ref=event.ref, watched_branch=branch)
            return None

        old_provider = client.content_provider(event.before)
        try:
            outcome = await self.orchestrator.fetch(settings, old_provider, new_provider, full_name)
        except AutotagError as e:
            log.error("fetch_version_failed", repository=full_name, kind=str(e.kind), error=str(e))
            await self._comment(client, event.after, f"can't detect a new version: {e}")
            return None

        if not outcome.changed:
            return outcome

        sha = event.before if settings.normalized_behavior is Behavior.BEFORE else event.after
        tagger = Tagger(
            name=event.pusher.name,
            email=event.pusher.email or "",
            date=datetime.now(UTC),
        )

        try:
            await client.create_tag(outcome.caption, outcome.caption, sha, tagger)
        except AutotagError as e:
            log.error("add_tag_failed", repository=full_name, tag=outcome.caption, error=str(e))
            await self._comment(client, sha, f"can't add tag to commit, error : {e}")
            return None

        await self._comment(client, sha, f'Added a new version for "{full_name}": "{outcome.caption}"')
        log.info("tag_created", repository=full_name, tag=outcome.caption, sha=sha)
        return outcome

    async def run_ci(self, settings: TaggerSettings, client: GitHostClient, commit_sha: str) -> FetchOutcome | None:
        """Compare a commit with its first parent and tag a version change.

        Args:
            settings: Overrides from the CI environment; empty values select
                auto-detection and the default behavior and template
            client: Connected client for the repository
            commit_sha: Commit built by the CI job

        Returns:
            The fetch outcome, or None when the commit has no parent

        Raises:
            ConfigValidationError: If the overrides break a validation rule
            AutotagError: If fetching, rendering or tagging fails
        """
        full_name = client.full_name
        validate_settings(settings, self.registry, require_complete=False)
        settings = settings.with_defaults()

        commit = await client.get_commit(commit_sha)
        parent_sha = commit.first_parent
        if parent_sha is None:
            log.info("no_parent_commit", repository=full_name, sha=commit_sha)
            return None

        outcome = await self.orchestrator.fetch(
            settings,
            client.content_provider(parent_sha),
            client.content_provider(commit_sha),
            full_name,
        )
        if not outcome.changed:
            return outcome

        sha = commit_sha if settings.normalized_behavior is Behavior.AFTER else parent_sha
        tagger = Tagger(name=commit.author_name, email=commit.author_email, date=datetime.now(UTC))
        await client.create_tag(outcome.caption, outcome.caption, sha, tagger)

        log.info("tag_created", repository=full_name, tag=outcome.caption, sha=sha)
        return outcome

    async def _settings_for_push(
        self,
        provider: ContentProvider,
        client: GitHostClient,
        sha: str,
    ) -> TaggerSettings | None:
        """Load settings; None when the configuration is broken (already reported)."""
        try:
            return await load_settings(provider, self.registry, self.config_path)
        except ConfigNotFoundError:
            log.info("config_not_found", repository=provider.full_name, fallback="auto-detect")
            return TaggerSettings().with_defaults()
        except ConfigurationError as e:
            log.warning("config_invalid", repository=provider.full_name, error=e.message)
            await self._comment(client, sha, e.message)
            return None

    async def _comment(self, client: GitHostClient, sha: str, body: str) -> None:
        # comment failures are logged, never raised
        try:
            await client.add_commit_comment(sha, body)
        except AutotagError as e:
            log.error("add_comment_failed", repository=client.full_name, sha=sha, error=str(e))
