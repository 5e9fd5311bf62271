"""
Fetch orchestrator: decides whether a push changed the project version.

Given the repository settings and two content providers (the reference before
the push and the reference after it), the orchestrator reads the manifest
version at both references and renders a tag caption when they differ.

Dispatch modes:
    explicit:    ``settings.path`` is set. The fetcher registered for the
                 path's filename is used, or the regex fallback when none is.
    auto-detect: ``settings.path`` is empty. Registered fetchers are tried in
                 sorted key order at their default paths; the first one that
                 reads the new reference wins.

Error policy:
    A manifest missing at the old reference is normal (the push may have
    added it) and yields an empty old version. Everything else aborts in
    explicit mode. In auto-detect mode a failing candidate is skipped and
    only running out of candidates aborts.

The orchestrator performs no reporting of its own; errors are raised to the
workflow, which logs them and comments on the commit.
"""

import structlog

from autotag.config.settings import DEFAULT_TEMPLATE, TaggerSettings
from autotag.engine.types import FetchOutcome
from autotag.exceptions import (
    AutotagError,
    ContentNotFoundError,
    NoSupportedFormatError,
    VersionFetchError,
)
from autotag.fetchers.base import VersionFetcher
from autotag.fetchers.registry import FetcherRegistry
from autotag.providers.base import ContentProvider
from autotag.rendering.engine import CaptionRenderer

log = structlog.get_logger(__name__)


class FetchOrchestrator:
    """Compares manifest versions between two references.

    Stateless between calls: the same inputs always select the same fetcher
    and produce the same outcome.

    Attributes:
        registry: Fetchers available for dispatch
        renderer: Caption template renderer
    """

    def __init__(self, registry: FetcherRegistry, renderer: CaptionRenderer | None = None) -> None:
        self.registry = registry
        self.renderer = renderer or CaptionRenderer()

    async def fetch(
        self,
        settings: TaggerSettings,
        old_provider: ContentProvider,
        new_provider: ContentProvider,
        full_name: str,
    ) -> FetchOutcome:
        """Read both versions and render a caption if the version changed.

        Args:
            settings: Repository settings (path, template, regex)
            old_provider: Provider bound to the reference before the push
            new_provider: Provider bound to the reference after the push
            full_name: Repository full name, used in errors and logs

        Returns:
            FetchOutcome; ``caption`` is empty when the version is unchanged

        Raises:
            VersionFetchError: Explicit mode could not read a version
            NoSupportedFormatError: Auto-detect found no readable manifest
            TemplateError: The caption template failed to compile or render
        """
        if settings.path:
            old_version, new_version, source_path = await self._fetch_explicit(
                settings, old_provider, new_provider, full_name
            )
        else:
            old_version, new_version, source_path = await self._fetch_auto_detect(
                old_provider, new_provider, full_name
            )

        if new_version == old_version:
            log.info("version_unchanged", repository=full_name, version=new_version, path=source_path)
            return FetchOutcome.unchanged(new_version, source_path)

        log.info(
            "version_changed",
            repository=full_name,
            old_version=old_version,
            new_version=new_version,
            path=source_path,
        )
        caption = self.renderer.render(settings.template or DEFAULT_TEMPLATE, new_version, repository=full_name)

        return FetchOutcome(
            old_version=old_version,
            new_version=new_version,
            caption=caption,
            source_path=source_path,
        )

    async def _fetch_explicit(
        self,
        settings: TaggerSettings,
        old_provider: ContentProvider,
        new_provider: ContentProvider,
        full_name: str,
    ) -> tuple[str, str, str]:
        try:
            fetcher = self.registry.resolve(settings.path, settings.regex)
        except AutotagError as e:
            raise VersionFetchError(
                f'cannot select version fetcher for "{full_name}": {e}',
                repository=full_name,
                kind=e.kind,
            ) from e

        try:
            old_version = await fetcher.get_version(old_provider, settings)
        except ContentNotFoundError as e:
            log.info("old_version_not_found", repository=full_name, path=settings.path, reference=e.reference)
            old_version = ""
        except AutotagError as e:
            raise VersionFetchError(
                f'get prev version error for "{full_name}": {e}',
                repository=full_name,
                kind=e.kind,
            ) from e

        try:
            new_version = await fetcher.get_version(new_provider, settings)
        except AutotagError as e:
            raise VersionFetchError(
                f'get new version error for "{full_name}": {e}',
                repository=full_name,
                kind=e.kind,
            ) from e

        return old_version, new_version, settings.path

    async def _fetch_auto_detect(
        self,
        old_provider: ContentProvider,
        new_provider: ContentProvider,
        full_name: str,
    ) -> tuple[str, str, str]:
        tried: list[str] = []

        for fetcher in self.registry.auto_detect_fetchers():
            tried.append(fetcher.default_path)
            versions = await self._try_default_path(fetcher, old_provider, new_provider, full_name)
            if versions is not None:
                old_version, new_version = versions
                return old_version, new_version, fetcher.default_path

        raise NoSupportedFormatError(
            f'no supported manifest format found for "{full_name}" (tried: {", ".join(tried)})',
            repository=full_name,
        )

    async def _try_default_path(
        self,
        fetcher: VersionFetcher,
        old_provider: ContentProvider,
        new_provider: ContentProvider,
        full_name: str,
    ) -> tuple[str, str] | None:
        """Read one candidate at both references; None disqualifies it."""
        try:
            old_version = await fetcher.get_version_using_default_path(old_provider)
        except ContentNotFoundError:
            old_version = ""
        except AutotagError as e:
            log.info("fetcher_skipped", repository=full_name, path=fetcher.default_path, error=str(e))
            return None

        try:
            new_version = await fetcher.get_version_using_default_path(new_provider)
        except AutotagError as e:
            log.info("autofetcher_failed", repository=full_name, path=fetcher.default_path, error=str(e))
            return None

        return old_version, new_version
