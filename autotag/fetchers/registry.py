r"""Registry of version fetchers keyed by canonical manifest filename.

The registry is built once at process start and handed to the orchestrator
and the settings validator. Adding a manifest format means writing one
``VersionFetcher`` subclass and registering it here; the orchestrator does
not change.

Example:
    >>> registry = build_default_registry()
    >>> registry.resolve("backend/pom.xml")
    PomXmlFetcher(key='pom.xml')
    >>> registry.resolve("VERSION.txt", regex=r"release: (\S+)")
    CustomRegexFetcher(pattern='release: (\\S+)')
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import structlog

from autotag.fetchers.base import VersionFetcher
from autotag.fetchers.custom_regex import CustomRegexFetcher
from autotag.fetchers.dart import PubspecYamlFetcher
from autotag.fetchers.gradle import BuildGradleFetcher, GradlePropertiesFetcher
from autotag.fetchers.maven import PomXmlFetcher
from autotag.fetchers.npm import NpmrcFetcher, PackageJsonFetcher

if TYPE_CHECKING:
    from collections.abc import Iterator

log = structlog.get_logger(__name__)


class FetcherRegistry:
    """Mutable mapping of manifest filename to fetcher.

    Iteration is always in sorted key order so auto-detection picks the same
    manifest on every run.
    """

    def __init__(self) -> None:
        self._fetchers: dict[str, VersionFetcher] = {}

    def register(self, fetcher: VersionFetcher) -> None:
        """Register a fetcher under its ``key``, replacing any previous one."""
        if not fetcher.key:
            raise ValueError(f"{fetcher!r} has no key")
        self._fetchers[fetcher.key] = fetcher

    def get(self, key: str) -> VersionFetcher | None:
        """Get a fetcher by manifest filename."""
        return self._fetchers.get(key)

    def keys(self) -> list[str]:
        """Registered manifest filenames, sorted."""
        return sorted(self._fetchers)

    def resolve(self, path: str, regex: str = "") -> VersionFetcher:
        """Pick the fetcher for an explicit manifest path.

        Args:
            path: Repository-relative manifest path
            regex: Version pattern for the fallback fetcher

        Returns:
            The fetcher registered for the path's base filename, or a
            ``CustomRegexFetcher`` when none is registered.

        Raises:
            ConfigurationError: If the fallback pattern is invalid
        """
        fetcher = self._fetchers.get(PurePosixPath(path).name)
        if fetcher is not None:
            return fetcher

        log.info("using_custom_fetcher", path=path)
        return CustomRegexFetcher(regex)

    def auto_detect_fetchers(self) -> list[VersionFetcher]:
        """Fetchers tried in auto-detect mode, in sorted key order."""
        return [self._fetchers[key] for key in self.keys() if self._fetchers[key].auto_detect]

    def __contains__(self, key: object) -> bool:
        return key in self._fetchers

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._fetchers)


def build_default_registry() -> FetcherRegistry:
    """Create a registry holding every built-in manifest format."""
    registry = FetcherRegistry()
    for fetcher in (
        PomXmlFetcher(),
        BuildGradleFetcher(),
        GradlePropertiesFetcher(),
        PackageJsonFetcher(),
        PubspecYamlFetcher(),
        NpmrcFetcher(),
    ):
        registry.register(fetcher)
    return registry
