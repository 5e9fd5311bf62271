"""
Abstract base class for version fetchers.

A fetcher knows one manifest format. It reads the manifest through a
``ContentProvider`` and extracts the declared version string. Retrieval
failures surface as ``ContentNotFoundError`` (raised by the provider) and
format failures as ``VersionParseError``, so the orchestrator can treat the
two differently.
"""

from abc import ABC, abstractmethod

import structlog

from autotag.config.settings import TaggerSettings
from autotag.exceptions import VersionParseError
from autotag.providers.base import ContentProvider

log = structlog.get_logger(__name__)


class VersionFetcher(ABC):
    """Extracts a version from one manifest format.

    Attributes:
        key: Canonical manifest filename the fetcher is registered under.
        auto_detect: Whether auto-detection should try this fetcher.
    """

    key: str = ""
    auto_detect: bool = True

    @property
    def default_path(self) -> str:
        """Path used in auto-detect mode: the manifest at the repository root."""
        return self.key

    async def get_version(self, provider: ContentProvider, settings: TaggerSettings) -> str:
        """Read the manifest at ``settings.path`` and return its version.

        Raises:
            ContentNotFoundError: If the manifest is absent at the reference.
            VersionParseError: If the manifest holds no usable version.
        """
        return await self._fetch(provider, settings.path)

    async def get_version_using_default_path(self, provider: ContentProvider) -> str:
        """Read the manifest at the format's canonical path and return its version."""
        return await self._fetch(provider, self.default_path)

    async def _fetch(self, provider: ContentProvider, path: str) -> str:
        content = await provider.get_file_content(path)
        version = self.parse_version(content, path).strip()
        if not version:
            raise VersionParseError("version is empty", path=path)
        log.debug("version_extracted", fetcher=self.key or type(self).__name__, path=path, version=version)
        return version

    @abstractmethod
    def parse_version(self, content: str, path: str) -> str:
        """Extract the version from manifest text.

        Args:
            content: Raw manifest text.
            path: Path the text was read from (for error messages).

        Raises:
            VersionParseError: If the content is malformed or has no version.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"
