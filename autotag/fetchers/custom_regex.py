"""Generic fallback fetcher driven by a regular expression."""

import re

from autotag.exceptions import ConfigurationError, VersionParseError
from autotag.fetchers.base import VersionFetcher
from autotag.providers.base import ContentProvider

DEFAULT_VERSION_PATTERN = r"""version\s*[:=]\s*["']?([^"'\s]+)"""


class CustomRegexFetcher(VersionFetcher):
    """Extracts the first capture group of a pattern from any text file.

    Used for manifests no registered fetcher understands. The pattern comes
    from ``settings.regex``; without one, ``DEFAULT_VERSION_PATTERN`` finds
    ``version: x`` / ``version = "x"`` style declarations.
    """

    auto_detect = False

    def __init__(self, pattern: str = "") -> None:
        self.pattern = pattern or DEFAULT_VERSION_PATTERN
        try:
            self._compiled = re.compile(self.pattern, re.MULTILINE)
        except re.error as e:
            raise ConfigurationError(f"invalid version regex {self.pattern!r}: {e}") from e
        if self._compiled.groups < 1:
            raise ConfigurationError(f"version regex {self.pattern!r} has no capture group")

    async def get_version_using_default_path(self, provider: ContentProvider) -> str:
        raise VersionParseError("the regex fetcher has no default path")

    def parse_version(self, content: str, path: str) -> str:
        match = self._compiled.search(content)
        if not match:
            raise VersionParseError(f"pattern {self.pattern!r} does not match", path=path)
        return match.group(1) or ""

    def __repr__(self) -> str:
        return f"CustomRegexFetcher(pattern={self.pattern!r})"
