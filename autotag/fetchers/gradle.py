"""Gradle version fetchers: ``gradle.properties`` and ``build.gradle``."""

import re

from autotag.exceptions import VersionParseError
from autotag.fetchers.base import VersionFetcher

# version = '1.2.3' | version "1.2.3" | version = "1.2.3"
_BUILD_GRADLE_RE = re.compile(r"""^\s*version\s*=?\s*(['"])(?P<version>[^'"\n]+)\1""", re.MULTILINE)


def parse_properties(content: str) -> dict[str, str]:
    """Parse ``key=value`` / ``key: value`` lines of a Java properties file.

    Comment lines (``#`` or ``!``) and blank lines are skipped. Continuation
    lines and escapes are not interpreted.
    """
    properties: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue

        match = re.match(r"([^=:\s]+)\s*[=:\s]\s*(.*)", line)
        if match:
            properties[match.group(1)] = match.group(2).strip()
        else:
            properties[line] = ""
    return properties


class GradlePropertiesFetcher(VersionFetcher):
    """Reads the ``version`` property of ``gradle.properties``."""

    key = "gradle.properties"

    def parse_version(self, content: str, path: str) -> str:
        properties = parse_properties(content)
        if "version" not in properties:
            raise VersionParseError("no version property", path=path)
        return properties["version"]


class BuildGradleFetcher(VersionFetcher):
    """Reads a top-level ``version`` assignment from ``build.gradle``."""

    key = "build.gradle"

    def parse_version(self, content: str, path: str) -> str:
        match = _BUILD_GRADLE_RE.search(content)
        if not match:
            raise VersionParseError("no quoted version declaration", path=path)
        return match.group("version")
