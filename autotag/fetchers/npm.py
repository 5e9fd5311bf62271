"""npm version fetchers: ``package.json`` and ``.npmrc``."""

import json
from typing import Any

from autotag.exceptions import VersionParseError
from autotag.fetchers.base import VersionFetcher
from autotag.fetchers.gradle import parse_properties

# keys npm reads the `npm init` default version from
_NPMRC_VERSION_KEYS = ("version", "init-version", "init.version")


def version_from_json(content: str, path: str) -> str:
    """Return the top-level ``"version"`` string of a JSON object."""
    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError as e:
        raise VersionParseError(f"malformed JSON: {e}", path=path) from e

    if not isinstance(data, dict):
        raise VersionParseError("expected a JSON object", path=path)

    version = data.get("version")
    if version is None:
        raise VersionParseError('no "version" field', path=path)
    if not isinstance(version, str):
        raise VersionParseError(f'"version" must be a string, got {type(version).__name__}', path=path)
    return version


class PackageJsonFetcher(VersionFetcher):
    """Reads the ``version`` field of ``package.json``."""

    key = "package.json"

    def parse_version(self, content: str, path: str) -> str:
        return version_from_json(content, path)


class NpmrcFetcher(VersionFetcher):
    """Reads a version from ``.npmrc``.

    JSON-shaped files are read like ``package.json``; otherwise the file is
    treated as ini-style ``key=value`` lines. Only used with an explicit path.
    """

    key = ".npmrc"
    auto_detect = False

    def parse_version(self, content: str, path: str) -> str:
        if content.lstrip().startswith("{"):
            return version_from_json(content, path)

        # ini comments may also start with ';'
        lines = [line for line in content.splitlines() if not line.lstrip().startswith(";")]
        properties = parse_properties("\n".join(lines))
        for key in _NPMRC_VERSION_KEYS:
            if key in properties:
                return properties[key].strip("\"'")

        raise VersionParseError("no version key", path=path)
