"""Dart/Flutter ``pubspec.yaml`` version fetcher."""

import yaml

from autotag.exceptions import VersionParseError
from autotag.fetchers.base import VersionFetcher


class PubspecYamlFetcher(VersionFetcher):
    """Reads the top-level ``version`` key of ``pubspec.yaml``.

    The document is loaded with ``BaseLoader`` so scalars stay strings:
    ``version: 1.10`` must not turn into the float ``1.1``.
    """

    key = "pubspec.yaml"

    def parse_version(self, content: str, path: str) -> str:
        try:
            data = yaml.load(content, Loader=yaml.BaseLoader)  # nosec B506 # BaseLoader builds no objects
        except yaml.YAMLError as e:
            raise VersionParseError(f"malformed YAML: {e}", path=path) from e

        if not isinstance(data, dict):
            raise VersionParseError("expected a YAML mapping", path=path)

        version = data.get("version")
        if version is None:
            raise VersionParseError("no version key", path=path)
        if not isinstance(version, str):
            raise VersionParseError("version must be a scalar", path=path)
        return version
