"""Version fetchers, one per supported manifest format.

Key Components:
    - VersionFetcher: Abstract base for a manifest format
    - FetcherRegistry: Filename-keyed registry with regex fallback
    - build_default_registry: Registry with every built-in format

Supported manifests: pom.xml, build.gradle, gradle.properties, package.json,
pubspec.yaml and .npmrc, plus a regex fallback for anything else.
"""

from autotag.fetchers.base import VersionFetcher
from autotag.fetchers.custom_regex import CustomRegexFetcher
from autotag.fetchers.registry import FetcherRegistry, build_default_registry

__all__ = [
    "CustomRegexFetcher",
    "FetcherRegistry",
    "VersionFetcher",
    "build_default_registry",
]
