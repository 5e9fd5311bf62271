"""
Configuration system using Pydantic for type-safe settings management.

Two kinds of configuration live here:

- ``TaggerSettings``: the per-repository ``.atc.yaml`` document that says
  which manifest to read, which side of a push to tag and how to build the
  tag caption. It is validated by ``validate_settings`` and every failure
  message is shown to the repository owner as a commit comment.
- ``AppSettings`` / ``CISettings``: process settings loaded from the
  environment for the webhook server and the CI command.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from autotag.enums import Behavior
from autotag.exceptions import (
    ConfigNotFoundError,
    ConfigurationError,
    ConfigValidationError,
    ContentNotFoundError,
)

if TYPE_CHECKING:
    from autotag.fetchers.registry import FetcherRegistry
    from autotag.providers.base import ContentProvider

log = structlog.get_logger(__name__)

CONFIG_FILE_NAME = ".atc.yaml"
DEFAULT_TEMPLATE = "v{{.Version}}"
VERSION_PLACEHOLDER = "{{.version}}"

# {{.version}}, {{ .Version }}, {{ version }} and the trim-marker variants
_PLACEHOLDER_RE = re.compile(r"\{\{-?\s*\.?[Vv]ersion\s*-?\}\}")


class TaggerSettings(BaseModel):
    """Per-repository tagging configuration read from ``.atc.yaml``.

    An empty ``path`` selects auto-detection across the registered manifest
    formats. ``regex`` is only used when ``path`` names a file no registered
    fetcher understands.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    path: str = Field(default="", description="Repository-relative manifest path; empty means auto-detect")
    behavior: str = Field(default="", description="Tag target: 'before' or 'after' the push")
    template: str = Field(default="", description="Caption template containing the version placeholder")
    branch: str = Field(default="", description="Branch to watch; empty means the default branch")
    regex: str = Field(default="", description="Version pattern for manifests without a registered fetcher")

    @field_validator("path", "behavior", "template", "branch", "regex", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        """YAML keys with no value load as None."""
        if value is None:
            return ""
        if isinstance(value, int | float):
            return str(value)
        return value

    @property
    def normalized_behavior(self) -> Behavior:
        """Behavior enum; anything other than 'before' tags the new commit."""
        if self.behavior.strip().lower() == Behavior.BEFORE.value:
            return Behavior.BEFORE
        return Behavior.AFTER

    @property
    def file_name(self) -> str:
        """Base filename of ``path`` (trailing slashes ignored)."""
        if not self.path:
            return ""
        return PurePosixPath(self.path).name

    def with_defaults(self) -> TaggerSettings:
        """Return a copy where an unset behavior or template gets its default."""
        return self.model_copy(
            update={
                "behavior": self.behavior or Behavior.AFTER.value,
                "template": self.template or DEFAULT_TEMPLATE,
            }
        )

    @classmethod
    def from_yaml_text(cls, content: str) -> TaggerSettings:
        """Parse settings from the text of a ``.atc.yaml`` document.

        Raises:
            ConfigurationError: If the YAML is malformed or not a mapping
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"error {CONFIG_FILE_NAME}; invalid YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"error {CONFIG_FILE_NAME}; configuration must be a YAML mapping")

        try:
            return cls(**{str(k): v for k, v in data.items()})
        except ValidationError as e:
            raise ConfigurationError(f"error {CONFIG_FILE_NAME}; invalid field types: {e}") from e


def validate_settings(
    settings: TaggerSettings,
    registry: FetcherRegistry,
    require_complete: bool = True,
) -> None:
    """Check settings against the configuration rules.

    Rules are applied in order and the first failure wins.

    Args:
        settings: Settings to check
        registry: Registry of known manifest fetchers
        require_complete: Require path, behavior and template to be set.
            Disabled for CI overrides, where empty values mean defaults.

    Raises:
        ConfigValidationError: Describing the rule that failed
    """
    path = settings.path

    if not path:
        if require_complete:
            raise ConfigValidationError(f'error {CONFIG_FILE_NAME}; path = ""; check your configurate file')
    else:
        if path.startswith("/"):
            raise ConfigValidationError(f'error {CONFIG_FILE_NAME}; path has prefix "/"')
        if "//" in path:
            raise ConfigValidationError(f'error {CONFIG_FILE_NAME}; path has "//"')
        if settings.file_name not in registry and not settings.regex:
            suffixes = " or ".join(f'"{key}"' for key in registry.keys())
            raise ConfigValidationError(f"error {CONFIG_FILE_NAME}: path no has suffix {suffixes}")

    behavior = settings.behavior.strip().lower()
    if not behavior:
        if require_complete:
            raise ConfigValidationError(f'error {CONFIG_FILE_NAME}; behavior = ""; check your configurate file')
    elif behavior not in (Behavior.BEFORE.value, Behavior.AFTER.value):
        raise ConfigValidationError(f'error {CONFIG_FILE_NAME}: behavior no contains "before" or "after"')

    if not settings.template:
        if require_complete:
            raise ConfigValidationError(f'error {CONFIG_FILE_NAME}; template = ""; check your configurate file')
    elif not _PLACEHOLDER_RE.search(settings.template):
        raise ConfigValidationError(f'error {CONFIG_FILE_NAME}: template no contains "{VERSION_PLACEHOLDER}"')


async def load_settings(
    provider: ContentProvider,
    registry: FetcherRegistry,
    config_path: str = CONFIG_FILE_NAME,
) -> TaggerSettings:
    """Fetch, parse and validate the repository configuration.

    Args:
        provider: Content provider bound to the new reference
        registry: Registry used for the manifest filename rule
        config_path: Location of the configuration document

    Returns:
        Validated settings

    Raises:
        ConfigNotFoundError: If the document does not exist at the reference
        ConfigurationError: If the document cannot be parsed
        ConfigValidationError: If the document breaks a validation rule
    """
    try:
        content = await provider.get_file_content(config_path)
    except ContentNotFoundError as e:
        raise ConfigNotFoundError(
            f"no configuration found: {config_path} is missing at {provider.reference}",
            repository=provider.full_name,
        ) from e

    settings = TaggerSettings.from_yaml_text(content)
    validate_settings(settings, registry)
    log.debug("settings_loaded", repository=provider.full_name, path=settings.path, behavior=settings.behavior)
    return settings


class AppSettings(BaseSettings):
    """Webhook server settings, read from ``ATC_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ATC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_id: int | None = Field(default=None, description="GitHub App id")
    pem_data: SecretStr | None = Field(default=None, description="GitHub App private key (PEM text)")
    pem_path: str | None = Field(default=None, description="Path to the GitHub App private key file")
    github_base_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    config_path: str = Field(default=CONFIG_FILE_NAME, description="Repository configuration file")
    log_level: str = Field(default="INFO", description="Minimum log level")
    host: str = Field(default="0.0.0.0", description="Bind address for the webhook server")  # nosec B104
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port for the webhook server")

    def private_key(self) -> str:
        """Return the App private key, preferring inline PEM data over a file.

        Raises:
            ConfigurationError: If neither source is configured or readable
        """
        if self.pem_data is not None and self.pem_data.get_secret_value():
            log.info("pem_source", source="environment")
            return self.pem_data.get_secret_value()

        if not self.pem_path:
            raise ConfigurationError("GitHub App private key not configured: set ATC_PEM_DATA or ATC_PEM_PATH")

        try:
            data = Path(self.pem_path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read GitHub App private key: {self.pem_path}") from e

        log.info("pem_source", source="file", path=self.pem_path)
        return data


class CISettings(BaseSettings):
    """CI job settings, read from the variables a workflow step exports."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    github_token: SecretStr = Field(..., description="Token with contents:write on the repository")
    github_repository: str = Field(..., description="Repository full name, owner/repo")
    commit_sha: str = Field(..., description="Commit to compare against its first parent")
    github_api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    file_type: str = Field(default="", description="Manifest path; empty means auto-detect")
    behavior: str = Field(default="", description="'before' or 'after'")
    template: str = Field(default="", description="Caption template")
    version_regex: str = Field(default="", description="Version pattern for unregistered manifests")

    @field_validator("github_repository")
    @classmethod
    def _check_full_name(cls, value: str) -> str:
        owner, _, repo = value.partition("/")
        if not owner or not repo or "/" in repo:
            raise ValueError(f"expected owner/repo, got: {value!r}")
        return value

    @property
    def owner(self) -> str:
        return self.github_repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.github_repository.split("/", 1)[1]

    def tagger_settings(self) -> TaggerSettings:
        """Settings overrides carried by the environment."""
        return TaggerSettings(
            path=self.file_type,
            behavior=self.behavior,
            template=self.template,
            regex=self.version_regex,
        )
