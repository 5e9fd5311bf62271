"""Custom exception hierarchy for autotag.

Every exception carries an ``ErrorKind`` tag. The fetch orchestrator uses the
tag to decide whether a failure can be tolerated (a manifest that did not
exist yet at the old reference) or must abort the run.

Exception Hierarchy:
    AutotagError (base)
    ├── ConfigurationError
    │   ├── ConfigValidationError
    │   └── ConfigNotFoundError
    ├── ContentNotFoundError
    ├── VersionParseError
    ├── NoSupportedFormatError
    ├── TemplateError
    ├── VersionFetchError
    └── ExternalServiceError

Example Usage:
    >>> from autotag.exceptions import ContentNotFoundError
    >>> try:
    ...     content = await provider.get_file_content("pom.xml")
    ... except ContentNotFoundError as e:
    ...     log.info("manifest_missing", path=e.path, reference=e.reference)
"""

from autotag.enums import ErrorKind


class AutotagError(Exception):
    """Base exception for all autotag errors.

    Attributes:
        message: Human-readable error description
        repository: Full name of the repository the error relates to, if known
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, repository: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            repository: Repository full name ("owner/repo")
        """
        self.message = message
        self.repository = repository
        super().__init__(message)


class ConfigurationError(AutotagError):
    """Configuration-related errors.

    Raised when the repository configuration or the process environment
    cannot be read or parsed.

    Examples:
        - Invalid YAML syntax in .atc.yaml
        - .atc.yaml is a list or a scalar
        - GitHub App private key not configured
        - Invalid version regex
    """

    kind = ErrorKind.CONFIG_INVALID


class ConfigValidationError(ConfigurationError):
    """The configuration document is present but breaks a validation rule.

    The message is posted verbatim as a commit comment, so it must make sense
    without any other context.
    """


class ConfigNotFoundError(ConfigurationError):
    """No configuration document exists at the inspected reference."""

    kind = ErrorKind.CONFIG_ABSENT


class ContentNotFoundError(AutotagError):
    """A file is absent or unreadable at a specific reference.

    Attributes:
        path: Repository-relative path that was requested
        reference: Commit SHA or branch the request was bound to
        status_code: HTTP status returned by the hosting API, if any
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str,
        path: str | None = None,
        reference: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            path: Requested file path
            reference: Reference the lookup was made against
            status_code: HTTP status code (if applicable)
        """
        self.path = path
        self.reference = reference
        self.status_code = status_code

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


class VersionParseError(AutotagError):
    """Manifest content exists but no version could be extracted from it.

    Attributes:
        path: Path of the manifest that failed to parse
    """

    kind = ErrorKind.PARSE

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)
        self.message = message


class NoSupportedFormatError(AutotagError):
    """Auto-detection found no readable manifest at the new reference."""

    kind = ErrorKind.NO_SUPPORTED_FORMAT


class TemplateError(AutotagError):
    """Caption template failed to compile or render.

    Attributes:
        stage: "syntax" when the template could not be parsed,
            "execution" when rendering it failed
    """

    kind = ErrorKind.TEMPLATE

    def __init__(self, message: str, stage: str, repository: str | None = None) -> None:
        self.stage = stage
        super().__init__(message, repository=repository)


class VersionFetchError(AutotagError):
    """A version lookup failed in a way the orchestrator does not tolerate.

    Wraps the underlying autotag error (available as ``__cause__``) and copies
    its kind so callers can still tell a missing manifest from a broken one.
    """

    def __init__(self, message: str, repository: str | None = None, kind: ErrorKind = ErrorKind.INTERNAL) -> None:
        super().__init__(message, repository=repository)
        self.kind = kind


class ExternalServiceError(AutotagError):
    """Communication with the hosting API failed.

    Attributes:
        status_code: HTTP status code (if applicable)
    """

    kind = ErrorKind.EXTERNAL

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message
