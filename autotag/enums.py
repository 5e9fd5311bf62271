"""Enumerations shared across autotag."""

from enum import Enum


class Behavior(str, Enum):
    """Which side of a push receives the version tag.

    - before: the commit the push started from
    - after: the commit the push ended on
    """

    BEFORE = "before"
    AFTER = "after"

    def __str__(self) -> str:
        return self.value


class ErrorKind(str, Enum):
    """Classification tag carried by every autotag exception.

    Callers match on the kind instead of the concrete class, so a wrapped
    error keeps the classification of the failure it wraps.
    """

    CONFIG_INVALID = "config-invalid"
    CONFIG_ABSENT = "config-absent"
    NOT_FOUND = "not-found"
    PARSE = "parse"
    NO_SUPPORTED_FORMAT = "no-supported-format"
    TEMPLATE = "template"
    EXTERNAL = "external"
    INTERNAL = "internal"

    def __str__(self) -> str:
        return self.value
