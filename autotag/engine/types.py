"""Result types produced by the fetch orchestrator."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Outcome of comparing the manifest version at two references.

    Attributes:
        old_version: Version at the old reference; empty when the manifest
            did not exist there yet.
        new_version: Version at the new reference.
        caption: Rendered tag caption; empty when the version is unchanged.
        source_path: Manifest path the versions were read from.
    """

    old_version: str
    new_version: str
    caption: str = ""
    source_path: str = ""

    @property
    def changed(self) -> bool:
        """True when a tag should be created."""
        return bool(self.caption)

    @classmethod
    def unchanged(cls, version: str = "", source_path: str = "") -> "FetchOutcome":
        return cls(old_version=version, new_version=version, source_path=source_path)
