"""
Abstract base classes for providers.

``ContentProvider`` is the only capability the version fetchers need: read
one file at one reference. ``GitHostClient`` is what the tagging workflow
needs from the hosting service on top of that (parent lookup, tag creation,
commit comments).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


class ContentProvider(ABC):
    """Read access to repository files at a single reference.

    A provider is bound to (owner, repo, reference) at construction. Two
    providers exist per run, one for the old reference and one for the new,
    and they share no mutable state.

    All methods are async to support non-blocking I/O with HTTP clients.
    """

    def __init__(self, owner: str, repo: str, reference: str) -> None:
        self.owner = owner
        self.repo = repo
        self.reference = reference

    @property
    def full_name(self) -> str:
        """Repository full name, ``owner/repo``."""
        return f"{self.owner}/{self.repo}"

    @abstractmethod
    async def get_file_content(self, path: str) -> str:
        """Return the decoded text of a file at this provider's reference.

        Args:
            path: Repository-relative file path.

        Returns:
            File content as text.

        Raises:
            ContentNotFoundError: If the file does not exist, is not a regular
                file, or the hosting API answered with a non-success status.
            ExternalServiceError: If the request could not be completed
                (connection failure, timeout).
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.full_name}@{self.reference})"


@dataclass(frozen=True)
class Tagger:
    """Identity recorded on an annotated tag."""

    name: str
    email: str
    date: datetime


@dataclass(frozen=True)
class CommitInfo:
    """A commit with the fields the CI entry point needs."""

    sha: str
    parent_shas: tuple[str, ...]
    author_name: str
    author_email: str

    @property
    def first_parent(self) -> str | None:
        return self.parent_shas[0] if self.parent_shas else None


class GitHostClient(ABC):
    """Repository operations used by the tagging workflow."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @abstractmethod
    def content_provider(self, reference: str) -> ContentProvider:
        """Create a content provider bound to ``reference``."""
        pass

    @abstractmethod
    async def get_commit(self, sha: str) -> CommitInfo:
        """Return the parents and author of a commit.

        Raises:
            ExternalServiceError: If the commit cannot be read.
        """
        pass

    @abstractmethod
    async def create_tag(self, name: str, message: str, sha: str, tagger: Tagger) -> None:
        """Create an annotated tag object and its ``refs/tags`` reference.

        Raises:
            ExternalServiceError: If the hosting API rejects the request.
        """
        pass

    @abstractmethod
    async def add_commit_comment(self, sha: str, body: str) -> None:
        """Post a comment on a commit.

        Raises:
            ExternalServiceError: If the hosting API rejects the request.
        """
        pass
