"""Content and hosting providers.

Key Components:
    - ContentProvider: Read one file at one reference
    - GitHostClient: Tag, comment and commit lookups for the workflow
    - GitHubContentProvider / GitHubHostClient: PyGithub implementations
    - StaticContentProvider: In-memory files
    - LocalDirectoryContentProvider: Files of a local checkout

Example:
    >>> from autotag.providers import StaticContentProvider
    >>> old = StaticContentProvider({"pom.xml": "<project><version>1.0</version></project>"}, "abc123")
    >>> await old.get_file_content("pom.xml")
"""

from autotag.providers.base import CommitInfo, ContentProvider, GitHostClient, Tagger
from autotag.providers.local import LocalDirectoryContentProvider
from autotag.providers.static import StaticContentProvider

__all__ = [
    "CommitInfo",
    "ContentProvider",
    "GitHostClient",
    "LocalDirectoryContentProvider",
    "StaticContentProvider",
    "Tagger",
]
