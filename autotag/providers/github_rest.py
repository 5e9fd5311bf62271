"""GitHub provider implementation using PyGithub and REST API."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException, InputGitAuthor  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from autotag.exceptions import ContentNotFoundError, ExternalServiceError
from autotag.providers.base import CommitInfo, ContentProvider, GitHostClient, Tagger

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods.
    """
    return await asyncio.to_thread(func)


class GitHubContentProvider(ContentProvider):
    """Reads files through the GitHub contents API at a fixed reference."""

    def __init__(self, gh_repo: GHRepository, owner: str, repo: str, reference: str) -> None:
        super().__init__(owner, repo, reference)
        self._repo = gh_repo

    async def get_file_content(self, path: str) -> str:
        """Read file contents from repository."""
        log.info("get_file", path=path, ref=self.reference)

        def _get_file() -> str:
            contents = self._repo.get_contents(path, ref=self.reference)

            if isinstance(contents, list):
                raise ContentNotFoundError(
                    f"{path} is a directory, not a file",
                    path=path,
                    reference=self.reference,
                )

            # files over 1 MB come back with encoding "none" and no content
            if contents.encoding != "base64":
                raise ContentNotFoundError(
                    f"{path} is too large to read through the contents API ({contents.size} bytes)",
                    path=path,
                    reference=self.reference,
                )

            return contents.decoded_content.decode("utf-8")

        try:
            return await _run_sync(_get_file)

        except GithubException as e:
            # Any non-success status counts as "not readable at this reference"
            log.debug("github_get_file_failed", path=path, ref=self.reference, status=e.status)
            raise ContentNotFoundError(
                f"{path} not readable at {self.reference}",
                path=path,
                reference=self.reference,
                status_code=e.status,
            ) from e
        except UnicodeDecodeError as e:
            raise ContentNotFoundError(
                f"{path} is not UTF-8 text",
                path=path,
                reference=self.reference,
            ) from e
        except OSError as e:
            log.error("github_transport_failed", path=path, ref=self.reference, error=str(e))
            raise ExternalServiceError(f"Failed to fetch {path} at {self.reference}: {e}") from e


class GitHubHostClient(GitHostClient):
    """GitHub implementation of the tagging operations using PyGithub."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub client.

        Args:
            token: Installation token or personal access token
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize GitHub client."""

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(auth=Auth.Token(self.token), base_url=self.base_url)
            repo = client.get_repo(f"{self.owner}/{self.repo}")
            return client, repo

        try:
            self._client, self._repo = await _run_sync(_connect)
        except GithubException as e:
            log.error("github_connect_failed", repository=self.full_name, status=e.status)
            raise ExternalServiceError(f"Cannot open repository {self.full_name}", status_code=e.status) from e
        except OSError as e:
            log.error("github_connect_failed", repository=self.full_name, error=str(e))
            raise ExternalServiceError(f"Cannot open repository {self.full_name}: {e}") from e

        log.info("github_connected", base_url=self.base_url, owner=self.owner, repo=self.repo)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    def _require_repo(self) -> GHRepository:
        if self._repo is None:
            raise ExternalServiceError(f"GitHub client for {self.full_name} is not connected")
        return self._repo

    def content_provider(self, reference: str) -> GitHubContentProvider:
        return GitHubContentProvider(self._require_repo(), self.owner, self.repo, reference)

    async def get_commit(self, sha: str) -> CommitInfo:
        log.info("get_commit", sha=sha)
        gh_repo = self._require_repo()

        def _get_commit() -> CommitInfo:
            gh_commit = gh_repo.get_commit(sha)
            author = gh_commit.commit.author
            return CommitInfo(
                sha=gh_commit.sha,
                parent_shas=tuple(parent.sha for parent in gh_commit.parents),
                author_name=author.name if author else "",
                author_email=author.email if author else "",
            )

        try:
            return await _run_sync(_get_commit)
        except GithubException as e:
            log.error("github_get_commit_failed", sha=sha, error=str(e))
            raise ExternalServiceError(f"error getting commit {sha}", status_code=e.status) from e
        except OSError as e:
            log.error("github_get_commit_failed", sha=sha, error=str(e))
            raise ExternalServiceError(f"error getting commit {sha}: {e}") from e

    async def create_tag(self, name: str, message: str, sha: str, tagger: Tagger) -> None:
        log.info("create_tag", tag=name, sha=sha)
        gh_repo = self._require_repo()

        def _create_tag() -> None:
            tag = gh_repo.create_git_tag(
                tag=name,
                message=message,
                object=sha,
                type="commit",
                tagger=InputGitAuthor(tagger.name, tagger.email, tagger.date.isoformat()),
            )
            gh_repo.create_git_ref(ref=f"refs/tags/{name}", sha=tag.sha)

        try:
            await _run_sync(_create_tag)
        except GithubException as e:
            log.error("github_create_tag_failed", tag=name, sha=sha, error=str(e))
            raise ExternalServiceError(f"Failed to create tag {name!r} on {sha}", status_code=e.status) from e
        except OSError as e:
            log.error("github_create_tag_failed", tag=name, sha=sha, error=str(e))
            raise ExternalServiceError(f"Failed to create tag {name!r} on {sha}: {e}") from e

    async def add_commit_comment(self, sha: str, body: str) -> None:
        log.info("add_commit_comment", sha=sha)
        gh_repo = self._require_repo()

        try:
            await _run_sync(lambda: gh_repo.get_commit(sha).create_comment(body))
        except GithubException as e:
            log.error("github_add_comment_failed", sha=sha, error=str(e))
            raise ExternalServiceError(f"Failed to comment on {sha}", status_code=e.status) from e
        except OSError as e:
            log.error("github_add_comment_failed", sha=sha, error=str(e))
            raise ExternalServiceError(f"Failed to comment on {sha}: {e}") from e
