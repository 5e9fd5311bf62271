"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, Mock

import pytest

from autotag.fetchers.registry import FetcherRegistry, build_default_registry
from autotag.models.events import PushEvent
from autotag.providers.base import CommitInfo, GitHostClient
from autotag.providers.static import StaticContentProvider

OLD_SHA = "a" * 40
NEW_SHA = "b" * 40


@pytest.fixture
def registry() -> FetcherRegistry:
    """Registry with every built-in manifest format."""
    return build_default_registry()


class FakeHostClient(GitHostClient):
    """GitHostClient serving two static file sets and recording writes."""

    def __init__(self, old_files: dict[str, str], new_files: dict[str, str], parents: tuple[str, ...] = (OLD_SHA,)):
        self.owner = "octo"
        self.repo = "app"
        self.files = {OLD_SHA: old_files, NEW_SHA: new_files}
        self.parents = parents
        self.create_tag = AsyncMock()
        self.add_commit_comment = AsyncMock()

    def content_provider(self, reference: str) -> StaticContentProvider:
        return StaticContentProvider(self.files.get(reference, {}), reference=reference, owner="octo", repo="app")

    async def get_commit(self, sha: str) -> CommitInfo:
        return CommitInfo(sha=sha, parent_shas=self.parents, author_name="Mona", author_email="mona@example.com")

    async def create_tag(self, name, message, sha, tagger):  # replaced by AsyncMock in __init__
        raise NotImplementedError

    async def add_commit_comment(self, sha, body):  # replaced by AsyncMock in __init__
        raise NotImplementedError


@pytest.fixture
def make_client():
    """Factory for FakeHostClient instances."""

    def _make(old_files=None, new_files=None, parents=(OLD_SHA,)) -> FakeHostClient:
        return FakeHostClient(old_files or {}, new_files or {}, parents)

    return _make


@pytest.fixture
def push_payload() -> dict:
    """GitHub push webhook payload for a push to the default branch."""
    return {
        "ref": "refs/heads/main",
        "before": OLD_SHA,
        "after": NEW_SHA,
        "repository": {
            "name": "app",
            "full_name": "octo/app",
            "default_branch": "main",
            "owner": {"name": "octo", "login": "octo"},
        },
        "pusher": {"name": "mona", "email": "mona@example.com"},
        "installation": {"id": 4242},
        "head_commit": {"id": NEW_SHA, "message": "bump version"},
    }


@pytest.fixture
def push_event(push_payload) -> PushEvent:
    return PushEvent.model_validate(push_payload)


@pytest.fixture
def mock_gh_repo() -> Mock:
    """Mock PyGithub Repository."""
    return Mock()
