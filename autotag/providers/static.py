"""In-memory content providers."""

from collections.abc import Mapping

from autotag.exceptions import ContentNotFoundError
from autotag.providers.base import ContentProvider


class StaticContentProvider(ContentProvider):
    """Serves file content from a fixed mapping of path to text.

    Missing paths raise ``ContentNotFoundError`` with a 404 status, matching
    what the GitHub provider reports for a file absent at a reference.
    """

    def __init__(
        self,
        files: Mapping[str, str] | None = None,
        reference: str = "static",
        owner: str = "local",
        repo: str = "repository",
    ) -> None:
        super().__init__(owner, repo, reference)
        self.files = dict(files or {})
        self.requests: list[str] = []

    async def get_file_content(self, path: str) -> str:
        self.requests.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise ContentNotFoundError(
                f"{path} not found at {self.reference}",
                path=path,
                reference=self.reference,
                status_code=404,
            ) from None
