"""Content provider backed by a local checkout directory."""

import asyncio
from pathlib import Path

import structlog

from autotag.exceptions import ContentNotFoundError
from autotag.providers.base import ContentProvider

log = structlog.get_logger(__name__)


class LocalDirectoryContentProvider(ContentProvider):
    """Reads files below a directory, e.g. two worktrees of the same repo.

    Paths that resolve outside ``root`` are reported as not found.
    """

    def __init__(self, root: Path, owner: str = "local", repo: str | None = None) -> None:
        self.root = root.resolve()
        super().__init__(owner, repo or self.root.name, str(self.root))

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        try:
            target.relative_to(self.root)
        except ValueError as e:
            raise ContentNotFoundError(
                f"{path} escapes {self.root}",
                path=path,
                reference=self.reference,
            ) from e
        return target

    async def get_file_content(self, path: str) -> str:
        target = self._resolve(path)
        log.debug("read_local_file", path=str(target))

        if not target.is_file():
            raise ContentNotFoundError(f"{path} not found in {self.root}", path=path, reference=self.reference)

        try:
            return await asyncio.to_thread(target.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ContentNotFoundError(f"cannot read {path}: {e}", path=path, reference=self.reference) from e
