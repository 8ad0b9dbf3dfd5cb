"""Access to the files of the project being described."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class ProjectRepository(Protocol):
    """Read-only view of a project's files, addressed by relative name."""

    def is_file(self, name: str) -> bool:
        ...

    def get(self, name: str) -> BinaryIO:
        ...


class FileSystemRepository:
    """Repository backed by a directory on the local filesystem."""

    def __init__(self, root: Path) -> None:
        self.root = root.expanduser().resolve()

    def _resolve(self, name: str) -> Path:
        candidate = (self.root / name).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise ValueError(f"{name} is outside of {self.root}")
        return candidate

    def is_file(self, name: str) -> bool:
        return self._resolve(name).is_file()

    def get(self, name: str) -> BinaryIO:
        """Open ``name`` for binary reading; the caller closes the handle."""
        path = self._resolve(name)
        if not path.is_file():
            raise FileNotFoundError(f"{path} does not exist")
        return path.open("rb")

    def __repr__(self) -> str:
        return f"FileSystemRepository({str(self.root)!r})"
