"""Files handled by the content service and the use case around them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class File:
    """A stored file: its bytes, declared size and content type."""

    body: bytes = b""
    size: int = 0
    type: str = ""


class FileRepo(Protocol):
    def create(self, file: File) -> str: ...

    def get(self, key: str) -> File: ...

    def delete(self, key: str) -> None: ...


class FileUsecase:
    """Operations on stored files."""

    def __init__(self, repo: FileRepo) -> None:
        self._repo = repo

    def create(self, file: File) -> str:
        """Store ``file`` and return the key it is stored under."""
        return self._repo.create(file)

    def get(self, key: str) -> File:
        return self._repo.get(key)

    def delete(self, key: str) -> None:
        self._repo.delete(key)