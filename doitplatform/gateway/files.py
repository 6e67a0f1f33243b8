"""Files passing through the API gateway and the use case around them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class File:
    """A file: its bytes, declared size and content type."""

    body: bytes = b""
    size: int = 0
    type: str = ""


class FilePresenter(Protocol):
    def create(self, file: File) -> str: ...

    def get(self, key: str) -> File: ...

    def delete(self, key: str) -> None: ...


class FileUsecase:
    """File operations, forwarded to the content service."""

    def __init__(self, presenter: FilePresenter) -> None:
        self._presenter = presenter

    def create(self, file: File) -> str:
        """Store ``file`` and return the key it is stored under."""
        return self._presenter.create(file)

    def get(self, key: str) -> File:
        return self._presenter.get(key)

    def delete(self, key: str) -> None:
        self._presenter.delete(key)