"""File storage in an S3-compatible object store over HTTP."""

from __future__ import annotations

from dataclasses import dataclass
from typing import IO, Any
from xml.etree import ElementTree

import requests

from .files import File

BUCKET_NAME = "files"
_OBJECT_KEY = "file"


class S3Error(Exception):
    """Raised when the object store rejects or fails a request."""


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


@dataclass(frozen=True)
class ErrorResponse:
    """The error document an object store returns with a failed request."""

    error: str = ""
    message: str = ""

    @classmethod
    def from_xml(cls, data: str | bytes) -> ErrorResponse:
        try:
            root = ElementTree.fromstring(data)
        except ElementTree.ParseError as err:
            raise S3Error(f"invalid error response: {err}") from err
        if _local(root.tag) != "ErrorResponse":
            raise S3Error(
                f"expected element type <ErrorResponse> but have <{_local(root.tag)}>"
            )
        fields = {_local(child.tag): child.text or "" for child in root}
        return cls(error=fields.get("Error", ""), message=fields.get("Message", ""))


@dataclass(frozen=True)
class _StoredObject:
    object_key: str
    body: bytes
    size: int
    type: str


def create_bucket(name: str, url: str, session: requests.Session | None = None) -> None:
    """Create bucket ``name``; a bucket that already exists is accepted."""
    http = session or requests.Session()
    try:
        response = http.put(f"{url}/{name}")
    except requests.RequestException as err:
        raise S3Error(str(err)) from err
    finally:
        if session is None:
            http.close()
    with response:
        if response.status_code not in (200, 409):
            raise S3Error(f"bucket with name {name} is not created")


def from_file(file: File) -> _StoredObject:
    """Describe ``file`` as the object stored for it."""
    return _StoredObject(
        object_key=_OBJECT_KEY, body=file.body, size=file.size, type=file.type
    )


def to_file(data: bytes | IO[bytes], content_type: str) -> File:
    """Build a file from downloaded bytes or a readable stream."""
    body = data if isinstance(data, (bytes, bytearray)) else data.read()
    body = bytes(body)
    return File(body=body, size=len(body), type=content_type)


class S3FileRepository:
    """Files kept in the ``files`` bucket of an object store."""

    def __init__(self, url_base: str, session: requests.Session | None = None) -> None:
        self.url = url_base
        self.bucket = BUCKET_NAME
        self._session = session or requests.Session()
        try:
            create_bucket(self.bucket, self.url, self._session)
        except S3Error as err:
            raise S3Error(f"repository error: {err}") from err

    def _object_url(self, key: str) -> str:
        return f"{self.url}/{self.bucket}/{key}"

    def _send(self, method: str, key: str, **kwargs: Any) -> requests.Response:
        try:
            return self._session.request(method, self._object_url(key), **kwargs)
        except requests.RequestException as err:
            raise S3Error(str(err)) from err

    def create(self, file: File) -> str:
        """Upload ``file`` and return its object key."""
        stored = from_file(file)
        response = self._send(
            "PUT", stored.object_key, data=stored.body, headers={"Content-Type": stored.type}
        )
        with response:
            if response.status_code != 200:
                raise S3Error(f"file is not uploaded: {response.status_code}")
        return stored.object_key

    def get(self, key: str) -> File:
        response = self._send("GET", key)
        with response:
            if response.status_code != 200:
                raise S3Error(f"cannot get the file: {response.text}")
            return to_file(response.content, response.headers.get("Content-Type", ""))

    def delete(self, key: str) -> None:
        response = self._send("DELETE", key)
        with response:
            if response.status_code != 200:
                raise S3Error(f"cannot delete the file: {response.text}")