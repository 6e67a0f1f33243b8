import io

import pytest
import requests
import responses

from doitplatform.content.files import File
from doitplatform.content.s3 import (
    ErrorResponse,
    S3Error,
    S3FileRepository,
    create_bucket,
    from_file,
    to_file,
)

BASE = "http://127.0.0.1:4400"


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


@pytest.fixture
def repo(rsps):
    rsps.add(responses.PUT, f"{BASE}/files", status=200)
    return S3FileRepository(BASE, requests.Session())


@pytest.mark.parametrize("status", [200, 409])
def test_create_bucket_accepts_ok_and_conflict(rsps, status):
    rsps.add(responses.PUT, f"{BASE}/files", status=status)
    create_bucket("files", BASE, requests.Session())
    assert rsps.calls[-1].request.method == "PUT"
    assert rsps.calls[-1].request.url == f"{BASE}/files"


def test_create_bucket_failure(rsps):
    rsps.add(responses.PUT, f"{BASE}/files", status=500)
    with pytest.raises(S3Error, match="bucket with name files is not created"):
        create_bucket("files", BASE, requests.Session())


def test_repository_wraps_bucket_failure(rsps):
    rsps.add(responses.PUT, f"{BASE}/files", status=403)
    with pytest.raises(S3Error, match="^repository error: bucket with name files"):
        S3FileRepository(BASE, requests.Session())


def test_create_uploads_under_fixed_key(rsps, repo):
    rsps.add(responses.PUT, f"{BASE}/files/file", status=200)
    key = repo.create(File(body=b"hello", size=5, type="text/plain"))
    assert key == "file"
    request = rsps.calls[-1].request
    assert request.body == b"hello"
    assert request.headers["Content-Type"] == "text/plain"


def test_create_failure_reports_status(rsps, repo):
    rsps.add(responses.PUT, f"{BASE}/files/file", status=507)
    with pytest.raises(S3Error, match="file is not uploaded: 507"):
        repo.create(File(body=b"x", size=1, type="text/plain"))


def test_get_returns_body_and_type(rsps, repo):
    rsps.add(
        responses.GET,
        f"{BASE}/files/report",
        body=b"data",
        content_type="application/pdf",
        status=200,
    )
    file = repo.get("report")
    assert file == File(body=b"data", size=len(b"data"), type="application/pdf")


def test_get_missing_raises(rsps, repo):
    rsps.add(responses.GET, f"{BASE}/files/missing", body="not found", status=404)
    with pytest.raises(S3Error, match="cannot get the file: not found"):
        repo.get("missing")


def test_delete_sends_request(rsps, repo):
    rsps.add(responses.DELETE, f"{BASE}/files/report", status=200)
    calls_before = len(rsps.calls)
    assert repo.delete("report") is None
    assert len(rsps.calls) == calls_before + 1
    assert rsps.calls[-1].request.method == "DELETE"
    assert rsps.calls[-1].request.url == f"{BASE}/files/report"


def test_delete_failure_raises(rsps, repo):
    rsps.add(responses.DELETE, f"{BASE}/files/report", status=404)
    with pytest.raises(S3Error, match="cannot delete the file"):
        repo.delete("report")


def test_error_response_from_xml():
    xml = b"<ErrorResponse><Error>NoSuchKey</Error><Message>missing</Message></ErrorResponse>"
    assert ErrorResponse.from_xml(xml) == ErrorResponse(error="NoSuchKey", message="missing")


def test_error_response_wrong_root():
    with pytest.raises(S3Error, match="expected element type <ErrorResponse>"):
        ErrorResponse.from_xml("<Other/>")


def test_error_response_malformed():
    with pytest.raises(S3Error):
        ErrorResponse.from_xml("<ErrorResponse>")


def test_from_file_uses_fixed_key():
    stored = from_file(File(body=b"abc", size=3, type="text/plain"))
    assert stored.object_key == "file"
    assert stored.body == b"abc"
    assert stored.type == "text/plain"


def test_to_file_reads_stream_and_counts_size():
    file = to_file(io.BytesIO(b"payload"), "application/octet-stream")
    assert file.body == b"payload"
    assert file.size == len(b"payload")
    assert file.type == "application/octet-stream"