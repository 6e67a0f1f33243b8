import pytest

from doitplatform.content.files import File, FileUsecase


class _MemoryRepo:
    def __init__(self):
        self.files = {}

    def create(self, file):
        key = f"key-{len(self.files)}"
        self.files[key] = file
        return key

    def get(self, key):
        try:
            return self.files[key]
        except KeyError:
            raise LookupError(f"cannot get the file: {key}") from None

    def delete(self, key):
        if key not in self.files:
            raise LookupError(f"cannot delete the file: {key}")
        del self.files[key]


def test_create_then_get_round_trip():
    usecase = FileUsecase(_MemoryRepo())
    file = File(body=b"hello", size=5, type="text/plain")
    key = usecase.create(file)
    assert usecase.get(key) == file


def test_delete_removes_file():
    repo = _MemoryRepo()
    usecase = FileUsecase(repo)
    key = usecase.create(File(body=b"x", size=1, type="text/plain"))
    usecase.delete(key)
    assert key not in repo.files
    with pytest.raises(LookupError):
        usecase.get(key)


def test_repository_errors_propagate():
    usecase = FileUsecase(_MemoryRepo())
    with pytest.raises(LookupError, match="cannot delete the file"):
        usecase.delete("missing")


def test_file_defaults_are_empty():
    assert File() == File(body=b"", size=0, type="")