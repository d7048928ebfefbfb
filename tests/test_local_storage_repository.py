"""
Unit tests for LocalStorageRepository.
"""
import io
import pytest
from chunked_upload_api.core.exceptions import StorageException
from chunked_upload_api.repositories.local_storage_repository import LocalStorageRepository


@pytest.fixture
def repo(storage_root):
    return LocalStorageRepository(root=str(storage_root))


class TestLocalStorageRepository:
    """Test suite for LocalStorageRepository."""

    def test_put_and_get_object(self, repo, storage_root):
        repo.put_object("chunks/abc/chunk_00000", b"chunk-bytes")

        assert repo.get_object("chunks/abc/chunk_00000") == b"chunk-bytes"
        assert (storage_root / "chunks" / "abc" / "chunk_00000").is_file()

    def test_put_object_leaves_no_temp_files(self, repo, storage_root):
        repo.put_object("chunks/abc/chunk_00000", b"x")
        repo.put_object("chunks/abc/chunk_00000", b"y")

        assert [p.name for p in (storage_root / "chunks" / "abc").iterdir()] == ["chunk_00000"]
        assert repo.get_object("chunks/abc/chunk_00000") == b"y"

    def test_get_missing_object(self, repo):
        with pytest.raises(StorageException):
            repo.get_object("chunks/abc/chunk_00000")

    def test_upload_fileobj_and_size(self, repo):
        repo.upload_fileobj(io.BytesIO(b"v" * 2048), "videos/out.mp4", "video/mp4")

        assert repo.get_object_size("videos/out.mp4") == 2048
        assert repo.get_object_size("videos/none.mp4") is None

    def test_delete_object_is_idempotent(self, repo):
        repo.put_object("videos/out.mp4", b"x")

        repo.delete_object("videos/out.mp4")
        repo.delete_object("videos/out.mp4")

        assert repo.get_object_size("videos/out.mp4") is None

    def test_delete_prefix(self, repo):
        for index in range(3):
            repo.put_object(f"chunks/abc/chunk_{index:05d}", b"x")
        repo.put_object("chunks/abcdef/chunk_00000", b"y")

        assert repo.delete_prefix("chunks/abc") == 3
        assert repo.delete_prefix("chunks/abc") == 0
        assert repo.get_object("chunks/abcdef/chunk_00000") == b"y"

    @pytest.mark.parametrize("key", ["../outside", "chunks/../../outside"])
    def test_keys_cannot_escape_root(self, repo, key):
        with pytest.raises(StorageException):
            repo.put_object(key, b"x")

    def test_refuses_to_delete_root(self, repo):
        repo.put_object("videos/out.mp4", b"x")
        with pytest.raises(StorageException):
            repo.delete_prefix("chunks/..")
        assert repo.get_object_size("videos/out.mp4") == 1

    def test_get_url_is_file_uri(self, repo, storage_root):
        assert repo.get_url("videos/out.mp4") == (storage_root / "videos" / "out.mp4").resolve().as_uri()
