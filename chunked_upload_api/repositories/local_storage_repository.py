"""
Local filesystem repository for file storage operations.
Used for development and single-host deployments.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import StorageException
from chunked_upload_api.repositories.storage_repository import StorageRepository


class LocalStorageRepository(StorageRepository):
    """Repository storing objects as files below a root directory."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or config.settings.local_storage_root).resolve()

    def put_object(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write(path, lambda f: f.write(data))
        except OSError as e:
            raise StorageException(f"Failed to write object {key}: {str(e)}") from e

    def get_object(self, key: str) -> bytes:
        try:
            return self._path(key).read_bytes()
        except OSError as e:
            raise StorageException(f"Failed to read object {key}: {str(e)}") from e

    def upload_fileobj(self, file: BinaryIO, key: str, content_type: Optional[str] = None) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write(path, lambda f: shutil.copyfileobj(file, f))
        except OSError as e:
            raise StorageException(f"Failed to write file {key}: {str(e)}") from e

    def get_object_size(self, key: str) -> Optional[int]:
        path = self._path(key)
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageException(f"Failed to stat object {key}: {str(e)}") from e

    def delete_object(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageException(f"Failed to delete object {key}: {str(e)}") from e

    def delete_prefix(self, prefix: str) -> int:
        directory = self._path(prefix)
        if directory == self.root:
            raise StorageException("Refusing to delete the storage root")
        if not directory.is_dir():
            return 0
        try:
            deleted = sum(1 for p in directory.rglob('*') if p.is_file())
            shutil.rmtree(directory, ignore_errors=False)
        except FileNotFoundError:
            # Removed concurrently by another cleanup
            return 0
        except OSError as e:
            raise StorageException(f"Failed to delete objects under {prefix}: {str(e)}") from e
        return deleted

    def get_url(self, key: str) -> str:
        if config.settings.public_base_url:
            return f"{config.settings.public_base_url.rstrip('/')}/{key}"
        return self._path(key).as_uri()

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path != self.root and self.root not in path.parents:
            raise StorageException(f"Key escapes storage root: {key}")
        return path

    def _atomic_write(self, path: Path, write) -> None:
        # Readers never observe a partially written object
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix='.tmp-')
        try:
            with os.fdopen(fd, 'wb') as f:
                write(f)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
