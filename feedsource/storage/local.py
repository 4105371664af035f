from __future__ import annotations

from pathlib import Path

from feedsource.exceptions import StorageError
from feedsource.storage.base import join_key, join_uri


class LocalFileSystem:
    def __init__(self, root: str, base_uri: str, feed_sub_path: str | None = None) -> None:
        self.root = root
        self.base_uri = base_uri
        self.feed_sub_path = feed_sub_path
        self._root_dir = Path(root)

    def _path(self, key: str) -> Path:
        return self._root_dir / join_key(self.feed_sub_path, key)

    def get_uri(self, key: str) -> str:
        return join_uri(self.base_uri, self.feed_sub_path, key)

    def put_bytes(self, key: str, data: bytes) -> str:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Unable to write {path}", {"path": str(path)}) from exc
        return str(path)

    def get_bytes(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Unable to read {path}", {"path": str(path)}) from exc

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def list_keys(self, prefix: str = "") -> list[str]:
        base = self._root_dir / join_key(self.feed_sub_path, "")
        if not base.is_dir():
            return []
        keys = sorted(path.relative_to(base).as_posix() for path in base.rglob("*") if path.is_file())
        return [key for key in keys if key.startswith(prefix)]

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


__all__ = ["LocalFileSystem"]
