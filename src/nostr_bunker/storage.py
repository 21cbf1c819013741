"""Key-value blob stores backing the identity record."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Protocol

from nostr_bunker.config import resolve_home_dir

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


class BlobStore(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class MemoryBlobStore:
    def __init__(self, initial: dict[str, bytes] | None = None):
        self._blobs: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._blobs[key] = bytes(value)


class FileBlobStore:
    """Stores each key as ``<home>/<key>.json``, readable only by the owner."""

    def __init__(self, home_dir: str | None = None):
        self.home_dir = resolve_home_dir(home_dir)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key) or key.startswith("."):
            raise ValueError(f"Invalid blob key: {key!r}")
        return Path(self.home_dir) / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        os.chmod(path.parent, 0o700)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_bytes(value)
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
