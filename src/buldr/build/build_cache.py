"""Build-time cache for incremental compilation.

The cache maps each object file to the time its compile last succeeded. A
source is stale when its modification time is newer than that record.

Store location:
    <scratch dir>/buldr_<hash>.json

    <scratch dir> is $BULDR_CACHE_DIR when set, else the system temp dir.
    <hash> is derived from the manifest's canonical path only, so every
    invocation against the same manifest reuses the same store regardless
    of the current working directory.

Store format:
    {"files": {"/abs/obj/app/src/app/main.o": 1700000000, ...}}

The store is one document replaced wholesale on every write.
"""

import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from ..errors import CacheIOError

CACHE_DIR_ENV = "BULDR_CACHE_DIR"


class BuildCache:
    """Persisted mapping from object path to last successful build time."""

    def __init__(self, path: Path):
        """Load the store at `path`, or start empty if it doesn't exist.

        Args:
            path: Location of the JSON store

        Raises:
            CacheIOError: If an existing store can't be read or decoded
        """
        self._path = Path(path)
        self._files: Dict[str, int] = self._load()

    @staticmethod
    def hash_manifest_path(manifest_path: Path) -> str:
        """Hash a manifest's canonical path for store naming.

        Returns:
            First 16 characters of the SHA256 hash
        """
        canonical = str(Path(manifest_path).resolve())
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]

    @staticmethod
    def default_cache_dir() -> Path:
        cache_env = os.environ.get(CACHE_DIR_ENV)
        if cache_env:
            return Path(cache_env).resolve()
        return Path(tempfile.gettempdir())

    @classmethod
    def store_path_for(cls, manifest_path: Path, cache_dir: Optional[Path] = None) -> Path:
        """Get the store location for a manifest without loading it."""
        if cache_dir is None:
            cache_dir = cls.default_cache_dir()
        return Path(cache_dir) / f"buldr_{cls.hash_manifest_path(manifest_path)}.json"

    @classmethod
    def for_manifest(cls, manifest_path: Path, cache_dir: Optional[Path] = None) -> "BuildCache":
        """Open the cache belonging to a manifest."""
        return cls(cls.store_path_for(manifest_path, cache_dir))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def entries(self) -> Mapping[str, int]:
        """Read-only view of the recorded build times."""
        return MappingProxyType(self._files)

    @staticmethod
    def _key(output_path: Path) -> str:
        return str(Path(output_path).resolve())

    def _load(self) -> Dict[str, int]:
        if not self._path.exists():
            return {}

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CacheIOError(
                f"Failed to read build cache {self._path}: {e}. "
                + "Run 'buldr clean' to reset it."
            ) from e

        files = data.get("files") if isinstance(data, dict) else None
        if not isinstance(files, dict) or not all(
            isinstance(v, int) and not isinstance(v, bool) for v in files.values()
        ):
            raise CacheIOError(
                f"Build cache {self._path} is malformed. Run 'buldr clean' to reset it."
            )

        logging.debug(f"Loaded {len(files)} cache entries from {self._path}")
        return {str(k): v for k, v in files.items()}

    def has_changed(self, output_path: Path, source_mtime: float) -> bool:
        """Check whether the object at `output_path` must be rebuilt.

        Args:
            output_path: Object file the source compiles to
            source_mtime: Source modification time in epoch seconds

        Returns:
            True if the object is missing, unrecorded, or older than the source
        """
        if not Path(output_path).exists():
            return True

        last_build = self._files.get(self._key(output_path))
        if last_build is None:
            return True
        return int(source_mtime) > last_build

    def update(self, output_path: Path) -> None:
        """Record now as the last successful build time of `output_path`.

        Only call this after the compile producing `output_path` succeeded.
        """
        self._files[self._key(output_path)] = int(time.time())

    def write(self) -> None:
        """Persist the entire mapping, replacing the previous store.

        Raises:
            CacheIOError: If the store can't be written
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = self._path.with_suffix(".tmp")
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump({"files": self._files}, f, indent=2, sort_keys=True)
            temp_file.replace(self._path)
        except OSError as e:
            raise CacheIOError(f"Failed to write build cache {self._path}: {e}") from e

    def clean(self) -> None:
        """Delete the persisted store if present.

        Raises:
            CacheIOError: If the store exists but can't be removed
        """
        self._files = {}
        self._remove_store(self._path)

    @classmethod
    def discard(cls, manifest_path: Path, cache_dir: Optional[Path] = None) -> Path:
        """Delete a manifest's store without loading it.

        A corrupt store can still be discarded this way.

        Returns:
            Path of the store that was removed (or would have been)
        """
        path = cls.store_path_for(manifest_path, cache_dir)
        cls._remove_store(path)
        return path

    @staticmethod
    def _remove_store(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise CacheIOError(f"Failed to remove build cache {path}: {e}") from e
