"""
Local durable key-value cache

Write-through mirror of tenant snapshots and the feedback collection. A
failing cache never raises into callers: reads return None and writes
return False.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional
import json
import os
import re
import structlog

from qrmenu.core.config import Settings

logger = structlog.get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LocalCache(ABC):
    """Key-value store keyed by tenant slug"""

    @abstractmethod
    def read(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored value or None when absent or unreadable"""

    @abstractmethod
    def write(self, key: str, snapshot: Dict[str, Any]) -> bool:
        """Store a JSON-serializable value, return whether it was persisted"""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key, return whether something was removed"""


class MemoryLocalCache(LocalCache):
    """Cache held in process memory, values stored as JSON text"""

    def __init__(self, max_entry_bytes: Optional[int] = None):
        self._entries: Dict[str, str] = {}
        self.max_entry_bytes = max_entry_bytes

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._entries.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def write(self, key: str, snapshot: Dict[str, Any]) -> bool:
        try:
            raw = json.dumps(snapshot, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot serialize cache entry {key}: {e}")
            return False
        if self.max_entry_bytes is not None and len(raw.encode("utf-8")) > self.max_entry_bytes:
            logger.error(f"Cache quota exceeded for {key}")
            return False
        self._entries[key] = raw
        return True

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def keys(self):
        return list(self._entries)


class FileLocalCache(LocalCache):
    """One JSON file per key inside a directory"""

    def __init__(self, directory: str, max_entry_bytes: Optional[int] = None):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.max_entry_bytes = max_entry_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Error loading cache entry {key}: {e}")
            return None

    def write(self, key: str, snapshot: Dict[str, Any]) -> bool:
        try:
            raw = json.dumps(snapshot, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot serialize cache entry {key}: {e}")
            return False

        size = len(raw.encode("utf-8"))
        if self.max_entry_bytes is not None and size > self.max_entry_bytes:
            logger.error(f"Cache quota exceeded for {key}: {size / 1024:.2f}KB")
            return False

        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(raw)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Error saving cache entry {key}: {e}")
            return False

        logger.debug(f"Saved cache entry {key}, size: {size / 1024:.2f}KB")
        return True

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting cache entry {key}: {e}")
            return False


def open_local_cache(settings: Settings) -> Optional[LocalCache]:
    """Build the configured cache, or None when caching is unavailable"""
    if not settings.LOCAL_CACHE_ENABLED:
        logger.info("Local cache disabled, running remote-only")
        return None
    try:
        return FileLocalCache(settings.LOCAL_CACHE_DIR, settings.LOCAL_CACHE_MAX_ENTRY_BYTES)
    except OSError as e:
        logger.warning(f"Local cache unavailable at {settings.LOCAL_CACHE_DIR}: {e}")
        return None
