"""Persistent JSON key-value store with per-entry expiry.

Backs both the workflow config file and the cache file. The whole store is
one JSON object on disk::

    {"key": {"value": <any JSON>, "expires": <epoch seconds> | null}}

Reads are forgiving: a missing, unreadable or malformed file loads as an
empty store. Writes are explicit through ``commit`` and do raise, so callers
decide whether a failed write matters.
"""

from __future__ import annotations

import json
import shutil
import time
from collections.abc import Callable, Iterator
from pathlib import Path

_MISSING = object()


class JsonStore:
    def __init__(
        self,
        path: Path,
        ttl: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Create a store backed by ``path``.

        ``ttl`` is the default lifetime in seconds for ``set`` calls that do
        not pass one; ``None`` keeps entries until they are deleted.
        """
        self.path = Path(path)
        self.default_ttl = ttl
        self._clock = clock
        self._entries: dict[str, dict[str, object]] | None = None
        self._dirty = False

    def _load(self) -> dict[str, dict[str, object]]:
        if self._entries is not None:
            return self._entries
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except Exception:
            data = {}
        entries: dict[str, dict[str, object]] = {}
        if isinstance(data, dict):
            for key, entry in data.items():
                if isinstance(entry, dict) and "value" in entry:
                    entries[str(key)] = entry
        self._entries = entries
        return entries

    def _is_expired(self, entry: dict[str, object]) -> bool:
        expires = entry.get("expires")
        if not isinstance(expires, (int, float)) or isinstance(expires, bool):
            return False
        return expires <= self._clock()

    def _live_entry(self, key: str) -> dict[str, object] | None:
        entries = self._load()
        entry = entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry):
            del entries[key]
            self._dirty = True
            return None
        return entry

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def get(self, key: str, default: object = None) -> object:
        entry = self._live_entry(key)
        if entry is None:
            return default
        return entry["value"]

    def set(self, key: str, value: object, ttl: float | None | object = _MISSING) -> None:
        """Store ``value`` under ``key``.

        ``ttl`` in seconds overrides the store default; pass ``None`` for an
        entry that never expires.
        """
        lifetime = self.default_ttl if ttl is _MISSING else ttl
        expires = None
        if isinstance(lifetime, (int, float)) and not isinstance(lifetime, bool) and lifetime > 0:
            expires = self._clock() + float(lifetime)
        self._load()[key] = {"value": value, "expires": expires}
        self._dirty = True

    def delete(self, key: str) -> bool:
        entries = self._load()
        if key not in entries:
            return False
        del entries[key]
        self._dirty = True
        return True

    def clear(self) -> None:
        self._entries = {}
        self._dirty = True

    def keys(self) -> Iterator[str]:
        for key in list(self._load()):
            if self._live_entry(key) is not None:
                yield key

    @property
    def dirty(self) -> bool:
        return self._dirty

    def commit(self) -> None:
        """Write pending changes to disk, dropping expired entries."""
        if not self._dirty:
            return
        entries = {key: entry for key, entry in self._load().items() if not self._is_expired(entry)}
        payload = json.dumps(entries, indent=2) + "\n"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(self.path)
        self._entries = entries
        self._dirty = False

    def reload(self) -> None:
        """Discard in-memory state so the next read goes back to disk."""
        self._entries = None
        self._dirty = False


def empty_directory(path: Path) -> None:
    """Remove everything inside ``path``; the directory itself is kept."""
    path = Path(path)
    if not path.is_dir():
        return
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
