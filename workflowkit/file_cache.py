"""Cache the processed form of a file until the file changes.

Freshness is decided from ``(st_mtime_ns, st_size)`` so a hit never reads the
source file.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

LOGGER = logging.getLogger(__name__)

FILE_CACHE_DIRNAME = "files"

T = TypeVar("T")


def file_fingerprint(path: Path) -> list[int] | None:
    """Return ``[mtime_ns, size]`` for ``path`` or ``None`` if it is missing."""
    try:
        stat = path.stat()
    except OSError:
        return None
    return [stat.st_mtime_ns, stat.st_size]


class FileCache:
    def __init__(self, path: Path | str, cache_dir: Path | str) -> None:
        self.path = Path(path).expanduser().resolve()
        digest = hashlib.sha256(str(self.path).encode("utf-8")).hexdigest()
        self.entry_path = Path(cache_dir) / FILE_CACHE_DIRNAME / f"{digest}.json"

    def fingerprint(self) -> list[int] | None:
        return file_fingerprint(self.path)

    def _read_entry(self) -> dict[str, object] | None:
        try:
            data = json.loads(self.entry_path.read_text(encoding="utf-8"))
        except Exception:
            return None
        if not isinstance(data, dict) or "value" not in data:
            return None
        return data

    def is_fresh(self) -> bool:
        """True when an entry exists and the file has not changed since."""
        entry = self._read_entry()
        if entry is None:
            return False
        current = self.fingerprint()
        return current is not None and entry.get("fingerprint") == current

    def get(self, default: object = None) -> object:
        entry = self._read_entry()
        if entry is None:
            return default
        current = self.fingerprint()
        if current is None or entry.get("fingerprint") != current:
            return default
        return entry["value"]

    def store(self, value: object, fingerprint: list[int] | None = None) -> bool:
        """Save ``value`` against ``fingerprint`` (default: the file's current one).

        ``load`` passes the fingerprint taken before reading, so a file that
        changes while it is processed is never recorded as fresh. Returns
        ``False`` (and logs a warning) when the entry cannot be written.
        """
        payload = {
            "path": str(self.path),
            "fingerprint": fingerprint if fingerprint is not None else self.fingerprint(),
            "value": value,
        }
        try:
            self.entry_path.parent.mkdir(parents=True, exist_ok=True)
            self.entry_path.write_text(json.dumps(payload), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            LOGGER.warning("Could not cache %s: %s", self.path, exc)
            return False
        return True

    def load(self, process: Callable[[str], T], encoding: str = "utf-8") -> T:
        """Return the cached result, or read the file, ``process`` it and cache it."""
        entry = self._read_entry()
        current = self.fingerprint()
        if entry is not None and current is not None and entry.get("fingerprint") == current:
            LOGGER.debug("File cache hit for %s", self.path)
            return entry["value"]  # type: ignore[return-value]

        result = process(self.path.read_text(encoding=encoding))
        self.store(result, fingerprint=current)
        return result

    def clear(self) -> None:
        try:
            self.entry_path.unlink()
        except FileNotFoundError:
            pass
