"""Caching policy on top of ``JsonStore``.

URL responses are stored under a SHA-256 digest of the URL so keys stay short
and filesystem safe. A hit skips the network entirely; there is no
revalidation. Commit failures are logged and swallowed.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any

import httpx

from .store import JsonStore

LOGGER = logging.getLogger(__name__)


def url_key(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def cache_enabled(ttl: object) -> bool:
    """``None``, ``False`` and non-positive numbers mean "do not cache"."""
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        return False
    return ttl > 0


class ContentCache:
    def __init__(self, store: JsonStore) -> None:
        self.store = store

    def has(self, key: str) -> bool:
        return self.store.has(key)

    def get(self, key: str, default: object = None) -> object:
        return self.store.get(key, default)

    def set(self, key: str, value: object, ttl: float | None = None) -> None:
        self.store.set(key, value, ttl=ttl)

    def delete(self, key: str) -> bool:
        return self.store.delete(key)

    def clear(self) -> None:
        self.store.clear()

    def commit(self) -> bool:
        """Persist the store; returns ``False`` instead of raising on failure."""
        try:
            self.store.commit()
        except (OSError, TypeError, ValueError) as exc:
            LOGGER.warning("Could not write cache file %s: %s", self.store.path, exc)
            return False
        return True

    def fetch_json(self, client: httpx.Client, url: str, ttl: float | None = None, **options: Any) -> Any:
        """GET ``url`` and return its decoded JSON body.

        With a positive ``ttl`` (seconds) a cached body is returned without a
        request, and fresh bodies are cached for ``ttl`` seconds. HTTP and
        decoding errors propagate.
        """
        key = url_key(url)
        use_cache = cache_enabled(ttl)
        if use_cache and self.store.has(key):
            LOGGER.debug("Cache hit for %s", url)
            return self.store.get(key)

        response = client.get(url, **options)
        response.raise_for_status()
        body = response.json()

        if use_cache:
            self.store.set(key, body, ttl=float(ttl))  # type: ignore[arg-type]
            self.commit()
        return body
