"""Tests for the content cache adapter.

Uses ``httpx.MockTransport`` to count requests and confirm that cache hits
never touch the network.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

import httpx

from workflowkit.cache import ContentCache, cache_enabled, url_key
from workflowkit.store import JsonStore


def _client(calls: list[httpx.Request], payload: object = None, status: int = 200) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status, json=payload if payload is not None else {"ok": True})

    return httpx.Client(transport=httpx.MockTransport(handler))


class ContentCacheBehaviorTests(unittest.TestCase):
    def test_url_key_is_stable_hex_digest(self) -> None:
        key = url_key("https://example.com/api?q=1")

        self.assertEqual(key, url_key("https://example.com/api?q=1"))
        self.assertNotEqual(key, url_key("https://example.com/api?q=2"))
        self.assertEqual(len(key), 64)
        self.assertTrue(all(char in "0123456789abcdef" for char in key))

    def test_cache_enabled_only_for_positive_numbers(self) -> None:
        self.assertTrue(cache_enabled(60))
        self.assertTrue(cache_enabled(0.5))
        self.assertFalse(cache_enabled(0))
        self.assertFalse(cache_enabled(None))
        self.assertFalse(cache_enabled(False))
        self.assertFalse(cache_enabled(True))
        self.assertFalse(cache_enabled(-1))

    def test_fetch_json_caches_by_hashed_url(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            calls: list[httpx.Request] = []
            cache = ContentCache(JsonStore(Path(tmp) / "cache.json"))
            url = "https://example.com/items"

            with _client(calls, payload={"items": [1, 2]}) as client:
                first = cache.fetch_json(client, url, ttl=60)
                second = cache.fetch_json(client, url, ttl=60)

            self.assertEqual(first, {"items": [1, 2]})
            self.assertEqual(second, first)
            self.assertEqual(len(calls), 1)
            self.assertTrue(cache.has(url_key(url)))
            self.assertFalse(cache.has(url))
            self.assertTrue((Path(tmp) / "cache.json").exists())

    def test_fetch_json_without_ttl_always_requests(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            calls: list[httpx.Request] = []
            cache = ContentCache(JsonStore(Path(tmp) / "cache.json"))

            with _client(calls) as client:
                cache.fetch_json(client, "https://example.com/a")
                cache.fetch_json(client, "https://example.com/a", ttl=0)
                cache.fetch_json(client, "https://example.com/a", ttl=False)

            self.assertEqual(len(calls), 3)
            self.assertFalse(cache.has(url_key("https://example.com/a")))

    def test_fetch_json_propagates_http_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            calls: list[httpx.Request] = []
            cache = ContentCache(JsonStore(Path(tmp) / "cache.json"))

            with _client(calls, status=500) as client:
                with self.assertRaises(httpx.HTTPStatusError):
                    cache.fetch_json(client, "https://example.com/down", ttl=60)

            self.assertFalse(cache.has(url_key("https://example.com/down")))

    def test_commit_failure_is_not_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = JsonStore(Path(tmp) / "cache.json")
            cache = ContentCache(store)
            cache.set("k", "v", ttl=10)

            with mock.patch.object(store, "commit", side_effect=PermissionError("read-only")):
                with self.assertLogs("workflowkit.cache", level="WARNING") as logs:
                    self.assertFalse(cache.commit())

            self.assertIn("read-only", logs.output[0])
            self.assertEqual(cache.get("k"), "v")
            self.assertTrue(cache.commit())


if __name__ == "__main__":
    unittest.main()
