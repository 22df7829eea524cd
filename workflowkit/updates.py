"""Throttled lookup of the latest published workflow version.

The lookup result is cached under ``LATEST_VERSION_KEY`` for the configured
update interval. Cache states:

* absent: look the version up online and cache the answer,
* ``False``: a recent lookup failed; stay quiet until the entry expires,
* a version string: use it without touching the network.

Failed lookups are cached as ``False`` too, so an unreachable registry costs
one request per interval rather than one per invocation.
"""

from __future__ import annotations

import logging
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

import httpx

from .cache import ContentCache
from .options import UpdateSource
from .version import coerce_version, is_newer

LOGGER = logging.getLogger(__name__)

LATEST_VERSION_KEY = "workflowkit_latest_version"
PYPI_URL = "https://pypi.org/pypi/{name}/json"
GITHUB_LATEST_RELEASE_URL = "https://api.github.com/repos/{repository}/releases/latest"
GITHUB_RELEASES_PAGE = "https://github.com/{repository}/releases/latest"

_GITHUB_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class PackageInfo:
    name: str | None = None
    version: str | None = None
    repository: str | None = None


@dataclass(frozen=True)
class UpdateCheckResult:
    version: str
    url: str
    checked_online: bool

    def is_newer_than(self, current: str | None) -> bool:
        return is_newer(self.version, current)


def github_repository(value: str | None) -> str | None:
    """Reduce a GitHub URL or ``owner/repo`` string to ``owner/repo``."""
    if not value:
        return None
    text = value.strip()
    marker = text.find("github.com")
    if marker >= 0:
        text = text[marker + len("github.com") :].lstrip(":/")
    elif "://" in text or text.count("/") != 1:
        return None
    parts = [part for part in text.split("/") if part]
    if len(parts) < 2:
        return None
    owner, repo = parts[0], parts[1].removesuffix(".git")
    if not _GITHUB_NAME_RE.match(owner) or not _GITHUB_NAME_RE.match(repo):
        return None
    return f"{owner}/{repo}"


def read_package_info(directory: Path) -> PackageInfo | None:
    """Read ``[project]`` name, version and repository from ``pyproject.toml``."""
    pyproject = directory / "pyproject.toml"
    try:
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    project = data.get("project")
    if not isinstance(project, dict):
        return None

    repository = None
    urls = project.get("urls")
    if isinstance(urls, dict):
        for label in ("Repository", "Source", "Homepage"):
            candidate = github_repository(urls.get(label))
            if candidate:
                repository = candidate
                break

    name = project.get("name")
    version = project.get("version")
    return PackageInfo(
        name=name if isinstance(name, str) else None,
        version=version if isinstance(version, str) else None,
        repository=repository,
    )


class UpdateChecker:
    def __init__(
        self,
        cache: ContentCache,
        interval_seconds: float | None,
        client: httpx.Client,
        update_url: str | None = None,
    ) -> None:
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.client = client
        self.update_url = update_url

    def update_command(self, source: UpdateSource, package: PackageInfo) -> str | None:
        """Where (or how) the user gets the new version."""
        if source is UpdateSource.PYPI:
            return f"pip install --upgrade {package.name}" if package.name else None
        if source is UpdateSource.GITHUB:
            repository = github_repository(package.repository)
            return GITHUB_RELEASES_PAGE.format(repository=repository) if repository else None
        return self.update_url

    def _lookup_pypi(self, package: PackageInfo) -> str | None:
        response = self.client.get(PYPI_URL.format(name=package.name))
        response.raise_for_status()
        return response.json()["info"]["version"]

    def _lookup_github(self, package: PackageInfo) -> str | None:
        repository = github_repository(package.repository)
        response = self.client.get(
            GITHUB_LATEST_RELEASE_URL.format(repository=repository),
            headers={"Accept": "application/vnd.github+json"},
        )
        response.raise_for_status()
        return response.json()["tag_name"]

    def _lookup_url(self, package: PackageInfo) -> str | None:
        response = self.client.get(self.update_url)  # type: ignore[arg-type]
        response.raise_for_status()
        return response.json()["version"]

    def lookup_latest(self, source: UpdateSource, package: PackageInfo) -> str | bool:
        """Ask ``source`` for the latest version; any failure yields ``False``."""
        lookups = {
            UpdateSource.PYPI: self._lookup_pypi,
            UpdateSource.GITHUB: self._lookup_github,
            UpdateSource.URL: self._lookup_url,
        }
        try:
            raw = lookups[source](package)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            LOGGER.debug("Update lookup via %s failed: %s", source.value, exc)
            return False
        latest = coerce_version(raw)
        if latest is None:
            LOGGER.debug("Update lookup via %s returned no usable version: %r", source.value, raw)
            return False
        return latest

    def check(self, source: UpdateSource, package: PackageInfo) -> UpdateCheckResult | None:
        """Resolve the latest version, online at most once per interval.

        Returns ``None`` when there is nothing to report: the last lookup
        failed, or the package lacks what ``source`` needs to be queried.
        """
        url = self.update_command(source, package)
        if url is None:
            LOGGER.debug("Not enough package information to check %s for updates", source.value)
            return None

        checked_online = False
        if self.cache.has(LATEST_VERSION_KEY):
            latest = self.cache.get(LATEST_VERSION_KEY)
        else:
            latest = self.lookup_latest(source, package)
            checked_online = True
            self.cache.set(LATEST_VERSION_KEY, latest, ttl=self.interval_seconds)
            self.cache.commit()

        if not isinstance(latest, str) or not latest:
            return None
        return UpdateCheckResult(version=latest, url=url, checked_online=checked_online)
