"""Lenient semantic version handling.

Launchers and release pages report versions loosely (``"5"``, ``"v1.2"``,
``"4.0.9 [1135]"``). ``coerce_version`` pulls the first ``major[.minor[.patch]]``
run out of such text and pads it, the same way ``semver.coerce`` does.
"""

from __future__ import annotations

import re
from typing import NamedTuple

_VERSION_RE = re.compile(r"(?<!\d)(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?!\d)")


class Version(NamedTuple):
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(text: object) -> Version | None:
    """Return the coerced ``Version`` found in ``text`` or ``None``."""
    if text is None:
        return None
    match = _VERSION_RE.search(str(text))
    if match is None:
        return None
    major, minor, patch = match.groups()
    return Version(int(major), int(minor or 0), int(patch or 0))


def coerce_version(text: object) -> str | None:
    """Normalize a loosely formatted version to ``"X.Y.Z"``.

    Returns ``None`` when no numeric version can be found.
    """
    version = parse_version(text)
    return None if version is None else str(version)


def is_newer(candidate: object, current: object) -> bool:
    """True only when ``candidate`` is strictly greater than ``current``.

    Unparseable input on either side never counts as newer.
    """
    candidate_version = parse_version(candidate)
    current_version = parse_version(current)
    if candidate_version is None or current_version is None:
        return False
    return candidate_version > current_version
