"""Runtime options for a workflow invocation.

``configure`` merges user overrides into the current ``Options`` and
normalizes them. It never touches the filesystem or network.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import timedelta
from enum import Enum

from .errors import ConfigurationError

MIN_UPDATE_INTERVAL = timedelta(seconds=1)


class UpdateSource(str, Enum):
    """Where the latest published workflow version is looked up."""

    PYPI = "pypi"
    GITHUB = "github"
    URL = "url"

    @classmethod
    def resolve(cls, value: object) -> UpdateSource:
        """Case-insensitive lookup; raises ``ConfigurationError`` on miss."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError("Invalid update source.")


@dataclass(frozen=True)
class Options:
    check_updates: bool = True
    update_interval: timedelta | None = field(default_factory=lambda: timedelta(days=1))
    update_item: bool = True
    update_notification: bool = True
    update_source: UpdateSource = UpdateSource.PYPI
    update_url: str | None = None

    @property
    def update_interval_seconds(self) -> float | None:
        if self.update_interval is None:
            return None
        return self.update_interval.total_seconds()

    @property
    def shows_updates(self) -> bool:
        """Whether an update check would have anywhere to report to."""
        return self.check_updates and (self.update_item or self.update_notification)


_OPTION_NAMES = frozenset(item.name for item in fields(Options))


def _coerce_interval(value: object) -> timedelta | None:
    if value is None or value is False:
        return None
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid update interval: {value!r}")
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid update interval: {value!r}") from exc
    return timedelta(seconds=seconds)


def configure(current: Options | None = None, overrides: Mapping[str, object] | None = None) -> Options:
    """Return ``current`` with ``overrides`` applied and normalized.

    ``update_interval`` may be a ``timedelta`` or a number of seconds. An
    interval that is missing or shorter than one second turns update checks
    off and is dropped. ``update_source`` is matched case-insensitively
    against ``UpdateSource``.
    """
    base = current if current is not None else Options()
    overrides = dict(overrides or {})

    unknown = sorted(set(overrides) - _OPTION_NAMES)
    if unknown:
        raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")

    merged = asdict(base)
    merged.update(overrides)

    interval = _coerce_interval(merged["update_interval"])
    check_updates = bool(merged["check_updates"])
    if interval is None or interval < MIN_UPDATE_INTERVAL:
        check_updates = False
        interval = None

    update_url = merged["update_url"]
    return replace(
        base,
        check_updates=check_updates,
        update_interval=interval,
        update_item=bool(merged["update_item"]),
        update_notification=bool(merged["update_notification"]),
        update_source=UpdateSource.resolve(merged["update_source"]),
        update_url=str(update_url) if update_url else None,
    )
