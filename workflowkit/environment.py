"""Launcher and workflow metadata read from the process environment.

``Environment`` is a frozen snapshot taken once at the process entry point
and handed to the ``Workflow``; tests substitute their own snapshot instead of
patching ``os.environ``. The ``launcher`` and ``workflow`` views are
recomputed on every access.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType

from platformdirs import user_cache_dir, user_data_dir

from .version import coerce_version, parse_version

LOGGER = logging.getLogger(__name__)

APP_NAME = "workflowkit"
ICON_FILENAME = "icon.png"


@dataclass(frozen=True)
class LauncherMeta:
    version: str | None
    theme: str | None
    theme_background: str | None
    theme_selection_background: str | None
    theme_subtext: float
    debug: bool
    preferences: str | None
    preferences_local_hash: str | None
    theme_file: Path | None = None


@dataclass(frozen=True)
class WorkflowMeta:
    name: str | None
    version: str | None
    uid: str | None
    bundle_id: str | None
    data: str | None
    cache: str | None
    icon: Path


def _parse_float(raw: str | None) -> float:
    try:
        return float(raw or 0)
    except ValueError:
        return 0.0


@dataclass(frozen=True)
class Environment:
    variables: Mapping[str, str] = field(default_factory=dict)
    cwd: Path = field(default_factory=Path.cwd)
    home: Path | None = None
    argv: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
        object.__setattr__(self, "argv", tuple(self.argv))

    @classmethod
    def from_os(cls) -> Environment:
        """Snapshot ``os.environ``, the working directory and ``sys.argv``."""
        env = dict(os.environ)
        home = env.get("HOME")
        return cls(
            variables=env,
            cwd=Path.cwd(),
            home=Path(home) if home else None,
            argv=tuple(sys.argv),
        )

    def get(self, name: str) -> str | None:
        value = self.variables.get(name)
        return value if value else None

    @property
    def debug(self) -> bool:
        return self.variables.get("alfred_debug") == "1"

    @property
    def input(self) -> list[str]:
        """User arguments, without the script path."""
        return list(self.argv[1:])

    def _version(self, name: str, label: str) -> str | None:
        raw = self.get(name)
        version = coerce_version(raw)
        if version is None and self.debug:
            LOGGER.debug("Invalid %s version: %s", label, raw)
        return version

    @property
    def launcher(self) -> LauncherMeta:
        meta = LauncherMeta(
            version=self._version("alfred_version", "Alfred"),
            theme=self.get("alfred_theme"),
            theme_background=self.get("alfred_theme_background"),
            theme_selection_background=self.get("alfred_theme_selection_background"),
            theme_subtext=_parse_float(self.get("alfred_theme_subtext")),
            debug=self.debug,
            preferences=self.get("alfred_preferences"),
            preferences_local_hash=self.get("alfred_preferences_localhash"),
        )
        theme_file = self.theme_file(meta)
        if theme_file is None:
            return meta
        return replace(meta, theme_file=theme_file)

    @property
    def workflow(self) -> WorkflowMeta:
        return WorkflowMeta(
            name=self.get("alfred_workflow_name"),
            version=self._version("alfred_workflow_version", "workflow"),
            uid=self.get("alfred_workflow_uid"),
            bundle_id=self.get("alfred_workflow_bundleid"),
            data=self.get("alfred_workflow_data"),
            cache=self.get("alfred_workflow_cache"),
            icon=self.cwd / ICON_FILENAME,
        )

    def theme_file(self, meta: LauncherMeta) -> Path | None:
        """Locate the active theme's ``theme.json``.

        Needs a home directory, a parseable launcher version and a theme name.
        A missing file is not an error; it is only reported in debug mode.
        """
        version = parse_version(meta.version)
        if self.home is None or version is None or not meta.theme:
            return None

        candidate = (
            self.home
            / "Library"
            / "Application Support"
            / f"Alfred {version.major}"
            / "Alfred.alfredpreferences"
            / "themes"
            / meta.theme
            / "theme.json"
        )
        if candidate.is_file():
            return candidate
        if self.debug:
            LOGGER.debug('Could not find theme file "%s"', candidate)
        return None

    def load_theme(self) -> dict[str, object]:
        """Return the parsed theme file, or ``{}`` when unavailable."""
        theme_file = self.launcher.theme_file
        if theme_file is None:
            return {}
        try:
            data = json.loads(theme_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.debug("Could not read theme file %s: %s", theme_file, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _app_key(self) -> str:
        return self.get("alfred_workflow_bundleid") or APP_NAME

    @property
    def cache_dir(self) -> Path:
        """Launcher-provided cache directory, or a per-user fallback."""
        cache = self.get("alfred_workflow_cache")
        if cache:
            return Path(cache)
        return Path(user_cache_dir(self._app_key(), appauthor=False))

    @property
    def data_dir(self) -> Path:
        """Launcher-provided data directory, or a per-user fallback."""
        data = self.get("alfred_workflow_data")
        if data:
            return Path(data)
        return Path(user_data_dir(self._app_key(), appauthor=False))
