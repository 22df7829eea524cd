"""Helpers for writing launcher script-filter workflows in Python.

Most workflows only need ``Workflow``; the other names are exported for
type hints and for composing the pieces differently.
"""

from __future__ import annotations

from .actions import Action, ActionDispatcher
from .environment import Environment, LauncherMeta, WorkflowMeta
from .errors import ConfigurationError, OutputValidationError, WorkflowError
from .file_cache import FileCache
from .matching import Matcher, SubsequenceMatcher, match
from .notify import Notification, Notifier, OsascriptNotifier
from .options import Options, UpdateSource, configure
from .output import Icon, Item, OutputBuffer, StructuredArg
from .updates import PackageInfo, UpdateChecker, UpdateCheckResult
from .workflow import Workflow

__all__ = [
    "Action",
    "ActionDispatcher",
    "ConfigurationError",
    "Environment",
    "FileCache",
    "Icon",
    "Item",
    "LauncherMeta",
    "Matcher",
    "Notification",
    "Notifier",
    "Options",
    "OsascriptNotifier",
    "OutputBuffer",
    "OutputValidationError",
    "PackageInfo",
    "StructuredArg",
    "SubsequenceMatcher",
    "UpdateCheckResult",
    "UpdateChecker",
    "UpdateSource",
    "Workflow",
    "WorkflowError",
    "WorkflowMeta",
    "configure",
    "match",
]
