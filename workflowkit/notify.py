"""Desktop notification delivery.

``Notifier`` is the capability contract; ``OsascriptNotifier`` delivers
through macOS ``osascript``. Delivery reports success as a boolean and never
raises.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Protocol

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    message: str
    title: str = "Alfred"
    subtitle: str | None = None
    sound: str | None = None


class Notifier(Protocol):
    def notify(self, notification: Notification) -> bool: ...


def _applescript_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_applescript(notification: Notification) -> str:
    script = f"display notification {_applescript_string(notification.message)}"
    script += f" with title {_applescript_string(notification.title)}"
    if notification.subtitle:
        script += f" subtitle {_applescript_string(notification.subtitle)}"
    if notification.sound:
        script += f" sound name {_applescript_string(notification.sound)}"
    return script


class OsascriptNotifier:
    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    def notify(self, notification: Notification) -> bool:
        executable = shutil.which("osascript")
        if executable is None:
            LOGGER.debug("osascript is not available; notification dropped")
            return False
        try:
            subprocess.run(
                [executable, "-e", build_applescript(notification)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.debug("Notification failed: %s", exc)
            return False
        return True
