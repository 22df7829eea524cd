"""The per-process ``Workflow`` object.

Build one at the script's entry point, register actions, run them, then call
``feedback()`` once to print the script-filter JSON::

    workflow = Workflow({"update_source": "github"})
    workflow.action("search", lambda args: workflow.match(ITEMS, " ".join(args)))
    workflow.run()
    workflow.feedback()
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, TextIO, TypeVar

import httpx

from .actions import Action, ActionCallback, ActionDispatcher
from .cache import ContentCache
from .environment import Environment, LauncherMeta, WorkflowMeta
from .file_cache import FileCache
from .logs import setup_logging
from .matching import Matcher, match
from .notify import Notification, Notifier, OsascriptNotifier
from .options import Options, configure
from .output import Item, OutputBuffer
from .store import JsonStore, empty_directory
from .updates import PackageInfo, UpdateChecker, UpdateCheckResult, read_package_info

LOGGER = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
CACHE_FILENAME = "cache.json"
UPDATE_ITEM_TITLE = "Workflow update available!"
UPDATE_TASK = "wfUpdate"
HTTP_TIMEOUT = 10.0

T = TypeVar("T")


class Workflow:
    def __init__(
        self,
        options: Mapping[str, object] | None = None,
        *,
        environment: Environment | None = None,
        http_client: httpx.Client | None = None,
        notifier: Notifier | None = None,
        matcher: Matcher | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.environment = environment if environment is not None else Environment.from_os()
        setup_logging(self.environment.debug)

        self.options = configure(Options(), options)
        self.config = JsonStore(self.environment.data_dir / CONFIG_FILENAME)
        self.cache = ContentCache(JsonStore(self.environment.cache_dir / CACHE_FILENAME))
        self.buffer = OutputBuffer()
        self.actions = ActionDispatcher()
        self.notifier: Notifier = notifier if notifier is not None else OsascriptNotifier()
        self.matcher = matcher
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._stdout = stdout

    # -- configuration and metadata ------------------------------------------

    def configure(self, options: Mapping[str, object] | None = None, **overrides: object) -> Workflow:
        merged = {**dict(options or {}), **overrides}
        self.options = configure(self.options, merged)
        return self

    @property
    def launcher_meta(self) -> LauncherMeta:
        return self.environment.launcher

    @property
    def workflow_meta(self) -> WorkflowMeta:
        return self.environment.workflow

    def theme(self) -> dict[str, object]:
        return self.environment.load_theme()

    @property
    def input(self) -> list[str]:
        return self.environment.input

    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=HTTP_TIMEOUT, follow_redirects=True)
        return self._http_client

    # -- output buffer -------------------------------------------------------

    @property
    def items(self) -> list[Item]:
        return self.buffer.items

    @items.setter
    def items(self, items: Iterable[Item | Mapping[str, object]]) -> None:
        """Replace the buffered items, e.g. with a filtered view of them."""
        self.buffer.set_items(items)

    @property
    def variables(self) -> dict[str, object]:
        return self.buffer.variables

    def add_item(self, item: Item | Mapping[str, object]) -> Item:
        return self.buffer.add_item(item)

    def add_items(self, items: Iterable[Item | Mapping[str, object]]) -> list[Item]:
        return self.buffer.add_items(items)

    def add_variable(self, key: str, value: object) -> Workflow:
        self.buffer.add_variable(key, value)
        return self

    def add_variables(self, variables: Mapping[str, object]) -> Workflow:
        self.buffer.add_variables(variables)
        return self

    def set_rerun(self, value: float) -> Workflow:
        self.buffer.set_rerun(value)
        return self

    def reset(self) -> Workflow:
        self.buffer.reset()
        return self

    @property
    def output(self) -> dict[str, object]:
        return self.buffer.serialize()

    # -- actions -------------------------------------------------------------

    def action(self, keyword: str, callback: ActionCallback | None = None) -> Action:
        return self.actions.register(keyword, callback)

    def run(self, args: Sequence[str] | None = None) -> Action | None:
        """Dispatch ``args`` (default: the process input) to the first matching action.

        Items returned by the callback are added to the output buffer. A result
        made only of items already in the buffer (such as
        ``workflow.match(workflow.items, query)``) replaces the buffer instead.
        """
        handled = self.actions.run(list(args) if args is not None else self.input)
        if handled is not None and handled.result is not None:
            result = handled.result
            if isinstance(result, (Item, Mapping)):
                self.add_item(result)
            elif isinstance(result, Iterable) and not isinstance(result, (str, bytes)):
                self._collect(list(result))
        return handled

    def _collect(self, results: list[Item | Mapping[str, object]]) -> None:
        buffered = {id(item) for item in self.buffer.items}
        if results and all(id(item) in buffered for item in results):
            self.buffer.set_items(results)
        else:
            self.buffer.add_items(results)

    # -- caching -------------------------------------------------------------

    def cache_file(self, path: Path | str) -> FileCache:
        return FileCache(path, self.environment.cache_dir)

    def clear_cache(self) -> None:
        """Empty the whole workflow cache directory."""
        self.cache.store.reload()
        empty_directory(self.environment.cache_dir)

    def fetch(self, url: str, ttl: float | None = None, **options: Any) -> Any:
        """GET ``url`` and decode its JSON body, caching it for ``ttl`` seconds."""
        return self.cache.fetch_json(self.http_client, url, ttl, **options)

    # -- search --------------------------------------------------------------

    def match(
        self,
        candidates: Sequence[T],
        query: str,
        keys: Sequence[str] | None = None,
        threshold: float | None = None,
    ) -> Sequence[T]:
        return match(candidates, query, keys=keys, threshold=threshold, matcher=self.matcher)

    # -- notifications and updates -------------------------------------------

    def notify(self, message: str, title: str | None = None, subtitle: str | None = None) -> bool:
        """Show a desktop notification titled after the workflow by default."""
        default_title = f"Alfred {self.workflow_meta.name or ''}".strip()
        notification = Notification(message=message, title=title or default_title, subtitle=subtitle)
        return self.notifier.notify(notification)

    def _package_info(self, package: PackageInfo | None) -> PackageInfo:
        if package is not None:
            return package
        found = read_package_info(self.environment.cwd)
        if found is not None:
            return found
        return PackageInfo(version=self.workflow_meta.version)

    def check_updates(self, package: PackageInfo | None = None) -> UpdateCheckResult | None:
        """Check for a newer workflow release and announce it.

        Does nothing (and no I/O) unless update checks are on and an item or a
        notification would be shown. Never raises; failures are logged in
        debug mode.
        """
        if not self.options.shows_updates:
            return None
        try:
            return self._check_updates(self._package_info(package))
        except Exception as exc:
            LOGGER.debug("Update check failed: %s", exc)
            return None

    def _check_updates(self, package: PackageInfo) -> UpdateCheckResult | None:
        checker = UpdateChecker(
            self.cache,
            self.options.update_interval_seconds,
            self.http_client,
            update_url=self.options.update_url,
        )
        result = checker.check(self.options.update_source, package)
        if result is None:
            return None

        current = self.workflow_meta.version or package.version
        if not current or not result.is_newer_than(current):
            return result

        if result.checked_online and self.options.update_notification:
            self.notify(f"Workflow version {result.version} available. Current version: {current}.")

        if self.options.update_item:
            self.buffer.remove_items(UPDATE_ITEM_TITLE)
            self.buffer.add_item(
                Item(
                    title=UPDATE_ITEM_TITLE,
                    subtitle=f"Version {result.version} is available. Current version: {current}.",
                    icon=str(self.workflow_meta.icon),
                    arg=result.url,
                    variables={"task": UPDATE_TASK},
                )
            )
        return result

    # -- finalization --------------------------------------------------------

    def feedback(self) -> dict[str, object]:
        """Print the script-filter JSON for this invocation and reset the buffer."""
        if self.options.check_updates:
            self.check_updates()

        payload = self.buffer.serialize()
        stream = self._stdout if self._stdout is not None else sys.stdout
        stream.write(json.dumps(payload, indent="\t") + "\n")
        stream.flush()
        self.buffer.reset()
        return payload

    def close(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> Workflow:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
