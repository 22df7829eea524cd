"""Keyword routing for workflow arguments.

``workflow.py action search "query"`` runs the callback registered for
``action``. Registration order decides ties: the first keyword equal to the
first argument wins and nothing else runs.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

ActionCallback = Callable[[list[str]], object]


class Action:
    def __init__(self, keyword: str, callback: ActionCallback | None = None) -> None:
        self.keyword = keyword
        self.callback = callback
        self.children = ActionDispatcher()
        self.result: object = None

    def action(self, keyword: str, callback: ActionCallback | None = None) -> Action:
        """Register a sub-action matched against the argument after ``keyword``."""
        return self.children.register(keyword, callback)

    def matches(self, args: Sequence[str]) -> bool:
        return bool(args) and args[0] == self.keyword

    def run(self, args: Sequence[str]) -> Action | None:
        """Run for ``args`` if ``args[0]`` is this keyword.

        Sub-actions get the first chance at the remaining arguments; the own
        callback runs only when none of them matched. Returns the action that
        handled the arguments, or ``None``.
        """
        if not self.matches(args):
            return None
        rest = list(args[1:])
        handled = self.children.run(rest)
        if handled is not None:
            return handled
        if self.callback is not None:
            self.result = self.callback(rest)
        return self

    def __repr__(self) -> str:
        return f"Action({self.keyword!r})"


class ActionDispatcher:
    def __init__(self) -> None:
        self._actions: list[Action] = []

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    def register(self, keyword: str, callback: ActionCallback | None = None) -> Action:
        action = Action(keyword, callback)
        self._actions.append(action)
        return action

    def run(self, args: Sequence[str]) -> Action | None:
        for action in self._actions:
            handled = action.run(args)
            if handled is not None:
                return handled
        return None
