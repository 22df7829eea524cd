"""Tests for keyword action dispatch: first match wins, misses are quiet."""

from __future__ import annotations

import unittest

from workflowkit.actions import ActionDispatcher


class ActionDispatchTests(unittest.TestCase):
    def test_first_matching_keyword_wins(self) -> None:
        dispatcher = ActionDispatcher()
        calls: list[tuple[str, list[str]]] = []
        dispatcher.register("search", lambda args: calls.append(("first", args)))
        dispatcher.register("search", lambda args: calls.append(("second", args)))

        handled = dispatcher.run(["search", "foo", "bar"])

        self.assertIsNotNone(handled)
        self.assertEqual(handled.keyword, "search")
        self.assertEqual(calls, [("first", ["foo", "bar"])])

    def test_no_match_is_not_an_error(self) -> None:
        dispatcher = ActionDispatcher()
        dispatcher.register("open", lambda args: self.fail("should not run"))

        self.assertIsNone(dispatcher.run(["search", "x"]))
        self.assertIsNone(dispatcher.run([]))

    def test_matching_is_exact_string_equality(self) -> None:
        dispatcher = ActionDispatcher()
        dispatcher.register("Search", lambda args: self.fail("case differs"))

        self.assertIsNone(dispatcher.run(["search"]))

    def test_callback_result_is_kept(self) -> None:
        dispatcher = ActionDispatcher()
        dispatcher.register("list", lambda args: ["a", "b"])

        handled = dispatcher.run(["list"])

        self.assertEqual(handled.result, ["a", "b"])

    def test_sub_actions_take_precedence(self) -> None:
        dispatcher = ActionDispatcher()
        calls: list[tuple[str, list[str]]] = []
        parent = dispatcher.register("config", lambda args: calls.append(("config", args)))
        parent.action("set", lambda args: calls.append(("set", args)))

        dispatcher.run(["config", "set", "theme", "dark"])
        dispatcher.run(["config", "show"])

        self.assertEqual(calls, [("set", ["theme", "dark"]), ("config", ["show"])])

    def test_registration_order_is_preserved(self) -> None:
        dispatcher = ActionDispatcher()
        dispatcher.register("a")
        dispatcher.register("b")

        self.assertEqual([action.keyword for action in dispatcher.actions], ["a", "b"])


if __name__ == "__main__":
    unittest.main()
