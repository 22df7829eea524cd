"""Tests for script-filter output state.

Covers structured ``arg`` flattening, the rerun range, variable merging and
reset semantics.
"""

from __future__ import annotations

import json
import unittest

from workflowkit.errors import OutputValidationError
from workflowkit.output import Icon, Item, OutputBuffer, StructuredArg, validate_rerun


class ItemBehaviorTests(unittest.TestCase):
    def test_structured_arg_is_flattened_at_serialization(self) -> None:
        buffer = OutputBuffer()
        item = buffer.add_item({"title": "Run", "arg": {"arg": "foo", "variables": {"task": "x"}}})

        self.assertIsInstance(item.arg, StructuredArg)
        payload = buffer.serialize()

        self.assertEqual(
            payload["items"][0]["arg"],
            '{"alfredworkflow":{"arg":"foo","variables":{"task":"x"}}}',
        )

    def test_plain_fields_and_none_omission(self) -> None:
        item = Item(title="Hello", subtitle="World", arg="hello", valid=False, icon="icon.png")

        self.assertEqual(
            item.to_dict(),
            {
                "title": "Hello",
                "subtitle": "World",
                "arg": "hello",
                "icon": {"path": "icon.png"},
                "valid": False,
            },
        )

    def test_icon_mapping_keeps_type(self) -> None:
        item = Item(title="App", icon={"path": "/Applications/Safari.app", "type": "fileicon"})

        self.assertEqual(item.icon, Icon(path="/Applications/Safari.app", type="fileicon"))
        self.assertEqual(item.to_dict()["icon"], {"path": "/Applications/Safari.app", "type": "fileicon"})

    def test_mapping_items_are_validated(self) -> None:
        buffer = OutputBuffer()

        with self.assertRaises(OutputValidationError):
            buffer.add_item({"title": "x", "bogus": 1})
        with self.assertRaises(OutputValidationError):
            buffer.add_item({"subtitle": "no title"})


class OutputBufferBehaviorTests(unittest.TestCase):
    def test_rerun_boundaries(self) -> None:
        buffer = OutputBuffer()

        with self.assertRaises(OutputValidationError):
            buffer.set_rerun(0.1)
        self.assertEqual(buffer.set_rerun(0.11), 0.11)
        self.assertEqual(buffer.set_rerun(5.0), 5.0)
        with self.assertRaises(OutputValidationError):
            buffer.set_rerun(5.01)
        with self.assertRaises(OutputValidationError):
            validate_rerun("soon")

    def test_serialize_rejects_out_of_range_rerun(self) -> None:
        buffer = OutputBuffer(rerun=7.0)

        with self.assertRaises(OutputValidationError):
            buffer.serialize()

    def test_serialize_shape(self) -> None:
        buffer = OutputBuffer()
        buffer.add_items([Item(title="a"), {"title": "b"}])
        buffer.add_variable("mode", "list")
        buffer.add_variables({"page": 2})
        buffer.add_variables({"mode": "grid"})
        buffer.set_rerun(1)

        payload = buffer.serialize()

        self.assertEqual(list(payload), ["rerun", "items", "variables"])
        self.assertEqual(payload["rerun"], 1.0)
        self.assertEqual([item["title"] for item in payload["items"]], ["a", "b"])
        self.assertEqual(payload["variables"], {"mode": "grid", "page": 2})

    def test_rerun_key_absent_when_unset(self) -> None:
        self.assertEqual(OutputBuffer().serialize(), {"items": [], "variables": {}})

    def test_to_json_uses_tab_indentation(self) -> None:
        buffer = OutputBuffer()
        buffer.add_item(Item(title="a"))

        text = buffer.to_json()

        self.assertIn('\n\t"items": [', text)
        self.assertEqual(json.loads(text)["items"], [{"title": "a"}])

    def test_remove_items_by_exact_title(self) -> None:
        buffer = OutputBuffer()
        buffer.add_items([Item(title="keep"), Item(title="drop"), Item(title="drop me")])

        self.assertEqual(buffer.remove_items("drop"), 1)
        self.assertEqual([item.title for item in buffer.items], ["keep", "drop me"])

    def test_reset_clears_everything(self) -> None:
        buffer = OutputBuffer()
        buffer.add_item(Item(title="a"))
        buffer.add_variable("k", "v")
        buffer.set_rerun(2)

        buffer.reset()

        self.assertEqual(buffer.serialize(), {"items": [], "variables": {}})


if __name__ == "__main__":
    unittest.main()
