"""Script-filter output: result items, variables and the rerun directive.

An ``OutputBuffer`` lives for one invocation. Handlers add to it,
``serialize`` turns it into the launcher's JSON shape and ``reset`` clears it
for the next ``feedback`` call.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields

from .errors import OutputValidationError

RERUN_MIN = 0.1  # exclusive
RERUN_MAX = 5.0  # inclusive


@dataclass(frozen=True)
class StructuredArg:
    """An ``arg`` that carries workflow variables along with its value."""

    arg: str
    variables: dict[str, object] = field(default_factory=dict)

    def to_wire(self) -> str:
        payload = {"alfredworkflow": {"arg": self.arg, "variables": dict(self.variables)}}
        return json.dumps(payload, separators=(",", ":"))


@dataclass(frozen=True)
class Icon:
    path: str
    type: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"path": self.path}
        if self.type:
            data["type"] = self.type
        return data


def _coerce_arg(value: object) -> str | StructuredArg | None:
    if value is None or isinstance(value, (str, StructuredArg)):
        return value
    if isinstance(value, Mapping):
        return StructuredArg(arg=str(value.get("arg", "")), variables=dict(value.get("variables") or {}))
    return str(value)


def _coerce_icon(value: object) -> Icon | None:
    if value is None or isinstance(value, Icon):
        return value
    if isinstance(value, Mapping):
        return Icon(path=str(value.get("path", "")), type=value.get("type"))
    return Icon(path=str(value))


@dataclass
class Item:
    title: str
    subtitle: str | None = None
    arg: str | StructuredArg | None = None
    icon: Icon | None = None
    valid: bool | None = None
    autocomplete: str | None = None
    uid: str | None = None
    type: str | None = None
    match: str | None = None
    quicklookurl: str | None = None
    mods: dict[str, object] | None = None
    text: dict[str, str] | None = None
    variables: dict[str, object] | None = None

    def __post_init__(self) -> None:
        self.arg = _coerce_arg(self.arg)
        self.icon = _coerce_icon(self.icon)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> Item:
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise OutputValidationError(f"Unknown item field(s): {', '.join(unknown)}")
        if not data.get("title"):
            raise OutputValidationError("Items need a title")
        return cls(**dict(data))  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {}
        for item_field in fields(self):
            value = getattr(self, item_field.name)
            if value is None:
                continue
            if isinstance(value, StructuredArg):
                value = value.to_wire()
            elif isinstance(value, Icon):
                value = value.to_dict()
            data[item_field.name] = value
        return data


def validate_rerun(value: object) -> float:
    try:
        rerun = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise OutputValidationError(f"Invalid value for rerun: {value!r}") from exc
    if not RERUN_MIN < rerun <= RERUN_MAX:
        raise OutputValidationError(
            f"Invalid value for rerun, must be greater than {RERUN_MIN} and at most {RERUN_MAX}"
        )
    return rerun


@dataclass
class OutputBuffer:
    items: list[Item] = field(default_factory=list)
    variables: dict[str, object] = field(default_factory=dict)
    rerun: float | None = None

    def add_item(self, item: Item | Mapping[str, object]) -> Item:
        if not isinstance(item, Item):
            item = Item.from_mapping(item)
        self.items.append(item)
        return item

    def add_items(self, items: Iterable[Item | Mapping[str, object]]) -> list[Item]:
        return [self.add_item(item) for item in list(items)]

    def set_items(self, items: Iterable[Item | Mapping[str, object]]) -> list[Item]:
        converted = [item if isinstance(item, Item) else Item.from_mapping(item) for item in items]
        self.items = converted
        return converted

    def remove_items(self, title: str) -> int:
        """Drop every item whose title is exactly ``title``; returns the count."""
        kept = [item for item in self.items if item.title != title]
        removed = len(self.items) - len(kept)
        self.items = kept
        return removed

    def add_variable(self, key: str, value: object) -> None:
        self.variables[key] = value

    def add_variables(self, variables: Mapping[str, object]) -> None:
        self.variables = {**self.variables, **variables}

    def set_rerun(self, value: object) -> float:
        self.rerun = validate_rerun(value)
        return self.rerun

    def reset(self) -> None:
        self.items = []
        self.variables = {}
        self.rerun = None

    def serialize(self) -> dict[str, object]:
        """Return the script-filter payload for the current state."""
        payload: dict[str, object] = {}
        if self.rerun is not None:
            payload["rerun"] = validate_rerun(self.rerun)
        payload["items"] = [item.to_dict() for item in self.items]
        payload["variables"] = dict(self.variables)
        return payload

    def to_json(self) -> str:
        return json.dumps(self.serialize(), indent="\t")
