"""Plain-data rendering of decoded modules, for JSON output."""

import dataclasses
import json
from enum import Enum
from typing import Any

from .types import Module, SectionID


def to_dict(value: Any) -> Any:
    """Convert a decoded value into JSON-compatible data.

    Dataclasses become dicts, tuples become lists, bytes become hex strings
    and enums their lower-case names. Sections get an extra ``"id"`` key.
    """
    if isinstance(value, Module):
        return {
            "version": value.version,
            "sections": [to_dict(s) for s in value.sections],
        }
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result = {}
        section_id = getattr(type(value), "id", None)
        if isinstance(section_id, SectionID):
            result["id"] = section_id.name.lower()
        for field in dataclasses.fields(value):
            result[field.name] = to_dict(getattr(value, field.name))
        return result
    if isinstance(value, Enum):
        return value.name.lower()
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, (list, tuple)):
        return [to_dict(v) for v in value]
    return value


def to_json(module: Module, indent: int | None = 2) -> str:
    return json.dumps(to_dict(module), indent=indent)


def summarize(module: Module) -> list[str]:
    """One line per section: id, kind and a short description."""
    lines = [f"version {module.version}, {len(module.sections)} sections"]
    for i, section in enumerate(module.sections):
        kind = section.id.name.lower()
        if hasattr(section, "name"):
            kind = f"{kind} {section.name!r}"
        lines.append(f"  {i:2d}: {kind} {_describe(section)}".rstrip())
    return lines


def _describe(section: Any) -> str:
    for attr in ("entries", "globals", "types", "bodies"):
        items = getattr(section, attr, None)
        if items is not None:
            return f"({len(items)} entries)"
    if hasattr(section, "payload"):
        return f"({len(section.payload)} bytes)"
    if hasattr(section, "index"):
        return f"(function {section.index})"
    return ""
