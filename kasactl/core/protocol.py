"""JSON command envelopes and reply parsing.

Requests look like ``{"<subsystem>": {"<action>": {<params>}}}`` and replies
mirror that path with an ``err_code`` field at the leaf (0 means success).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from kasactl.core.errors import DecodeError, DeviceError, ResponseShapeError


@dataclass(frozen=True)
class Command:
    target: str
    action: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def envelope(self) -> dict[str, Any]:
        return {self.target: {self.action: dict(self.params)}}


def build(command: Command) -> bytes:
    return json.dumps(command.envelope(), separators=(",", ":")).encode("utf-8")


def decode_json(data: bytes) -> Any:
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Reply is not valid JSON: {exc}") from exc


def loads(data: bytes) -> dict[str, Any]:
    """Deserialize a reply body into a JSON object."""
    document = decode_json(data)
    if not isinstance(document, dict):
        raise ResponseShapeError(f"Reply root must be an object, got {type(document).__name__}")
    return document


def parse(command: Command, data: bytes) -> dict[str, Any]:
    """Return the leaf payload echoed back for ``command``.

    Raises ``DecodeError`` for unparseable bytes, ``ResponseShapeError`` when the
    subsystem/action path is missing, and ``DeviceError`` for a non-zero code.
    """
    return extract(command, loads(data))


def extract(command: Command, document: Mapping[str, Any]) -> dict[str, Any]:
    module = document.get(command.target)
    if not isinstance(module, dict):
        raise ResponseShapeError(f"Reply has no '{command.target}' object")
    # Unsupported modules answer at the subsystem level, e.g. "module not support".
    _raise_for_error(module)
    leaf = module.get(command.action)
    if not isinstance(leaf, dict):
        raise ResponseShapeError(f"Reply has no '{command.target}.{command.action}' object")
    _raise_for_error(leaf)
    return leaf


def _raise_for_error(node: Mapping[str, Any]) -> None:
    code = node.get("err_code", 0)
    if not isinstance(code, int) or isinstance(code, bool):
        raise ResponseShapeError(f"err_code must be an integer, got {code!r}")
    if code != 0:
        message = node.get("err_msg")
        raise DeviceError(code, str(message) if message is not None else None)
