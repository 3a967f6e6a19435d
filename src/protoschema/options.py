"""Serialization of validation rules into protobuf option literals."""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Sequence

from .errors import ErrorList, ProtoValueError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ProtoIdentifier(str):
    """A value written without quotes, such as an enum value name."""


def format_proto_value(value: Any) -> str:
    """Return *value* written in protobuf text-format option syntax.

    Mappings become ``{ key: value }`` messages with sorted keys, sequences
    become ``[ a, b ]`` lists, and ``timedelta``/``datetime`` values become
    ``{ seconds: s, nanos: n }`` messages.
    """

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, ProtoIdentifier):
        if not value:
            raise ProtoValueError("Identifier option values cannot be empty")
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ProtoValueError(f"Cannot write non-finite float {value!r} as an option value")
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (bytes, bytearray)):
        return _format_bytes(bytes(value))
    if isinstance(value, timedelta):
        return _format_seconds_nanos(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise ProtoValueError("Timestamp option values must be timezone-aware")
        return _format_seconds_nanos(value - _EPOCH)
    if isinstance(value, Mapping):
        return _format_message(value)
    if isinstance(value, (list, tuple)):
        return _format_list(value)
    raise ProtoValueError(
        f"Unsupported option value of type '{type(value).__name__}': {value!r}"
    )


def format_option(name: str, value: Any) -> str:
    """Return a full ``name = value`` option entry."""

    return f"{name} = {format_proto_value(value)}"


def option_name(entry: str) -> str:
    """Return the option name of a serialized ``name = value`` entry."""

    name, _, _ = entry.partition("=")
    return name.strip()


def get_options(overrides: Mapping[str, Any], options: Iterable[str]) -> List[str]:
    """Merge *overrides* into the ordered *options* entries.

    Entries may share a name, as repeated ``cel`` rules do. An override
    replaces the first entry of the same name in place and drops the others;
    other overrides are appended in mapping order. All serialization errors
    are collected and raised together.
    """

    merged: List[str] = list(options)

    errors = ErrorList()
    for name, value in overrides.items():
        try:
            entry = format_option(name, value)
        except ProtoValueError as exc:
            errors.append(ProtoValueError(f"Option '{name}': {exc}"))
            continue
        positions = [
            index for index, existing in enumerate(merged) if option_name(existing) == name
        ]
        if not positions:
            merged.append(entry)
            continue
        merged[positions[0]] = entry
        for index in reversed(positions[1:]):
            del merged[index]
    errors.raise_for("<options>")
    return merged


def _format_message(value: Mapping[Any, Any]) -> str:
    if not value:
        return "{}"
    entries = []
    for key in sorted(value, key=str):
        if not isinstance(key, str) or not key:
            raise ProtoValueError(f"Message option keys must be non-empty strings, got {key!r}")
        entries.append(f"{key}: {format_proto_value(value[key])}")
    return "{ " + ", ".join(entries) + " }"


def _format_list(values: Sequence[Any]) -> str:
    if not values:
        return "[]"
    return "[ " + ", ".join(format_proto_value(item) for item in values) + " ]"


def _format_bytes(value: bytes) -> str:
    pieces = []
    for byte in value:
        char = chr(byte)
        if char in ('"', "\\"):
            pieces.append("\\" + char)
        elif 0x20 <= byte < 0x7F:
            pieces.append(char)
        else:
            pieces.append(f"\\x{byte:02x}")
    return '"' + "".join(pieces) + '"'


def _format_seconds_nanos(delta: timedelta) -> str:
    total_micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    seconds, micros = divmod(abs(total_micros), 1_000_000)
    sign = -1 if total_micros < 0 else 1
    return f"{{ seconds: {sign * seconds}, nanos: {sign * micros * 1000} }}"


__all__ = [
    "ProtoIdentifier",
    "format_option",
    "format_proto_value",
    "get_options",
    "option_name",
]
