from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from protoschema.errors import FieldBuildError, ProtoValueError
from protoschema.options import (
    ProtoIdentifier,
    format_option,
    format_proto_value,
    get_options,
    option_name,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-3, "-3"),
        (1.5, "1.5"),
        ("^a", '"^a"'),
        ('say "hi"', '"say \\"hi\\""'),
        (b"\x00ab", '"\\x00ab"'),
        (ProtoIdentifier("COLOR_RED"), "COLOR_RED"),
        ([1, 2, 3], "[ 1, 2, 3 ]"),
        ([], "[]"),
        ({}, "{}"),
    ],
)
def test_format_proto_value_literals(value: object, expected: str) -> None:
    assert format_proto_value(value) == expected


def test_format_proto_value_sorts_message_keys() -> None:
    value = {"string": {"pattern": "^a", "min_len": 1}, "in": ["a", "b"]}

    assert format_proto_value(value) == (
        '{ in: [ "a", "b" ], string: { min_len: 1, pattern: "^a" } }'
    )


def test_format_proto_value_durations_and_timestamps() -> None:
    assert format_proto_value(timedelta(seconds=90, microseconds=5)) == (
        "{ seconds: 90, nanos: 5000 }"
    )
    assert format_proto_value(timedelta(seconds=-1, microseconds=-500)) == (
        "{ seconds: -1, nanos: -500000 }"
    )
    moment = datetime(1970, 1, 2, tzinfo=timezone.utc)
    assert format_proto_value(moment) == "{ seconds: 86400, nanos: 0 }"


@pytest.mark.parametrize(
    "value",
    [
        object(),
        {1, 2},
        float("nan"),
        float("inf"),
        datetime(2020, 1, 1),
        {1: "numeric key"},
        ProtoIdentifier(""),
    ],
)
def test_format_proto_value_rejects_unsupported_values(value: object) -> None:
    with pytest.raises(ProtoValueError):
        format_proto_value(value)


def test_proto_value_error_is_a_type_error() -> None:
    with pytest.raises(TypeError):
        format_proto_value(object())


def test_format_option_and_option_name() -> None:
    entry = format_option("(buf.validate.field).repeated.min_items", 1)

    assert entry == "(buf.validate.field).repeated.min_items = 1"
    assert option_name(entry) == "(buf.validate.field).repeated.min_items"


def test_get_options_replaces_in_place_and_appends() -> None:
    options = ["a = 1", "b = 2"]

    merged = get_options({"c": 3, "a": 10}, options)

    assert merged == ["a = 10", "b = 2", "c = 3"]
    assert options == ["a = 1", "b = 2"]


def test_get_options_without_overrides_keeps_order() -> None:
    assert get_options({}, ["z = 1", "a = 2"]) == ["z = 1", "a = 2"]


def test_get_options_reports_every_bad_override() -> None:
    with pytest.raises(FieldBuildError) as exc_info:
        get_options({"first": object(), "second": {3}}, [])

    messages = [str(error) for error in exc_info.value.errors]
    assert len(messages) == 2
    assert messages[0].startswith("Option 'first'")
    assert messages[1].startswith("Option 'second'")


def test_get_options_keeps_entries_sharing_a_name() -> None:
    options = ["cel = 1", "x = 0", "cel = 2"]

    assert get_options({}, options) == options
    assert get_options({"cel": 3}, options) == ["cel = 3", "x = 0"]
