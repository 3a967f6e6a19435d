"""protoschema package initialization."""

from __future__ import annotations

from . import model
from .errors import ErrorList, FieldBuildError, ProtoValueError, SchemaError
from .model import FieldData, ImportSet, MessageRef

__all__ = [
    "BuilderConfig",
    "EnumField",
    "ErrorList",
    "FieldBuildError",
    "FieldBuilder",
    "FieldData",
    "ImportSet",
    "MapField",
    "MessageField",
    "MessageRef",
    "ProtoIdentifier",
    "ProtoValueError",
    "RepeatedField",
    "ScalarField",
    "SchemaError",
    "build_message_descriptor",
    "format_proto_value",
    "get_options",
    "model",
    "to_field_descriptor_proto",
]


def __getattr__(name: str):
    if name == "BuilderConfig":
        from .config import BuilderConfig

        return BuilderConfig

    if name in {"EnumField", "FieldBuilder", "MapField", "MessageField", "ScalarField"}:
        from .fields import EnumField, FieldBuilder, MapField, MessageField, ScalarField

        mapping = {
            "EnumField": EnumField,
            "FieldBuilder": FieldBuilder,
            "MapField": MapField,
            "MessageField": MessageField,
            "ScalarField": ScalarField,
        }
        return mapping[name]

    if name == "RepeatedField":
        from .repeated import RepeatedField

        return RepeatedField

    if name in {"ProtoIdentifier", "format_proto_value", "get_options"}:
        from .options import ProtoIdentifier, format_proto_value, get_options

        mapping = {
            "ProtoIdentifier": ProtoIdentifier,
            "format_proto_value": format_proto_value,
            "get_options": get_options,
        }
        return mapping[name]

    if name in {"build_message_descriptor", "to_field_descriptor_proto"}:
        from .descriptor import build_message_descriptor, to_field_descriptor_proto

        mapping = {
            "build_message_descriptor": build_message_descriptor,
            "to_field_descriptor_proto": to_field_descriptor_proto,
        }
        return mapping[name]

    raise AttributeError(name)
