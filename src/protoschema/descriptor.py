from __future__ import annotations

"""Conversion of built fields into ``descriptor_pb2`` messages."""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from google.protobuf import descriptor_pb2

from .errors import FieldBuildError
from .fields import FieldBuilder
from .model import FieldData, ImportSet


def to_field_descriptor_proto(
    data: FieldData, *, type_name: Optional[str] = None
) -> descriptor_pb2.FieldDescriptorProto:
    """Return a :class:`FieldDescriptorProto` describing *data*.

    Map fields need the qualified name of their entry message in *type_name*.
    Optional fields get ``proto3_optional`` set; placing them in a synthetic
    oneof is left to the enclosing message (see :func:`build_message_descriptor`).
    """

    field_proto = descriptor_pb2.FieldDescriptorProto()
    field_proto.name = data.name
    field_proto.number = data.field_nr
    field_proto.json_name = _json_name(data.name)

    if data.repeated or data.is_map:
        field_proto.label = descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED
    else:
        field_proto.label = descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL

    scalar_type = _SCALAR_TYPES.get(data.proto_base_type)
    if data.is_map:
        if not type_name:
            raise ValueError(
                f"Map field '{data.name}' cannot be converted without its entry message"
            )
        field_proto.type = descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE
        field_proto.type_name = type_name
    elif scalar_type is not None:
        field_proto.type = scalar_type
    elif data.proto_base_type == "enum":
        field_proto.type = descriptor_pb2.FieldDescriptorProto.TYPE_ENUM
        field_proto.type_name = f".{data.proto_type}"
    elif data.proto_base_type == "message":
        field_proto.type = descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE
        field_proto.type_name = f".{data.proto_type}"
    else:
        raise ValueError(
            f"Unsupported base type '{data.proto_base_type}' for field '{data.name}'"
        )

    if data.optional and not data.repeated:
        field_proto.proto3_optional = True
    return field_proto


def map_entry_descriptor(data: FieldData) -> descriptor_pb2.DescriptorProto:
    """Return the ``<Name>Entry`` message protoc synthesizes for a map field."""

    if not data.is_map or data.map_key is None or data.map_value is None:
        raise ValueError(f"Field '{data.name}' is not a built map field")

    entry_proto = descriptor_pb2.DescriptorProto()
    entry_proto.name = map_entry_name(data.name)
    entry_proto.options.map_entry = True
    for name, number, part in (("key", 1, data.map_key), ("value", 2, data.map_value)):
        part = replace(part, name=name, field_nr=number, optional=False, repeated=False)
        entry_proto.field.append(to_field_descriptor_proto(part))
    return entry_proto


def map_entry_name(field_name: str) -> str:
    camel = _json_name(field_name)
    return f"{camel[:1].upper()}{camel[1:]}Entry"


def build_message_descriptor(
    name: str,
    builders: Iterable[FieldBuilder],
    imports: Optional[ImportSet] = None,
    *,
    package: Optional[str] = None,
) -> descriptor_pb2.DescriptorProto:
    """Build every field in *builders*, numbered from 1, into a message.

    Map fields get their entry message nested inside the result and optional
    fields get a synthetic ``_<field>`` oneof. Failures are reported together
    in one :class:`FieldBuildError` holding a nested error per failing field.
    """

    if imports is None:
        imports = set()

    message_proto = descriptor_pb2.DescriptorProto()
    message_proto.name = name
    full_name = ".".join(segment for segment in (package, name) if segment)

    field_errors: List[FieldBuildError] = []
    built: List[FieldData] = []
    for number, builder in enumerate(builders, start=1):
        try:
            built.append(builder.build(number, imports))
        except FieldBuildError as exc:
            field_errors.append(exc)

    synthetic_oneofs: List[str] = []
    for data in built:
        try:
            if data.is_map:
                entry_proto = map_entry_descriptor(data)
                field_proto = to_field_descriptor_proto(
                    data, type_name=f".{full_name}.{entry_proto.name}"
                )
                message_proto.nested_type.append(entry_proto)
            else:
                field_proto = to_field_descriptor_proto(data)
        except ValueError as exc:
            field_errors.append(FieldBuildError(data.name, [exc]))
            continue
        if field_proto.proto3_optional:
            field_proto.oneof_index = len(synthetic_oneofs)
            synthetic_oneofs.append(f"_{data.name}")
        message_proto.field.append(field_proto)

    if field_errors:
        raise FieldBuildError(name, field_errors)

    for oneof_name in synthetic_oneofs:
        message_proto.oneof_decl.add().name = oneof_name
    return message_proto


def _json_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


_SCALAR_TYPES: Dict[str, int] = {
    "double": descriptor_pb2.FieldDescriptorProto.TYPE_DOUBLE,
    "float": descriptor_pb2.FieldDescriptorProto.TYPE_FLOAT,
    "int64": descriptor_pb2.FieldDescriptorProto.TYPE_INT64,
    "uint64": descriptor_pb2.FieldDescriptorProto.TYPE_UINT64,
    "int32": descriptor_pb2.FieldDescriptorProto.TYPE_INT32,
    "fixed64": descriptor_pb2.FieldDescriptorProto.TYPE_FIXED64,
    "fixed32": descriptor_pb2.FieldDescriptorProto.TYPE_FIXED32,
    "bool": descriptor_pb2.FieldDescriptorProto.TYPE_BOOL,
    "string": descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
    "bytes": descriptor_pb2.FieldDescriptorProto.TYPE_BYTES,
    "uint32": descriptor_pb2.FieldDescriptorProto.TYPE_UINT32,
    "sfixed32": descriptor_pb2.FieldDescriptorProto.TYPE_SFIXED32,
    "sfixed64": descriptor_pb2.FieldDescriptorProto.TYPE_SFIXED64,
    "sint32": descriptor_pb2.FieldDescriptorProto.TYPE_SINT32,
    "sint64": descriptor_pb2.FieldDescriptorProto.TYPE_SINT64,
}


__all__ = [
    "build_message_descriptor",
    "map_entry_descriptor",
    "map_entry_name",
    "to_field_descriptor_proto",
]
