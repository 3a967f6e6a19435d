"""Builders for scalar, enum, message and map protobuf fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple, TypeVar

from .config import BuilderConfig
from .errors import ErrorList, ProtoValueError, SchemaError
from .model import FieldData, ImportSet, MessageRef
from .options import format_option, get_options, option_name

# Protobuf scalar name -> Python host type.
_SCALAR_TYPES: Dict[str, str] = {
    "double": "float",
    "float": "float",
    "int64": "int",
    "uint64": "int",
    "int32": "int",
    "fixed64": "int",
    "fixed32": "int",
    "bool": "bool",
    "string": "str",
    "bytes": "bytes",
    "uint32": "int",
    "sfixed32": "int",
    "sfixed64": "int",
    "sint32": "int",
    "sint64": "int",
}

_MAP_KEY_TYPES = frozenset(
    name for name in _SCALAR_TYPES if name not in {"double", "float", "bytes"}
)

_B = TypeVar("_B", bound="_SettingsMixin")


class FieldBuilder(Protocol):
    """Anything that can be compiled into a :class:`FieldData`."""

    @property
    def type_name(self) -> str:
        ...

    @property
    def message_ref(self) -> Optional[MessageRef]:
        ...

    def build(self, field_nr: int, imports: ImportSet) -> FieldData:
        ...


def build_inner(
    builder: FieldBuilder, field_nr: int, imports: ImportSet, errors: ErrorList
) -> FieldData:
    """Build a wrapped builder, recording its failure in *errors*.

    Returns the zero-value :class:`FieldData` when the wrapped build fails.
    """

    try:
        return builder.build(field_nr, imports)
    except SchemaError as exc:
        errors.append(exc)
        return FieldData()


def promote_rules(config: BuilderConfig, path: Tuple[str, ...], data: FieldData) -> str:
    """Nest element rules under their base type and render them as one option."""

    return format_option(config.rule_option(*path), {data.proto_base_type: dict(data.rules)})


@dataclass(slots=True)
class _FieldSettings:
    name: str
    config: BuilderConfig
    options: Dict[str, Any] = field(default_factory=dict)
    rules: Dict[str, Any] = field(default_factory=dict)
    errors: ErrorList = field(default_factory=ErrorList)
    optional: bool = False
    required: bool = False

    def collect_options(
        self,
        base_type: str,
        imports: ImportSet,
        errors: ErrorList,
        leading: Optional[List[str]] = None,
    ) -> List[str]:
        entries: List[str] = list(leading or [])
        if self.required:
            entries.append(format_option(self.config.rule_option("required"), True))
        if self.rules:
            try:
                entries.append(format_option(self.config.rule_option(base_type), dict(self.rules)))
            except ProtoValueError as exc:
                errors.append(exc)
        try:
            merged = get_options(self.options, entries)
        except SchemaError as exc:
            errors.append(exc)
            merged = entries
        if any(option_name(entry).startswith(self.config.validate_option) for entry in merged):
            imports.add(self.config.validate_import)
        return merged


class _SettingsMixin:
    """Fluent setters shared by builders that keep a ``_settings`` attribute."""

    _settings: _FieldSettings

    @property
    def name(self) -> str:
        return self._settings.name

    def optional(self: _B) -> _B:
        self._settings.optional = True
        return self

    def required(self: _B) -> _B:
        self._settings.required = True
        return self

    def rule(self: _B, name: str, value: Any) -> _B:
        """Add a validation rule for this field's own type."""

        self._settings.rules[name] = value
        return self

    def rules(self: _B, **values: Any) -> _B:
        self._settings.rules.update(values)
        return self

    def option(self: _B, name: str, value: Any) -> _B:
        """Set a raw option; it replaces any generated option of the same name."""

        self._settings.options[name] = value
        return self


class ScalarField(_SettingsMixin):
    """A field of one of the protobuf scalar types."""

    def __init__(self, name: str, proto_type: str, *, config: BuilderConfig | None = None) -> None:
        host_type = _SCALAR_TYPES.get(proto_type)
        if host_type is None:
            raise ValueError(f"Unsupported scalar type '{proto_type}' for field '{name}'")
        self._proto_type = proto_type
        self._host_type = host_type
        self._settings = _FieldSettings(name=name, config=config or BuilderConfig())

    @property
    def type_name(self) -> str:
        return self._host_type

    @property
    def message_ref(self) -> Optional[MessageRef]:
        return None

    def build(self, field_nr: int, imports: ImportSet) -> FieldData:
        settings = self._settings
        errors = ErrorList(settings.errors)
        options = settings.collect_options(self._proto_type, imports, errors)
        errors.raise_for(settings.name)

        return FieldData(
            name=settings.name,
            proto_type=self._proto_type,
            proto_base_type=self._proto_type,
            type_name=self._host_type,
            field_nr=field_nr,
            optional=settings.optional,
            required=settings.required,
            options=tuple(options),
            rules=dict(settings.rules),
        )


class EnumField(_SettingsMixin):
    """A field holding a value of an enum declared elsewhere."""

    def __init__(
        self, name: str, enum_ref: MessageRef, *, config: BuilderConfig | None = None
    ) -> None:
        self._enum_ref = enum_ref
        self._settings = _FieldSettings(name=name, config=config or BuilderConfig())

    @property
    def type_name(self) -> str:
        return self._enum_ref.name

    @property
    def message_ref(self) -> Optional[MessageRef]:
        return self._enum_ref

    def build(self, field_nr: int, imports: ImportSet) -> FieldData:
        settings = self._settings
        errors = ErrorList(settings.errors)
        if self._enum_ref.file:
            imports.add(self._enum_ref.file)
        options = settings.collect_options("enum", imports, errors)
        errors.raise_for(settings.name)

        return FieldData(
            name=settings.name,
            proto_type=self._enum_ref.full_name,
            proto_base_type="enum",
            type_name=self._enum_ref.name,
            field_nr=field_nr,
            optional=settings.optional,
            required=settings.required,
            options=tuple(options),
            rules=dict(settings.rules),
            message_ref=self._enum_ref,
        )


class MessageField(_SettingsMixin):
    """A field holding a message declared elsewhere."""

    def __init__(
        self, name: str, message_ref: MessageRef, *, config: BuilderConfig | None = None
    ) -> None:
        self._message_ref = message_ref
        self._settings = _FieldSettings(name=name, config=config or BuilderConfig())

    @property
    def type_name(self) -> str:
        return self._message_ref.name

    @property
    def message_ref(self) -> Optional[MessageRef]:
        return self._message_ref

    def build(self, field_nr: int, imports: ImportSet) -> FieldData:
        settings = self._settings
        errors = ErrorList(settings.errors)
        if self._message_ref.file:
            imports.add(self._message_ref.file)
        options = settings.collect_options("message", imports, errors)
        errors.raise_for(settings.name)

        return FieldData(
            name=settings.name,
            proto_type=self._message_ref.full_name,
            proto_base_type="message",
            type_name=self._message_ref.name,
            field_nr=field_nr,
            optional=settings.optional,
            required=settings.required,
            is_non_scalar=True,
            options=tuple(options),
            rules=dict(settings.rules),
            message_ref=self._message_ref,
        )


class MapField(_SettingsMixin):
    """A ``map<key, value>`` field composed from two other builders.

    The names given to the key and value builders are ignored.
    """

    def __init__(
        self,
        name: str,
        key: FieldBuilder,
        value: FieldBuilder,
        *,
        config: BuilderConfig | None = None,
    ) -> None:
        self._key = key
        self._value = value
        self._settings = _FieldSettings(name=name, config=config or BuilderConfig())
        self._pair_options: Dict[str, int] = {}
        self._min_pairs: Optional[int] = None
        self._max_pairs: Optional[int] = None

    @property
    def type_name(self) -> str:
        wrapper = self._settings.config.mapping_wrapper
        return f"{wrapper}[{self._key.type_name}, {self._value.type_name}]"

    @property
    def message_ref(self) -> Optional[MessageRef]:
        return self._value.message_ref

    def min_pairs(self, n: int) -> "MapField":
        check_count("min_pairs", n)
        if self._max_pairs is not None and self._max_pairs < n:
            self._settings.errors.append(ValueError("max_pairs cannot be smaller than min_pairs."))
        self._pair_options[self._settings.config.rule_option("map", "min_pairs")] = n
        self._min_pairs = n
        return self

    def max_pairs(self, n: int) -> "MapField":
        check_count("max_pairs", n)
        if self._min_pairs is not None and self._min_pairs > n:
            self._settings.errors.append(ValueError("max_pairs cannot be smaller than min_pairs."))
        self._pair_options[self._settings.config.rule_option("map", "max_pairs")] = n
        self._max_pairs = n
        return self

    def build(self, field_nr: int, imports: ImportSet) -> FieldData:
        settings = self._settings
        config = settings.config
        errors = ErrorList(settings.errors)

        key_data = build_inner(self._key, field_nr, imports, errors)
        value_data = build_inner(self._value, field_nr, imports, errors)

        if key_data.proto_type and (
            key_data.is_non_scalar or key_data.proto_base_type not in _MAP_KEY_TYPES
        ):
            errors.append(
                ValueError(
                    f"Map keys must be integral, bool or string scalars, not '{key_data.proto_type}'"
                )
            )
        if key_data.repeated or value_data.repeated:
            errors.append(ValueError("Map keys and values cannot be repeated fields"))
        if key_data.is_map or value_data.is_map:
            errors.append(ValueError("Map values cannot be maps (must be wrapped in a message type)"))
        if settings.optional:
            errors.append(ValueError("Map fields cannot be marked as optional"))

        leading: List[str] = []
        for name, bound in self._pair_options.items():
            leading.append(format_option(name, bound))
        for position, data in (("keys", key_data), ("values", value_data)):
            if not data.rules:
                continue
            try:
                leading.append(promote_rules(config, ("map", position), data))
            except ProtoValueError as exc:
                errors.append(exc)

        options = settings.collect_options("map", imports, errors, leading)
        errors.raise_for(settings.name)

        return FieldData(
            name=settings.name,
            proto_type=f"map<{key_data.proto_type}, {value_data.proto_type}>",
            proto_base_type="map",
            type_name=self.type_name,
            field_nr=field_nr,
            required=settings.required,
            is_map=True,
            is_non_scalar=True,
            options=tuple(options),
            message_ref=value_data.message_ref,
            map_key=key_data,
            map_value=value_data,
        )


def check_count(name: str, n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {n!r}")


__all__ = [
    "EnumField",
    "FieldBuilder",
    "MapField",
    "MessageField",
    "ScalarField",
    "build_inner",
    "check_count",
    "promote_rules",
]
