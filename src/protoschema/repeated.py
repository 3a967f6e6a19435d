"""The repeated field builder, which wraps any other field builder."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from .config import BuilderConfig
from .errors import ErrorList, ProtoValueError, SchemaError
from .fields import FieldBuilder, build_inner, check_count, promote_rules
from .model import FieldData, ImportSet, MessageRef
from .options import ProtoIdentifier, format_option, get_options

logger = logging.getLogger(__name__)

BOUNDS_ERROR = "max_items cannot be smaller than min_items."
UNIQUE_ERROR = "Cannot apply constraint 'unique' to a non-scalar repeated field (unique requires scalar elements)."
MAP_ERROR = "Map fields cannot be repeated directly (wrap them in a message type first)."
NESTED_ERROR = "Repeated fields cannot nest inside one another (wrap them in a message type first)."

_IGNORE_MODES = {
    "if_zero_value": "IGNORE_IF_ZERO_VALUE",
    "always": "IGNORE_ALWAYS",
}


class RepeatedField:
    """A repeated protobuf field built around another field builder.

    The name given to the wrapped builder is ignored; *name* is used instead.
    Configuration methods return the builder itself so calls can be chained::

        RepeatedField("tags", ScalarField("tag", "string").rule("min_len", 1)).unique().max_items(10)

    A builder is meant to be built once.
    """

    def __init__(
        self, name: str, field: FieldBuilder, *, config: BuilderConfig | None = None
    ) -> None:
        self._name = name
        self._field = field
        self._config = config or BuilderConfig()
        self._type_name = f"{self._config.sequence_wrapper}[{field.type_name}]"
        self._message_ref = field.message_ref
        self._unique = False
        self._min_items: Optional[int] = None
        self._max_items: Optional[int] = None
        self._repeated_options: Dict[str, Any] = {}
        self._cel_rules: List[Dict[str, Any]] = []
        self._options: Dict[str, Any] = {}
        self._errors = ErrorList()

    @property
    def name(self) -> str:
        return self._name

    @property
    def type_name(self) -> str:
        return self._type_name

    @property
    def message_ref(self) -> Optional[MessageRef]:
        return self._message_ref

    @property
    def is_non_scalar(self) -> bool:
        return True

    @property
    def errors(self) -> ErrorList:
        """Configuration errors recorded so far."""

        return ErrorList(self._errors)

    # Configuration ------------------------------------------------------
    def unique(self) -> "RepeatedField":
        """Require unique values. Only valid for scalar elements."""

        self._repeated_options[self._config.rule_option("repeated", "unique")] = True
        self._unique = True
        return self

    def min_items(self, n: int) -> "RepeatedField":
        """Require at least *n* items."""

        check_count("min_items", n)
        if self._max_items is not None and self._max_items < n:
            self._errors.append(ValueError(BOUNDS_ERROR))
        self._repeated_options[self._config.rule_option("repeated", "min_items")] = n
        self._min_items = n
        return self

    def max_items(self, n: int) -> "RepeatedField":
        """Allow at most *n* items."""

        check_count("max_items", n)
        if self._min_items is not None and self._min_items > n:
            self._errors.append(ValueError(BOUNDS_ERROR))
        self._repeated_options[self._config.rule_option("repeated", "max_items")] = n
        self._max_items = n
        return self

    def cel(self, rule_id: str, expression: str, message: str = "") -> "RepeatedField":
        """Add a CEL rule checked against the list as a whole.

        Each call adds another ``cel`` entry; element rules belong on the
        wrapped builder instead.
        """

        if not rule_id or not expression:
            raise ValueError("CEL rules need both an id and an expression")
        rule: Dict[str, Any] = {"id": rule_id, "expression": expression}
        if message:
            rule["message"] = message
        self._cel_rules.append(rule)
        return self

    def ignore(self, mode: str) -> "RepeatedField":
        """Skip this field's rules ``"always"`` or ``"if_zero_value"``."""

        identifier = _IGNORE_MODES.get(mode)
        if identifier is None:
            raise ValueError(
                f"Unknown ignore mode '{mode}' (expected one of {sorted(_IGNORE_MODES)})"
            )
        self._repeated_options[self._config.rule_option("ignore")] = ProtoIdentifier(identifier)
        return self

    def ignore_if_zero_value(self) -> "RepeatedField":
        return self.ignore("if_zero_value")

    def ignore_always(self) -> "RepeatedField":
        return self.ignore("always")

    def option(self, name: str, value: Any) -> "RepeatedField":
        """Set a raw option; it replaces any generated option of the same name."""

        self._options[name] = value
        return self

    def options(self, values: Mapping[str, Any]) -> "RepeatedField":
        self._options.update(values)
        return self

    # Build --------------------------------------------------------------
    def build(self, field_nr: int, imports: ImportSet) -> FieldData:
        """Build the wrapped field and compose the repeated field from it.

        Raises :class:`FieldBuildError` listing every problem found, including
        those of the wrapped builder and configuration errors.
        """

        errors = ErrorList(self._errors)
        field_data = build_inner(self._field, field_nr, imports, errors)

        if self._unique and field_data.is_non_scalar:
            errors.append(ValueError(UNIQUE_ERROR))
        if field_data.is_map:
            errors.append(ValueError(MAP_ERROR))
        if field_data.repeated:
            errors.append(ValueError(NESTED_ERROR))

        warnings: List[str] = []
        if field_data.optional:
            warnings.append(f"Ignoring 'optional' for repeated field '{self._name}'")
        if field_data.required:
            warnings.append(
                f"Ignoring ineffective 'required' for repeated field '{self._name}' "
                "(use min_items(1) to require at least one element)"
            )
        for warning in warnings:
            if self._config.warnings_as_errors:
                errors.append(ValueError(warning))
            else:
                logger.warning(warning)

        options: List[str] = []
        for name, value in self._repeated_options.items():
            options.append(format_option(name, value))
        for rule in self._cel_rules:
            options.append(format_option(self._config.rule_option("cel"), rule))

        if field_data.rules:
            try:
                options.append(promote_rules(self._config, ("repeated", "items"), field_data))
            except ProtoValueError as exc:
                errors.append(exc)

        try:
            options = get_options(self._options, options)
        except SchemaError as exc:
            errors.append(exc)

        errors.raise_for(self._name)

        if any(option.startswith(self._config.validate_option) for option in options):
            imports.add(self._config.validate_import)

        return FieldData(
            name=self._name,
            proto_type=field_data.proto_type,
            proto_base_type=field_data.proto_base_type,
            type_name=self._type_name,
            field_nr=field_nr,
            repeated=True,
            is_non_scalar=True,
            options=tuple(options),
            message_ref=field_data.message_ref,
            warnings=tuple(warnings),
        )


__all__ = ["RepeatedField"]
