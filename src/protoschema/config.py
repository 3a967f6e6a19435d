"""Configuration helpers for protoschema field builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}

DEFAULT_VALIDATE_OPTION = "(buf.validate.field)"
DEFAULT_VALIDATE_IMPORT = "buf/validate/validate.proto"


def _parse_parameter_string(parameter: str | None) -> Dict[str, str]:
    if not parameter:
        return {}

    entries = parameter.replace(";", ",").split(",")
    result: Dict[str, str] = {}
    for entry in entries:
        piece = entry.strip()
        if not piece:
            continue
        if "=" in piece:
            key, value = piece.split("=", 1)
            result[key.strip().lower()] = value.strip()
        else:
            result[piece.lower()] = "true"
    return result


def _to_bool(value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    if isinstance(value, (int, float)):
        return bool(value)
    return None


def _non_empty(value: str | None, default: str, key: str) -> str:
    if value is None:
        return default
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"Parameter '{key}' cannot be empty")
    return stripped


@dataclass(slots=True)
class BuilderConfig:
    """Runtime configuration shared by the field builders."""

    validate_option: str = DEFAULT_VALIDATE_OPTION
    validate_import: str = DEFAULT_VALIDATE_IMPORT
    sequence_wrapper: str = "list"
    mapping_wrapper: str = "dict"
    warnings_as_errors: bool = False

    @classmethod
    def from_parameter_string(cls, parameter: str | None) -> "BuilderConfig":
        overrides = _parse_parameter_string(parameter)

        warnings_flag = overrides.get("warnings_as_errors")
        if warnings_flag is None:
            warnings_flag = overrides.get("strict")
        warnings_value = _to_bool(warnings_flag)
        if warnings_flag is not None and warnings_value is None:
            raise ValueError(f"Invalid boolean value '{warnings_flag}' for 'warnings_as_errors'")

        return cls(
            validate_option=_non_empty(
                overrides.get("validate_option"), DEFAULT_VALIDATE_OPTION, "validate_option"
            ),
            validate_import=_non_empty(
                overrides.get("validate_import"), DEFAULT_VALIDATE_IMPORT, "validate_import"
            ),
            sequence_wrapper=_non_empty(
                overrides.get("sequence_wrapper"), "list", "sequence_wrapper"
            ),
            mapping_wrapper=_non_empty(
                overrides.get("mapping_wrapper"), "dict", "mapping_wrapper"
            ),
            warnings_as_errors=warnings_value if warnings_value is not None else False,
        )

    def rule_option(self, *path: str) -> str:
        """Return the option name for a validation rule below the field extension."""

        return ".".join((self.validate_option,) + path)


__all__ = ["BuilderConfig", "DEFAULT_VALIDATE_IMPORT", "DEFAULT_VALIDATE_OPTION"]
