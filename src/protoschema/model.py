from __future__ import annotations

"""Dataclasses describing built protobuf fields."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set, Tuple

ImportSet = Set[str]


@dataclass(frozen=True, slots=True)
class MessageRef:
    """Reference to a message (or enum) type declared elsewhere."""

    name: str
    package: Optional[str] = None
    file: Optional[str] = None

    @property
    def full_name(self) -> str:
        if self.package:
            return f"{self.package}.{self.name}"
        return self.name


@dataclass(frozen=True, slots=True)
class FieldData:
    """The output of a field builder.

    Every attribute defaults to its zero value, so ``FieldData()`` stands in
    for a field whose build failed. ``rules`` takes no part in the hash. Map
    fields keep their built key and value in ``map_key``/``map_value``.
    """

    name: str = ""
    proto_type: str = ""
    proto_base_type: str = ""
    type_name: str = ""
    field_nr: int = 0
    optional: bool = False
    repeated: bool = False
    required: bool = False
    is_map: bool = False
    is_non_scalar: bool = False
    options: Tuple[str, ...] = ()
    rules: Dict[str, Any] = field(default_factory=dict, hash=False)
    message_ref: Optional[MessageRef] = None
    map_key: Optional[FieldData] = None
    map_value: Optional[FieldData] = None
    warnings: Tuple[str, ...] = ()


__all__ = ["FieldData", "ImportSet", "MessageRef"]
