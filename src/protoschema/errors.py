"""Error types shared by the field builders."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence, Union


class SchemaError(Exception):
    """Base class for every error raised by protoschema."""


class ProtoValueError(SchemaError, TypeError):
    """Raised when a value cannot be written as a protobuf option literal."""


class FieldBuildError(SchemaError):
    """Raised by ``build`` with every problem found for a field.

    When a whole message is built, ``errors`` holds one nested
    :class:`FieldBuildError` per failing field.
    """

    def __init__(self, field_name: str, errors: Sequence[Exception]) -> None:
        self.field_name = field_name
        self.errors: List[Exception] = list(errors)
        super().__init__(self._format())

    def _format(self, indent: str = "") -> str:
        lines = [f"{indent}Field '{self.field_name}' could not be built:"]
        for error in self.errors:
            if isinstance(error, FieldBuildError):
                lines.append(error._format(indent + "  "))
            else:
                lines.append(f"{indent}  - {error}")
        return "\n".join(lines)


ErrorLike = Union[Exception, "ErrorList", None]


class ErrorList:
    """Collects independent errors instead of stopping at the first one."""

    def __init__(self, errors: Optional[Iterable[ErrorLike]] = None) -> None:
        self._errors: List[Exception] = []
        if errors is not None:
            self.extend(errors)

    @classmethod
    def join(cls, *items: ErrorLike) -> "ErrorList":
        """Return a new list holding the flattened contents of *items*."""

        return cls(items)

    def append(self, error: ErrorLike) -> None:
        if error is None:
            return
        if isinstance(error, ErrorList):
            self.extend(error)
            return
        if isinstance(error, FieldBuildError):
            self.extend(error.errors)
            return
        if any(self._same(error, existing) for existing in self._errors):
            return
        self._errors.append(error)

    def extend(self, errors: Iterable[ErrorLike]) -> None:
        for error in errors:
            self.append(error)

    def raise_for(self, field_name: str) -> None:
        """Raise :class:`FieldBuildError` for *field_name* when not empty."""

        if self._errors:
            raise FieldBuildError(field_name, self._errors)

    @property
    def messages(self) -> List[str]:
        return [str(error) for error in self._errors]

    def __iter__(self) -> Iterator[Exception]:
        return iter(list(self._errors))

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __repr__(self) -> str:
        return f"ErrorList({self.messages!r})"

    @staticmethod
    def _same(left: Exception, right: Exception) -> bool:
        return type(left) is type(right) and str(left) == str(right)


__all__ = ["ErrorList", "FieldBuildError", "ProtoValueError", "SchemaError"]
