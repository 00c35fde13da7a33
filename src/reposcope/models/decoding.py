"""Typed decoding helpers for JSON returned by the LLM.

The completion client only guarantees syntactically valid JSON. Model
``from_dict`` classmethods use these helpers to check field presence, types
and enumerated values, so a malformed answer fails loudly with
SchemaMismatchError instead of leaking missing fields downstream.
"""

from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound=Enum)
T = TypeVar("T")

_MISSING = object()


class SchemaMismatchError(ValueError):
    """Decoded JSON does not match the expected structure."""

    def __init__(self, path: str, problem: str) -> None:
        self.path = path
        self.problem = problem
        super().__init__(f"{path}: {problem}")


def expect_mapping(value: Any, path: str = "$") -> Mapping[str, Any]:
    """Require a JSON object.

    Raises:
        SchemaMismatchError: If value is not a mapping
    """
    if not isinstance(value, Mapping):
        raise SchemaMismatchError(path, f"expected object, got {type(value).__name__}")
    return value


def _lookup(data: Mapping[str, Any], key: str, path: str, default: Any) -> Any:
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        if default is _MISSING:
            raise SchemaMismatchError(f"{path}.{key}", "missing required field")
        return default
    return value


def get_str(
    data: Mapping[str, Any],
    key: str,
    path: str = "$",
    default: Any = _MISSING,
) -> str:
    """Read a string field.

    Args:
        data: JSON object
        key: Field name
        path: Location of ``data`` for error messages
        default: Value used when the field is absent or null

    Returns:
        The string value

    Raises:
        SchemaMismatchError: If the field is missing (with no default) or not a string
    """
    value = _lookup(data, key, path, default)
    if not isinstance(value, str):
        raise SchemaMismatchError(f"{path}.{key}", f"expected string, got {type(value).__name__}")
    return value


def get_int(
    data: Mapping[str, Any],
    key: str,
    path: str = "$",
    default: Any = _MISSING,
) -> int:
    """Read an integer field. Floats with an integral value are accepted."""
    value = _lookup(data, key, path, default)
    if isinstance(value, bool):
        raise SchemaMismatchError(f"{path}.{key}", "expected integer, got bool")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise SchemaMismatchError(f"{path}.{key}", f"expected integer, got {type(value).__name__}")
    return value


def get_float(
    data: Mapping[str, Any],
    key: str,
    path: str = "$",
    default: Any = _MISSING,
) -> float:
    """Read a numeric field as float."""
    value = _lookup(data, key, path, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise SchemaMismatchError(f"{path}.{key}", f"expected number, got {type(value).__name__}")
    return float(value)


def get_bool(
    data: Mapping[str, Any],
    key: str,
    path: str = "$",
    default: Any = _MISSING,
) -> bool:
    """Read a boolean field."""
    value = _lookup(data, key, path, default)
    if not isinstance(value, bool):
        raise SchemaMismatchError(f"{path}.{key}", f"expected boolean, got {type(value).__name__}")
    return value


def get_str_list(
    data: Mapping[str, Any],
    key: str,
    path: str = "$",
    default: Any = _MISSING,
) -> list[str]:
    """Read a list of strings.

    Non-string items are rejected rather than coerced.
    """
    value = _lookup(data, key, path, default)
    if not isinstance(value, list):
        raise SchemaMismatchError(f"{path}.{key}", f"expected array, got {type(value).__name__}")
    for index, item in enumerate(value):
        if not isinstance(item, str):
            raise SchemaMismatchError(
                f"{path}.{key}[{index}]", f"expected string, got {type(item).__name__}"
            )
    return list(value)


def get_enum(
    data: Mapping[str, Any],
    key: str,
    enum_type: type[E],
    path: str = "$",
    default: Any = _MISSING,
) -> E:
    """Read an enumerated string field.

    Values are matched case-insensitively after trimming whitespace.

    Raises:
        SchemaMismatchError: If the value is not one of the enum's values
    """
    value = _lookup(data, key, path, default)
    if isinstance(value, enum_type):
        return value
    return parse_enum(value, enum_type, f"{path}.{key}")


def parse_enum(value: Any, enum_type: type[E], path: str = "$") -> E:
    """Convert a raw string into a member of ``enum_type``."""
    if not isinstance(value, str):
        raise SchemaMismatchError(path, f"expected string, got {type(value).__name__}")
    normalized = value.strip().lower()
    for member in enum_type:
        if member.value == normalized:
            return member
    allowed = " | ".join(member.value for member in enum_type)
    raise SchemaMismatchError(path, f"unknown value {value!r}, expected {allowed}")


def get_list_of(
    data: Mapping[str, Any],
    key: str,
    decode: Callable[[Any, str], T],
    path: str = "$",
    default: Any = _MISSING,
) -> list[T]:
    """Read a list whose items are decoded by ``decode(item, item_path)``."""
    value = _lookup(data, key, path, default)
    if not isinstance(value, list):
        raise SchemaMismatchError(f"{path}.{key}", f"expected array, got {type(value).__name__}")
    return [decode(item, f"{path}.{key}[{index}]") for index, item in enumerate(value)]


def to_plain(value: Any) -> Any:
    """Convert dataclasses, enums and containers into JSON-compatible values.

    Dataclasses with a ``to_dict`` method use it so field renames are honoured.
    """
    if is_dataclass(value) and not isinstance(value, type):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [to_plain(v) for v in value]
    return value
