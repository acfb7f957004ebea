"""Dataclass mixin for JSON-friendly serialization/deserialization."""
from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Type, TypeVar, cast

T = TypeVar("T", bound="DataclassIO")


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


class DataclassIO:
    """Mixin for dataclasses to provide standard to_dict/from_dict methods.

    ``to_dict`` emits only JSON-native values (enums by value, datetimes as
    ISO strings). ``from_dict`` ignores unknown keys; subclasses override it
    when fields need coercion back into enums or datetimes.
    """

    def to_dict(self) -> Dict[str, Any]:
        return _to_jsonable(self)

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any] | None = None) -> T:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected dict for {cls.__name__}, got {type(data)}")

        known_fields = {f.name for f in fields(cast(Any, cls))}
        return cls(**{k: v for k, v in data.items() if k in known_fields})
