# care_core/common/enums.py
from __future__ import annotations

from typing import Dict, Type

from django.db import models

from care_core.common.exceptions import UnknownEnumValue


class EnumMapping:
    """
    Explicit bidirectional table between an enumeration and the strings
    written to storage.

    Validated when built: every member must be mapped exactly once and
    no two members may share a stored string. Decoding an unrecognized
    stored string raises UnknownEnumValue.
    """

    _registry: Dict[type, "EnumMapping"] = {}

    def __init__(self, enum_cls: Type[models.TextChoices], table: Dict[models.TextChoices, str]):
        missing = [m for m in enum_cls if m not in table]
        if missing:
            raise ValueError(f"{enum_cls.__name__} mapping is missing members: {missing}")

        extra = [k for k in table if not isinstance(k, enum_cls)]
        if extra:
            raise ValueError(f"{enum_cls.__name__} mapping has foreign keys: {extra}")

        stored = list(table.values())
        if len(set(stored)) != len(stored):
            raise ValueError(f"{enum_cls.__name__} mapping has duplicate stored values.")
        if any(not s for s in stored):
            raise ValueError(f"{enum_cls.__name__} mapping has empty stored values.")

        self.enum_cls = enum_cls
        self._to_storage = dict(table)
        self._from_storage = {v: k for k, v in table.items()}

    @classmethod
    def register(cls, enum_cls, table) -> "EnumMapping":
        mapping = cls(enum_cls, table)
        cls._registry[enum_cls] = mapping
        return mapping

    @classmethod
    def for_enum(cls, enum_cls) -> "EnumMapping":
        try:
            return cls._registry[enum_cls]
        except KeyError:
            raise LookupError(f"No storage mapping registered for {enum_cls.__name__}.") from None

    @property
    def name(self) -> str:
        return self.enum_cls.__name__

    @property
    def max_length(self) -> int:
        return max(len(s) for s in self._from_storage)

    @property
    def choices(self) -> list[tuple[str, str]]:
        return [(self._to_storage[m], m.label) for m in self.enum_cls]

    def to_storage(self, value) -> str:
        member = self.coerce(value)
        return self._to_storage[member]

    def from_storage(self, raw: str):
        try:
            return self._from_storage[raw]
        except KeyError:
            raise UnknownEnumValue(self.name, raw) from None

    def coerce(self, value):
        """Accept a member, or a stored string, and return the member."""
        if isinstance(value, self.enum_cls):
            return value
        if isinstance(value, str):
            return self.from_storage(value)
        raise UnknownEnumValue(self.name, value)


def identity_table(enum_cls) -> dict:
    """Map each member to its own name (the layout the records are stored in)."""
    return {m: m.name for m in enum_cls}


class EnumField(models.CharField):
    """
    CharField that stores an enumeration through its EnumMapping and
    hands back enum members when loading.
    """

    def __init__(self, enum=None, *args, **kwargs):
        if enum is None:
            raise TypeError("EnumField requires enum=")
        self.enum = enum
        mapping = EnumMapping.for_enum(enum)
        kwargs["max_length"] = max(mapping.max_length, kwargs.get("max_length") or 0)
        kwargs["choices"] = mapping.choices
        super().__init__(*args, **kwargs)

    @property
    def mapping(self) -> EnumMapping:
        return EnumMapping.for_enum(self.enum)

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        kwargs.pop("choices", None)
        kwargs.pop("max_length", None)
        kwargs["enum"] = self.enum
        return name, path, args, kwargs

    def from_db_value(self, value, expression, connection):
        if value is None:
            return value
        return self.mapping.from_storage(value)

    def to_python(self, value):
        if value is None or value == "":
            return value
        return self.mapping.coerce(value)

    def get_prep_value(self, value):
        if value is None:
            return value
        return self.mapping.to_storage(value)
