"""Reflective field metadata compatible with the `dataclasses` module."""

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .record import MISSING


@dataclass(frozen=True)
class FieldSpec:
    """Description of one field, turned into a `dataclasses.Field` on binding.

    Fields with init=False are registered as class variables so that
    `dataclasses.fields()` leaves them out.
    """

    name: str
    annotation: str
    default: Any = MISSING
    default_factory: Callable[[], Any] | None = None
    init: bool = True
    repr: bool = True
    kw_only: bool = False

    def to_field(self) -> dataclasses.Field:
        kwargs: dict[str, Any] = {"init": self.init, "repr": self.repr, "kw_only": self.kw_only}
        if self.default_factory is not None:
            kwargs["default_factory"] = self.default_factory
        elif self.default is not MISSING:
            kwargs["default"] = self.default

        f = dataclasses.field(**kwargs)
        f.name = self.name
        f.type = self.annotation
        # fields() only lists _FIELD entries
        f._field_type = dataclasses._FIELD if self.init else dataclasses._FIELD_CLASSVAR  # type: ignore
        return f


class DataclassFields:
    """Class attribute holding the `__dataclass_fields__` mapping of a record."""

    def __init__(self, specs: tuple[FieldSpec, ...]):
        self.specs = specs
        self.fields: dict[str, dataclasses.Field] = {}

    def __set_name__(self, owner: type, name: str) -> None:
        for spec in self.specs:
            f = spec.to_field()
            f.__set_name__(owner, spec.name)
            self.fields[spec.name] = f

    def __get__(self, instance: Any, owner: type | None = None) -> dict[str, dataclasses.Field]:
        return self.fields
