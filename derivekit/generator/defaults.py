"""Default resolution and constructor argument ordering."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .catalogue import FieldDescriptor, TypeDescriptor
from .errors import DirectiveError, OrderingError

# Builtin types whose no-argument call gives an empty value
CONSTRUCTIBLE_BUILTINS = frozenset(
    [
        "bool",
        "bytearray",
        "bytes",
        "complex",
        "dict",
        "float",
        "frozenset",
        "int",
        "list",
        "set",
        "str",
        "tuple",
    ]
)


class DefaultKind(StrEnum):
    REQUIRED = "required"
    EXPLICIT = "explicit"
    IMPLIED = "implied"  # None for a nullable type
    CONSTRUCTED = "constructed"  # T() for a field left out of the constructor


@dataclass(frozen=True)
class ResolvedDefault:
    """The default of one field.

    `source` is a Python expression. A `literal` default can be placed in a
    signature as is; any other default is evaluated on every use.
    """

    kind: DefaultKind
    source: str | None = None
    literal: bool = False
    factory: bool = False

    @property
    def present(self) -> bool:
        return self.kind is not DefaultKind.REQUIRED


REQUIRED = ResolvedDefault(kind=DefaultKind.REQUIRED)
IMPLIED_NONE = ResolvedDefault(kind=DefaultKind.IMPLIED, source="None", literal=True)


def resolve_default(field: FieldDescriptor) -> ResolvedDefault:
    """Resolve the default of a field as a constructor argument."""
    if field.default is not None:
        return ResolvedDefault(
            kind=DefaultKind.EXPLICIT,
            source=field.default_text,
            literal=field.default.is_literal,
            factory=field.default_factory,
        )
    if field.type.nullable:
        return IMPLIED_NONE
    return REQUIRED


def resolve_fill(record: TypeDescriptor, field: FieldDescriptor) -> ResolvedDefault:
    """Resolve the value a field left out of the constructor starts with."""
    default = resolve_default(field)
    if default.present:
        return default
    if field.type.base in CONSTRUCTIBLE_BUILTINS:
        return ResolvedDefault(kind=DefaultKind.CONSTRUCTED, source=f"{field.type.base}()")
    raise DirectiveError(
        f"field is not initialized by the constructor and `{field.type.text}` has no "
        "implied value; add a default",
        record=record.name,
        field=field.label,
    )


def check_ordering(
    record: TypeDescriptor, fields: Iterable[tuple[FieldDescriptor, ResolvedDefault]]
) -> None:
    """Reject a required positional argument following one with a default.

    Keyword-only arguments may be required in any position.
    """
    after: FieldDescriptor | None = None
    for field, default in fields:
        if field.kw_only:
            continue
        if default.present:
            after = after or field
        elif after is not None:
            raise OrderingError(
                f"required argument follows argument {after.label} which has a default",
                record=record.name,
                field=field.label,
                position=field.position,
            )
