"""Catalogue of the protocol operations a record can request."""

from enum import StrEnum, auto


class Operation(StrEnum):
    """A generated protocol operation, named as in `@derive(...)`."""

    INIT = auto()
    REPR = auto()
    STR = auto()
    EQ = auto()
    ORD = auto()
    RICHCMP = auto()
    HASH = auto()
    ITER = auto()
    REVERSED = auto()
    LEN = auto()
    MATCH_ARGS = auto()
    FIELDS = auto()
    ANNOTATIONS = auto()
    ASDICT = auto()
    REPLACE = auto()
    MAKE = auto()
    FIELD_DEFAULTS = auto()
    NAMEDTUPLE_FIELDS = auto()


class Requirement(StrEnum):
    """Visibility a field needs to take part in an operation."""

    ANY = auto()  # visibility is not consulted
    READABLE = auto()
    READABLE_OR_WRITABLE = auto()
    WHOLE_RECORD = auto()  # delegates to a capability, no field selection


REQUIREMENTS: dict[Operation, Requirement] = {
    Operation.INIT: Requirement.ANY,
    Operation.REPR: Requirement.READABLE_OR_WRITABLE,
    Operation.STR: Requirement.READABLE_OR_WRITABLE,
    Operation.ANNOTATIONS: Requirement.READABLE_OR_WRITABLE,
    Operation.ITER: Requirement.READABLE,
    Operation.REVERSED: Requirement.READABLE,
    Operation.LEN: Requirement.READABLE,
    Operation.MATCH_ARGS: Requirement.READABLE,
    Operation.FIELDS: Requirement.READABLE,
    Operation.ASDICT: Requirement.READABLE,
    Operation.REPLACE: Requirement.READABLE,
    Operation.MAKE: Requirement.READABLE,
    Operation.FIELD_DEFAULTS: Requirement.READABLE,
    Operation.NAMEDTUPLE_FIELDS: Requirement.READABLE,
    Operation.EQ: Requirement.WHOLE_RECORD,
    Operation.ORD: Requirement.WHOLE_RECORD,
    Operation.RICHCMP: Requirement.WHOLE_RECORD,
    Operation.HASH: Requirement.WHOLE_RECORD,
}

# Names each operation occupies on the generated class
SLOTS: dict[Operation, tuple[str, ...]] = {
    Operation.INIT: ("__init__",),
    Operation.REPR: ("__repr__",),
    Operation.STR: ("__str__",),
    Operation.EQ: ("__eq__", "__ne__"),
    Operation.ORD: ("__lt__", "__le__", "__gt__", "__ge__"),
    Operation.RICHCMP: ("__richcmp__",),
    Operation.HASH: ("__hash__",),
    Operation.ITER: ("__iter__",),
    Operation.REVERSED: ("__reversed__",),
    Operation.LEN: ("__len__",),
    Operation.MATCH_ARGS: ("__match_args__",),
    Operation.FIELDS: ("__dataclass_fields__",),
    Operation.ANNOTATIONS: ("__annotations__",),
    Operation.ASDICT: ("_asdict",),
    Operation.REPLACE: ("_replace",),
    Operation.MAKE: ("_make",),
    Operation.FIELD_DEFAULTS: ("_field_defaults",),
    Operation.NAMEDTUPLE_FIELDS: ("_fields",),
}

# Capability methods a whole-record operation delegates to
DELEGATES: dict[Operation, tuple[str, ...]] = {
    Operation.EQ: ("__structural_eq__",),
    Operation.ORD: ("__structural_cmp__",),
    Operation.RICHCMP: ("__structural_eq__", "__structural_cmp__"),
    Operation.HASH: ("__structural_hash__",),
}

# Operations a field can opt out of
FIELD_SELECTIVE = frozenset(
    op for op, req in REQUIREMENTS.items() if req is not Requirement.WHOLE_RECORD
)


def parse_operation(name: str) -> Operation | None:
    """Look up an operation by its directive name."""
    try:
        return Operation(name)
    except ValueError:
        return None
