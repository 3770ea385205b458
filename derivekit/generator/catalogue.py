"""Field catalogue: one immutable descriptor per record and field."""

from dataclasses import dataclass, field
from enum import StrEnum

from .directives import Exposure, parse_field_options, parse_type_options
from .errors import DirectiveError
from .naming import STORAGE_PREFIX, NameContext, NamingConvention
from .operations import REQUIREMENTS, Operation, Requirement
from .types import DirectiveValue, RecordDecl, TypeExpr


class Visibility(StrEnum):
    """How a field is exposed as an attribute."""

    NONE = "none"
    READABLE = "readable"
    WRITABLE = "writable"
    READ_WRITE = "readable-and-writable"

    @classmethod
    def of(cls, readable: bool, writable: bool) -> "Visibility":
        if readable and writable:
            return cls.READ_WRITE
        if readable:
            return cls.READABLE
        if writable:
            return cls.WRITABLE
        return cls.NONE

    @property
    def readable(self) -> bool:
        return self in (Visibility.READABLE, Visibility.READ_WRITE)

    @property
    def writable(self) -> bool:
        return self in (Visibility.WRITABLE, Visibility.READ_WRITE)

    def satisfies(self, requirement: Requirement) -> bool:
        """Check whether a field with this visibility can take part."""
        if requirement is Requirement.READABLE:
            return self.readable
        if requirement is Requirement.READABLE_OR_WRITABLE:
            return self.readable or self.writable
        return True


class DefaultSource(StrEnum):
    """Where the author-supplied default of a field comes from."""

    ABSENT = "absent"
    LITERAL = "literal"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class FieldDescriptor:
    """A field, its visibility and its parsed directives."""

    identifier: str | None
    position: int
    type: TypeExpr
    visibility: Visibility = Visibility.NONE
    skip: frozenset[Operation] = frozenset()
    include: frozenset[Operation] = frozenset()
    rename: str | None = None
    renames: dict[NameContext, str] = field(default_factory=dict)
    default: DirectiveValue | None = None
    default_factory: bool = False
    kw_only: bool = False
    annotation: str | None = None

    @property
    def storage(self) -> str:
        """Attribute the value is stored under on an instance."""
        key = self.identifier if self.identifier is not None else str(self.position)
        return f"{STORAGE_PREFIX}{key}"

    @property
    def label(self) -> str:
        """Name used for this field in diagnostics."""
        return self.identifier if self.identifier is not None else f"_{self.position}"

    @property
    def default_source(self) -> DefaultSource:
        if self.default is None:
            return DefaultSource.ABSENT
        if self.default.is_literal:
            return DefaultSource.LITERAL
        return DefaultSource.EXPRESSION

    @property
    def default_text(self) -> str | None:
        """Python source of the author-supplied default."""
        if self.default is None:
            return None
        return self.default.source

    @property
    def annotation_text(self) -> str:
        return self.annotation if self.annotation is not None else self.type.text


@dataclass(frozen=True)
class TypeDescriptor:
    """A record, its exposed names, requested operations and fields."""

    name: str
    exposures: tuple[Exposure, ...]
    capabilities: tuple[str, ...]
    operations: frozenset[Operation]
    fields: tuple[FieldDescriptor, ...]
    module: str | None = None

    @property
    def exposed_name(self) -> str:
        """The name the record is known by externally."""
        return self.exposures[0].name

    @property
    def aliases(self) -> list[str]:
        """Every exposed name, first one first, without repeats."""
        names: list[str] = []
        for exposure in self.exposures:
            if exposure.name not in names:
                names.append(exposure.name)
        return names

    def convention_for(self, context: NameContext) -> NamingConvention:
        """The first exposure governs attribute and match names, the last argument names."""
        if context is NameContext.ARGUMENT:
            return self.exposures[-1].convention
        return self.exposures[0].convention

    def requests(self, operation: Operation) -> bool:
        return operation in self.operations


def _check_includes(record: RecordDecl, descriptor: FieldDescriptor) -> None:
    # Inclusion overrides visibility except where values are read through attributes
    for op in sorted(descriptor.include):
        requirement = REQUIREMENTS[op]
        if requirement is Requirement.READABLE and not descriptor.visibility.readable:
            raise DirectiveError(
                f"`{op}` needs a readable field "
                f"but the field is {descriptor.visibility}",
                record=record.name,
                field=descriptor.label,
                directive="derive",
            )


def build_descriptor(record: RecordDecl) -> TypeDescriptor:
    """Build the catalogue of a record from its declaration."""
    options = parse_type_options(record)

    fields: list[FieldDescriptor] = []
    kw_only = False
    for decl in record.fields:
        label = decl.name if decl.name is not None else f"_{decl.position}"
        field_options = parse_field_options(record, decl.directives, label)

        # every field after the first keyword-only one is keyword-only too
        kw_only = kw_only or field_options.kw_only

        descriptor = FieldDescriptor(
            identifier=decl.name,
            position=decl.position,
            type=decl.type,
            visibility=Visibility.of(
                field_options.get or options.get_all,
                field_options.set or options.set_all,
            ),
            skip=field_options.skip,
            include=field_options.include,
            rename=field_options.rename,
            renames=dict(field_options.renames),
            default=field_options.default,
            default_factory=field_options.default_factory,
            kw_only=kw_only,
            annotation=field_options.annotation,
        )
        _check_includes(record, descriptor)
        fields.append(descriptor)

    return TypeDescriptor(
        name=record.name,
        exposures=options.exposures,
        capabilities=tuple(record.bases),
        operations=options.operations,
        fields=tuple(fields),
        module=options.module,
    )
