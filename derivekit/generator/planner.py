"""Generation plans: selected fields with resolved names and defaults.

A plan is built per record and per requested operation. Building the plan
for one record is fail-fast; `plan_each` isolates records from each other.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .catalogue import FieldDescriptor, TypeDescriptor, Visibility, build_descriptor
from .defaults import REQUIRED, ResolvedDefault, check_ordering, resolve_default, resolve_fill
from .errors import GenerationError
from .naming import NameContext, resolve_names
from .operations import Operation
from .selection import excluded, select
from .types import RecordDecl

logger = logging.getLogger(__name__)

# Naming context of the names each operation exposes
CONTEXTS: dict[Operation, NameContext] = {
    Operation.INIT: NameContext.ARGUMENT,
    Operation.MATCH_ARGS: NameContext.MATCH,
}

# Operations that build an instance and so must fill fields they do not take
FILLING = frozenset([Operation.INIT, Operation.MAKE])


@dataclass(frozen=True)
class PlannedField:
    """A field as used by one operation."""

    descriptor: FieldDescriptor
    name: str
    default: ResolvedDefault = REQUIRED

    @property
    def storage(self) -> str:
        return self.descriptor.storage

    @property
    def position(self) -> int:
        return self.descriptor.position


@dataclass(frozen=True)
class OperationPlan:
    """Everything an emitter needs to generate one operation."""

    operation: Operation
    record: TypeDescriptor
    fields: tuple[PlannedField, ...] = ()
    excluded: tuple[PlannedField, ...] = ()

    @property
    def class_name(self) -> str:
        return self.record.name


@dataclass(frozen=True)
class RecordPlan:
    """The plans of every operation requested by a record."""

    record: TypeDescriptor
    operations: dict[Operation, OperationPlan] = field(default_factory=dict)
    accessors: tuple[PlannedField, ...] = ()


@dataclass
class PlanOutcome:
    """Result of planning one record: a plan or the error that stopped it."""

    name: str
    plan: RecordPlan | None = None
    error: GenerationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _context(operation: Operation) -> NameContext:
    return CONTEXTS.get(operation, NameContext.ATTRIBUTE)


def plan_operation(record: TypeDescriptor, operation: Operation) -> OperationPlan:
    """Select, name and default the fields of one operation."""
    selected = select(record, operation)
    names = resolve_names(record, _context(operation), selected)

    planned = [
        PlannedField(descriptor=f, name=names[f.position], default=resolve_default(f))
        for f in selected
    ]

    if operation is Operation.INIT:
        check_ordering(record, ((p.descriptor, p.default) for p in planned))

    left_out = []
    if operation in FILLING:
        for f in excluded(record, operation):
            left_out.append(
                PlannedField(descriptor=f, name=f.label, default=resolve_fill(record, f))
            )

    logger.debug(
        "%s.%s: %s",
        record.name,
        operation,
        ", ".join(p.name for p in planned) or "(no fields)",
    )
    return OperationPlan(
        operation=operation, record=record, fields=tuple(planned), excluded=tuple(left_out)
    )


def plan_accessors(record: TypeDescriptor) -> tuple[PlannedField, ...]:
    """Attribute-named fields for every field exposed as an attribute."""
    visible = [f for f in record.fields if f.visibility is not Visibility.NONE]
    names = resolve_names(record, NameContext.ATTRIBUTE, visible)
    return tuple(PlannedField(descriptor=f, name=names[f.position]) for f in visible)


def plan_record(decl: RecordDecl | TypeDescriptor) -> RecordPlan:
    """Build the plan of every operation a record requests."""
    record = decl if isinstance(decl, TypeDescriptor) else build_descriptor(decl)

    operations = {op: plan_operation(record, op) for op in Operation if record.requests(op)}
    return RecordPlan(record=record, operations=operations, accessors=plan_accessors(record))


def plan_each(decls: Iterable[RecordDecl]) -> Iterator[PlanOutcome]:
    """Plan records one by one, yielding the error of a failing record in place of its plan."""
    for decl in decls:
        try:
            yield PlanOutcome(name=decl.name, plan=plan_record(decl))
        except GenerationError as e:
            logger.debug("%s: %s", decl.name, e)
            yield PlanOutcome(name=decl.name, error=e)
