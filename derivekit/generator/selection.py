"""Per-operation field selection."""

from .catalogue import FieldDescriptor, TypeDescriptor
from .operations import REQUIREMENTS, Operation, Requirement


def is_selected(field: FieldDescriptor, operation: Operation) -> bool:
    """Check whether `field` takes part in `operation`."""
    requirement = REQUIREMENTS[operation]
    if requirement is Requirement.WHOLE_RECORD:
        return False
    if operation in field.skip:
        return False
    if operation in field.include and requirement is not Requirement.READABLE:
        return True
    return field.visibility.satisfies(requirement)


def select(record: TypeDescriptor, operation: Operation) -> list[FieldDescriptor]:
    """Fields of `record` used by `operation`, in declaration order.

    Whole-record operations delegate to a capability and select nothing.
    """
    return [f for f in record.fields if is_selected(f, operation)]


def excluded(record: TypeDescriptor, operation: Operation) -> list[FieldDescriptor]:
    """Fields of `record` left out of `operation`, in declaration order."""
    if REQUIREMENTS[operation] is Requirement.WHOLE_RECORD:
        return []
    return [f for f in record.fields if not is_selected(f, operation)]
