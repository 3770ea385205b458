"""Naming conventions and external name resolution."""

from __future__ import annotations

import keyword
import re
from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING

from .errors import DirectiveError, NameCollisionError
from .operations import SLOTS

if TYPE_CHECKING:
    from .catalogue import FieldDescriptor, TypeDescriptor

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])\d*|[A-Z]?[a-z]+\d*|\d+")

# Any resolved name must look like this
NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")

# Names the generated constructor body relies on
RESERVED_ARGUMENT_NAMES = frozenset(["self", "cls", "_rt"])

# Prefix of the slots field values are stored in
STORAGE_PREFIX = "_dk_"

# Members generated operations install on a class
GENERATED_MEMBERS = frozenset(slot for slots in SLOTS.values() for slot in slots)


class NamingConvention(StrEnum):
    """Casing transform applied to field identifiers."""

    IDENTITY = "identity"
    CAMEL_CASE = "camelCase"
    KEBAB_CASE = "kebab-case"
    LOWERCASE = "lowercase"
    PASCAL_CASE = "PascalCase"
    SCREAMING_KEBAB_CASE = "SCREAMING-KEBAB-CASE"
    SCREAMING_SNAKE_CASE = "SCREAMING_SNAKE_CASE"
    SNAKE_CASE = "snake_case"
    UPPERCASE = "UPPERCASE"

    def apply(self, name: str) -> str:
        """Apply this convention to an identifier."""
        if self is NamingConvention.IDENTITY:
            return name
        if self is NamingConvention.LOWERCASE:
            return name.lower()
        if self is NamingConvention.UPPERCASE:
            return name.upper()

        words = split_words(name)
        if self is NamingConvention.CAMEL_CASE:
            return "".join(
                w.lower() if i == 0 else w.capitalize() for i, w in enumerate(words)
            )
        if self is NamingConvention.PASCAL_CASE:
            return "".join(w.capitalize() for w in words)
        if self is NamingConvention.KEBAB_CASE:
            return "-".join(w.lower() for w in words)
        if self is NamingConvention.SCREAMING_KEBAB_CASE:
            return "-".join(w.upper() for w in words)
        if self is NamingConvention.SCREAMING_SNAKE_CASE:
            return "_".join(w.upper() for w in words)
        return "_".join(w.lower() for w in words)


def split_words(name: str) -> list[str]:
    """Split an identifier into words on separators and case boundaries."""
    token = name.replace("_", " ").replace("-", " ")
    return _WORD_RE.findall(token)


def parse_convention(text: str) -> NamingConvention | None:
    """Look up a convention by its directive spelling."""
    try:
        return NamingConvention(text)
    except ValueError:
        return None


class NameContext(StrEnum):
    """Where a resolved name is used."""

    ATTRIBUTE = "attribute"
    ARGUMENT = "argument"
    MATCH = "match"


def fallback_name(field: FieldDescriptor) -> str:
    """Name of a field before any convention is applied."""
    if field.identifier is None:
        return f"_{field.position}"
    return field.identifier


def resolve_name(record: TypeDescriptor, field: FieldDescriptor, context: NameContext) -> str:
    """Resolve the external name of `field` in `context`.

    An explicit per-context rename wins over a context-free rename, which
    wins over the type-level convention; positional fields without a rename
    keep their numeric fallback.
    """
    if context in field.renames:
        return field.renames[context]
    if field.rename is not None:
        return field.rename
    if field.identifier is None:
        return fallback_name(field)
    return record.convention_for(context).apply(field.identifier)


def check_name(
    record: TypeDescriptor, field: FieldDescriptor, context: NameContext, name: str
) -> None:
    """Reject names the generated module could not use."""
    if not NAME_RE.match(name):
        raise DirectiveError(
            f"{context} name {name!r} is not a valid name",
            record=record.name,
            field=fallback_name(field),
        )
    if context is NameContext.ARGUMENT and (
        not name.isidentifier()
        or keyword.iskeyword(name)
        or name in RESERVED_ARGUMENT_NAMES
        or _is_mangled(name)
    ):
        raise DirectiveError(
            f"{name!r} cannot be used as a constructor argument name",
            record=record.name,
            field=fallback_name(field),
        )
    if context is NameContext.ATTRIBUTE and (
        name.startswith(STORAGE_PREFIX) or _is_dunder(name) or name in GENERATED_MEMBERS
    ):
        raise DirectiveError(
            f"attribute name {name!r} is reserved for generated members",
            record=record.name,
            field=fallback_name(field),
        )


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def _is_mangled(name: str) -> bool:
    """Private names inside a class body are rewritten by the compiler."""
    return name.startswith("__") and not name.endswith("__")


def resolve_names(
    record: TypeDescriptor,
    context: NameContext,
    fields: Iterable[FieldDescriptor] | None = None,
) -> dict[int, str]:
    """Resolve names of the fields of a record used in one context.

    `fields` defaults to every field of the record.

    Returns a mapping of field position to name. Raises
    `NameCollisionError` if two fields resolve to the same name.
    """
    names: dict[int, str] = {}
    owners: dict[str, FieldDescriptor] = {}
    for field in record.fields if fields is None else fields:
        name = resolve_name(record, field, context)
        check_name(record, field, context, name)
        if name in owners:
            raise NameCollisionError(
                f"{context} name {name!r} is not unique",
                record=record.name,
                field=fallback_name(field),
                other=fallback_name(owners[name]),
            )
        owners[name] = field
        names[field.position] = name
    return names
