"""Directive parsing and validation.

Directives come in namespaces. Each namespace is parsed into its own
partial record; field-level partial records are then merged into one
`FieldOptions` by `merge_field_options`, which rejects conflicting
information instead of letting one namespace override another.
"""

import ast
import keyword
import logging
from dataclasses import dataclass, field

from .errors import DirectiveError
from .naming import NameContext, NamingConvention, parse_convention
from .operations import FIELD_SELECTIVE, Operation, parse_operation
from .types import BOOLEAN_NAMES, Directive, DirectiveArg, DirectiveValue, RecordDecl, ValueKind

logger = logging.getLogger(__name__)

EXPOSE = "expose"
DERIVE = "derive"
SKIP = "skip"

TYPE_NAMESPACES = frozenset([EXPOSE, DERIVE])
FIELD_NAMESPACES = frozenset([EXPOSE, DERIVE, SKIP])

# More pairs than this leave the precedence of the middle ones undefined
MAX_EXPOSURES = 2

# `@derive(<key>=<bool>)` on a field, and the operations it controls
FLAG_OPERATIONS: dict[str, tuple[Operation, ...]] = {
    "init": (Operation.INIT,),
    "repr": (Operation.REPR,),
    "str": (Operation.STR,),
    "iter": (Operation.ITER, Operation.REVERSED),
    "len": (Operation.LEN,),
    "match_args": (Operation.MATCH_ARGS,),
    "dataclass_field": (Operation.FIELDS,),
    "annotations": (Operation.ANNOTATIONS,),
}

# `@derive(<key>="...")` on a field, and the context it renames
RENAME_KEYS: dict[str, NameContext] = {
    "attr_name": NameContext.ATTRIBUTE,
    "arg_name": NameContext.ARGUMENT,
    "match_name": NameContext.MATCH,
}

# Operations that fill the same slots and cannot be requested together
EXCLUSIVE_OPERATIONS = [
    (Operation.RICHCMP, Operation.EQ),
    (Operation.RICHCMP, Operation.ORD),
]


@dataclass(frozen=True)
class Exposure:
    """One exposed name of a record and its naming convention."""

    name: str
    convention: NamingConvention = NamingConvention.IDENTITY


@dataclass(frozen=True)
class TypeOptions:
    """Validated type-level directives."""

    operations: frozenset[Operation]
    exposures: tuple[Exposure, ...]
    get_all: bool = False
    set_all: bool = False
    module: str | None = None


@dataclass
class ExposeOptions:
    """Field-level `@expose(...)`: visibility and external name."""

    get: bool = False
    set: bool = False
    name: str | None = None


@dataclass
class DeriveOptions:
    """Field-level `@derive(...)`: per-operation customization."""

    flags: dict[Operation, bool] = field(default_factory=dict)
    default: DirectiveValue | None = None
    default_factory: bool = False
    kw_only: bool = False
    annotation: str | None = None
    name: str | None = None
    renames: dict[NameContext, str] = field(default_factory=dict)


@dataclass
class SkipOptions:
    """Field-level `@skip(...)`: operations the field is excluded from."""

    operations: set[Operation] = field(default_factory=set)


@dataclass(frozen=True)
class FieldOptions:
    """Merged field-level directives."""

    get: bool = False
    set: bool = False
    rename: str | None = None
    renames: tuple[tuple[NameContext, str], ...] = ()
    skip: frozenset[Operation] = frozenset()
    include: frozenset[Operation] = frozenset()
    default: DirectiveValue | None = None
    default_factory: bool = False
    kw_only: bool = False
    annotation: str | None = None


class _Context:
    """Names the record, field and directive being parsed, for diagnostics."""

    def __init__(self, record: str, field_name: str | None, directive: str | None):
        self.record = record
        self.field = field_name
        self.directive = directive

    def error(self, message: str) -> DirectiveError:
        return DirectiveError(
            message, record=self.record, field=self.field, directive=self.directive
        )


def _bool_value(ctx: _Context, arg: DirectiveArg) -> bool:
    if arg.value is None:
        return True
    if arg.value.kind == ValueKind.NAME and arg.value.text in BOOLEAN_NAMES:
        return BOOLEAN_NAMES[arg.value.text]
    raise ctx.error(f"`{arg.key}` expects a boolean, got {arg.value.text}")


def _string_value(ctx: _Context, arg: DirectiveArg) -> str:
    if arg.value is None or arg.value.kind != ValueKind.STRING:
        raise ctx.error(f"`{arg.key}` expects a string in double quotes")
    value = ast.literal_eval(arg.value.text)
    if not value:
        raise ctx.error(f"`{arg.key}` must not be empty")
    return value


def _once(ctx: _Context, seen: set[str], key: str) -> None:
    if key in seen:
        raise ctx.error(f"`{key}` may only be specified once")
    seen.add(key)


def _check_namespace(ctx: _Context, directive: Directive, allowed: frozenset[str]) -> None:
    if directive.namespace not in allowed:
        names = ", ".join(f"@{n}" for n in sorted(allowed))
        raise ctx.error(f"unknown directive, expected one of {names}")


def parse_type_options(record: RecordDecl) -> TypeOptions:
    """Parse and validate the directives attached to a record."""
    operations: set[Operation] = set()
    exposures: list[Exposure] = []
    get_all = False
    set_all = False
    module: str | None = None
    seen: set[str] = set()

    for directive in record.directives:
        ctx = _Context(record.name, None, directive.namespace)
        _check_namespace(ctx, directive, TYPE_NAMESPACES)

        if directive.namespace == DERIVE:
            for arg in directive.arguments:
                op = parse_operation(arg.key)
                if op is None:
                    raise ctx.error(f"unknown operation `{arg.key}`")
                if arg.value is not None:
                    raise ctx.error(f"`{arg.key}` does not take a value")
                if op in operations:
                    raise ctx.error(f"`{arg.key}` may only be requested once")
                operations.add(op)
            continue

        name: str | None = None
        convention: NamingConvention | None = None
        local: set[str] = set()
        for arg in directive.arguments:
            _once(ctx, local, arg.key)
            if arg.key == "name":
                name = _string_value(ctx, arg)
                if not name.isidentifier() or keyword.iskeyword(name):
                    raise ctx.error(f"exposed name {name!r} is not a usable identifier")
            elif arg.key == "rename_all":
                text = _string_value(ctx, arg)
                convention = parse_convention(text)
                if convention is None:
                    choices = ", ".join(f'"{c}"' for c in NamingConvention)
                    raise ctx.error(f"unknown renaming rule {text!r}, expected one of {choices}")
            elif arg.key == "get_all":
                get_all = get_all or _bool_value(ctx, arg)
            elif arg.key == "set_all":
                set_all = set_all or _bool_value(ctx, arg)
            elif arg.key == "module":
                _once(ctx, seen, "module")
                module = _string_value(ctx, arg)
            else:
                raise ctx.error(f"unknown key `{arg.key}`")

        if name is not None or convention is not None:
            exposures.append(
                Exposure(
                    name=name or record.name,
                    convention=convention or NamingConvention.IDENTITY,
                )
            )

    if len(exposures) > MAX_EXPOSURES:
        raise DirectiveError(
            f"{len(exposures)} exposed names declared; only a first (type and attribute names) "
            "and a last (argument names) entry are supported",
            record=record.name,
            directive=EXPOSE,
        )
    if not exposures:
        exposures.append(Exposure(name=record.name))

    for first, second in EXCLUSIVE_OPERATIONS:
        if first in operations and second in operations:
            raise DirectiveError(
                f"`{first}` and `{second}` cannot be requested together",
                record=record.name,
                directive=DERIVE,
            )

    return TypeOptions(
        operations=frozenset(operations),
        exposures=tuple(exposures),
        get_all=get_all,
        set_all=set_all,
        module=module,
    )


def _parse_expose(ctx: _Context, directive: Directive, options: ExposeOptions, seen: set[str]):
    for arg in directive.arguments:
        _once(ctx, seen, arg.key)
        if arg.key == "get":
            options.get = _bool_value(ctx, arg)
        elif arg.key == "set":
            options.set = _bool_value(ctx, arg)
        elif arg.key == "name":
            options.name = _string_value(ctx, arg)
        else:
            raise ctx.error(f"unknown key `{arg.key}`")


def _parse_derive(ctx: _Context, directive: Directive, options: DeriveOptions, seen: set[str]):
    for arg in directive.arguments:
        _once(ctx, seen, arg.key)
        if arg.key in FLAG_OPERATIONS:
            value = _bool_value(ctx, arg)
            for op in FLAG_OPERATIONS[arg.key]:
                options.flags[op] = value
        elif arg.key == "default":
            if arg.value is None:
                raise ctx.error("`default` requires a value")
            options.default = arg.value
        elif arg.key == "default_factory":
            options.default_factory = _bool_value(ctx, arg)
        elif arg.key == "kw_only":
            options.kw_only = _bool_value(ctx, arg)
        elif arg.key == "annotation":
            options.annotation = _string_value(ctx, arg)
        elif arg.key == "name":
            options.name = _string_value(ctx, arg)
        elif arg.key in RENAME_KEYS:
            options.renames[RENAME_KEYS[arg.key]] = _string_value(ctx, arg)
        else:
            raise ctx.error(f"unknown key `{arg.key}`")


def _parse_skip(ctx: _Context, directive: Directive, options: SkipOptions, seen: set[str]):
    for arg in directive.arguments:
        _once(ctx, seen, arg.key)
        if arg.value is not None:
            raise ctx.error(f"`{arg.key}` does not take a value")
        op = parse_operation(arg.key)
        if op is None:
            raise ctx.error(f"unknown operation `{arg.key}`")
        if op not in FIELD_SELECTIVE:
            raise ctx.error(f"`{arg.key}` uses the whole record and cannot skip a field")
        options.operations.add(op)


def merge_field_options(
    ctx: _Context, expose: ExposeOptions, derive: DeriveOptions, skip: SkipOptions
) -> FieldOptions:
    """Merge the partial records of each namespace into one `FieldOptions`."""
    if expose.name is not None and derive.name is not None and expose.name != derive.name:
        raise ctx.error(
            f"@{EXPOSE} names the field {expose.name!r} but @{DERIVE} names it {derive.name!r}"
        )

    included = {op for op, value in derive.flags.items() if value}
    skipped = {op for op, value in derive.flags.items() if not value} | skip.operations

    conflicts = sorted(included & skip.operations)
    if conflicts:
        raise ctx.error(
            f"`{conflicts[0]}` is both skipped and requested by @{DERIVE}({conflicts[0]}=true)"
        )

    if derive.default_factory and derive.default is None:
        logger.warning(
            "%s.%s: default_factory without default is ignored", ctx.record, ctx.field
        )

    return FieldOptions(
        get=expose.get,
        set=expose.set,
        rename=expose.name or derive.name,
        renames=tuple(sorted(derive.renames.items())),
        skip=frozenset(skipped),
        include=frozenset(included),
        default=derive.default,
        default_factory=derive.default_factory and derive.default is not None,
        kw_only=derive.kw_only,
        annotation=derive.annotation,
    )


def parse_field_options(
    record: RecordDecl, directives: list[Directive], field_name: str
) -> FieldOptions:
    """Parse and merge the directives attached to one field."""
    expose = ExposeOptions()
    derive = DeriveOptions()
    skip = SkipOptions()
    seen: dict[str, set[str]] = {ns: set() for ns in FIELD_NAMESPACES}

    for directive in directives:
        ctx = _Context(record.name, field_name, directive.namespace)
        _check_namespace(ctx, directive, FIELD_NAMESPACES)
        if directive.namespace == EXPOSE:
            _parse_expose(ctx, directive, expose, seen[EXPOSE])
        elif directive.namespace == DERIVE:
            _parse_derive(ctx, directive, derive, seen[DERIVE])
        else:
            _parse_skip(ctx, directive, skip, seen[SKIP])

    return merge_field_options(_Context(record.name, field_name, None), expose, derive, skip)
