"""Emitters: one per operation, each turning an `OperationPlan` into class body source.

Generated source refers to the runtime module as `_rt` and to field values
through their storage slots. Sources are returned unindented; the module
renderer places them in the class body.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass

from .defaults import ResolvedDefault
from .operations import DELEGATES, SLOTS, Operation
from .planner import OperationPlan, PlannedField, RecordPlan
from .selection import is_selected

INDENT = "    "

NOT_SAME_TYPE = (
    f"{INDENT}if not isinstance(other, type(self)):\n{INDENT}{INDENT}return NotImplemented\n"
)


@dataclass(frozen=True)
class MethodBody:
    """Generated source filling the slots of one operation."""

    operation: Operation
    slots: tuple[str, ...]
    source: str


def _str(text: str) -> str:
    """A Python string literal for `text`."""
    return json.dumps(text)


def _tuple(items: list[str]) -> str:
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


def _values(fields: tuple[PlannedField, ...] | list[PlannedField]) -> list[str]:
    return [f"self.{f.storage}" for f in fields]


def _default_value(default: ResolvedDefault) -> str:
    assert default.source is not None
    return default.source


def _gen_init(plan: OperationPlan) -> str:
    params = ["self"]
    late: list[str] = []
    star = False
    for f in plan.fields:
        if f.descriptor.kw_only and not star:
            params.append("*")
            star = True
        if not f.default.present:
            params.append(f.name)
        elif f.default.literal:
            params.append(f"{f.name}={_default_value(f.default)}")
        else:
            params.append(f"{f.name}=_rt.MISSING")
            late.append(
                f"{INDENT}if {f.name} is _rt.MISSING:\n"
                f"{INDENT}{INDENT}{f.name} = {_default_value(f.default)}"
            )

    lines = [f"def __init__({', '.join(params)}):"]
    lines.extend(late)
    for f in plan.fields:
        lines.append(f"{INDENT}self.{f.storage} = {f.name}")
    for f in plan.excluded:
        lines.append(f"{INDENT}self.{f.storage} = {_default_value(f.default)}")
    if len(lines) == 1:
        lines.append(f"{INDENT}pass")
    return "\n".join(lines)


def _gen_text(plan: OperationPlan, method: str, type_name: str) -> str:
    parts = ", ".join(f"{f.name}={{self.{f.storage}!r}}" for f in plan.fields)
    return (
        "@_rt.recursive_repr()\n"
        f"def {method}(self):\n"
        f'{INDENT}return f"{{type(self).{type_name}}}({parts})"'
    )


def _gen_repr(plan: OperationPlan) -> str:
    return _gen_text(plan, "__repr__", "__name__")


def _gen_str(plan: OperationPlan) -> str:
    return _gen_text(plan, "__str__", "__qualname__")


def _gen_eq(plan: OperationPlan) -> str:
    return (
        "def __eq__(self, other):\n"
        f"{NOT_SAME_TYPE}"
        f"{INDENT}return self.__structural_eq__(other)\n"
        "\n"
        "def __ne__(self, other):\n"
        f"{NOT_SAME_TYPE}"
        f"{INDENT}return not self.__structural_eq__(other)"
    )


def _gen_ord(plan: OperationPlan) -> str:
    methods = []
    for slot, test in zip(SLOTS[Operation.ORD], ["< 0", "<= 0", "> 0", ">= 0"]):
        methods.append(
            f"def {slot}(self, other):\n"
            f"{NOT_SAME_TYPE}"
            f"{INDENT}ordering = self.__structural_cmp__(other)\n"
            f"{INDENT}return ordering is not None and ordering {test}"
        )
    return "\n\n".join(methods)


def _gen_richcmp(plan: OperationPlan) -> str:
    return (
        "def __richcmp__(self, other, op):\n"
        f"{NOT_SAME_TYPE}"
        f"{INDENT}if op is _rt.CompareOp.EQ:\n"
        f"{INDENT}{INDENT}return self.__structural_eq__(other)\n"
        f"{INDENT}if op is _rt.CompareOp.NE:\n"
        f"{INDENT}{INDENT}return not self.__structural_eq__(other)\n"
        f"{INDENT}return op.matches(self.__structural_cmp__(other))"
    )


def _gen_hash(plan: OperationPlan) -> str:
    return (
        "def __hash__(self):\n"
        f"{INDENT}value = self.__structural_hash__() & _rt.HASH_MASK\n"
        f"{INDENT}if value > _rt.HASH_MAX:\n"
        f"{INDENT}{INDENT}value -= _rt.HASH_MASK + 1\n"
        f"{INDENT}return -2 if value == -1 else value"
    )


def _gen_iter(plan: OperationPlan) -> str:
    return f"def __iter__(self):\n{INDENT}return iter({_tuple(_values(plan.fields))})"


def _gen_reversed(plan: OperationPlan) -> str:
    values = _values(plan.fields)[::-1]
    return f"def __reversed__(self):\n{INDENT}return iter({_tuple(values)})"


def _gen_len(plan: OperationPlan) -> str:
    return f"def __len__(self):\n{INDENT}return {len(plan.fields)}"


def _gen_match_args(plan: OperationPlan) -> str:
    return f"__match_args__ = {_tuple([_str(f.name) for f in plan.fields])}"


def _field_spec(f: PlannedField) -> str:
    args = [_str(f.name), _str(f.descriptor.annotation_text)]
    if f.default.factory:
        args.append(f"default_factory=lambda: {_default_value(f.default)}")
    elif f.default.present:
        args.append(f"default={_default_value(f.default)}")

    init = is_selected(f.descriptor, Operation.INIT)
    if not init:
        args.append("init=False")
    if not is_selected(f.descriptor, Operation.REPR):
        args.append("repr=False")
    if init and f.descriptor.kw_only:
        args.append("kw_only=True")
    return f"_rt.FieldSpec({', '.join(args)})"


def _gen_fields(plan: OperationPlan) -> str:
    if not plan.fields:
        return "__dataclass_fields__ = _rt.DataclassFields(())"
    lines = ["__dataclass_fields__ = _rt.DataclassFields(", f"{INDENT}("]
    for f in plan.fields:
        lines.append(f"{INDENT}{INDENT}{_field_spec(f)},")
    lines.append(f"{INDENT})")
    lines.append(")")
    return "\n".join(lines)


def _gen_annotations(plan: OperationPlan) -> str:
    items = ", ".join(
        f"{_str(f.name)}: {_str(f.descriptor.annotation_text)}" for f in plan.fields
    )
    return f"__annotations__ = {{{items}}}"


def _gen_asdict(plan: OperationPlan) -> str:
    items = ", ".join(f"{_str(f.name)}: self.{f.storage}" for f in plan.fields)
    return f"def _asdict(self):\n{INDENT}return {{{items}}}"


def _gen_replace(plan: OperationPlan) -> str:
    storage = ", ".join(f"{_str(f.name)}: {_str(f.storage)}" for f in plan.fields)
    return (
        "def _replace(self, /, **changes):\n"
        f"{INDENT}storage = {{{storage}}}\n"
        f"{INDENT}unknown = [name for name in changes if name not in storage]\n"
        f"{INDENT}if unknown:\n"
        f'{INDENT}{INDENT}raise TypeError(f"Got unexpected field names: {{unknown!r}}")\n'
        f"{INDENT}new = self.__dk_copy__()\n"
        f"{INDENT}for name, value in changes.items():\n"
        f"{INDENT}{INDENT}setattr(new, storage[name], value)\n"
        f"{INDENT}return new"
    )


def _gen_make(plan: OperationPlan) -> str:
    count = len(plan.fields)
    lines = [
        "@classmethod",
        "def _make(cls, iterable):",
        f"{INDENT}values = tuple(iterable)",
        f"{INDENT}if len(values) != {count}:",
        f'{INDENT}{INDENT}raise TypeError(f"Expected {count} arguments, got {{len(values)}}")',
        f"{INDENT}new = cls.__new__(cls)",
    ]
    for i, f in enumerate(plan.fields):
        lines.append(f"{INDENT}new.{f.storage} = values[{i}]")
    for f in plan.excluded:
        lines.append(f"{INDENT}new.{f.storage} = {_default_value(f.default)}")
    lines.append(f"{INDENT}return new")
    return "\n".join(lines)


def _gen_field_defaults(plan: OperationPlan) -> str:
    items = ", ".join(
        f"{_str(f.name)}: {_default_value(f.default)}" for f in plan.fields if f.default.present
    )
    return f"_field_defaults = {{{items}}}"


def _gen_namedtuple_fields(plan: OperationPlan) -> str:
    return f"_fields = {_tuple([_str(f.name) for f in plan.fields])}"


EMITTERS: dict[Operation, Callable[[OperationPlan], str]] = {
    Operation.INIT: _gen_init,
    Operation.REPR: _gen_repr,
    Operation.STR: _gen_str,
    Operation.EQ: _gen_eq,
    Operation.ORD: _gen_ord,
    Operation.RICHCMP: _gen_richcmp,
    Operation.HASH: _gen_hash,
    Operation.ITER: _gen_iter,
    Operation.REVERSED: _gen_reversed,
    Operation.LEN: _gen_len,
    Operation.MATCH_ARGS: _gen_match_args,
    Operation.FIELDS: _gen_fields,
    Operation.ANNOTATIONS: _gen_annotations,
    Operation.ASDICT: _gen_asdict,
    Operation.REPLACE: _gen_replace,
    Operation.MAKE: _gen_make,
    Operation.FIELD_DEFAULTS: _gen_field_defaults,
    Operation.NAMEDTUPLE_FIELDS: _gen_namedtuple_fields,
}


def emit(plan: OperationPlan) -> MethodBody:
    """Generate the class body source of one planned operation."""
    return MethodBody(
        operation=plan.operation,
        slots=SLOTS[plan.operation],
        source=EMITTERS[plan.operation](plan),
    )


def emit_record(plan: RecordPlan) -> list[MethodBody]:
    """Generate every operation a record requests, in operation order."""
    return [emit(p) for p in plan.operations.values()]


def required_capabilities(plan: RecordPlan) -> tuple[str, ...]:
    """Capability methods the generated operations of a record delegate to."""
    names: list[str] = []
    for op in plan.operations:
        for name in DELEGATES.get(op, ()):
            if name not in names:
                names.append(name)
    return tuple(names)
