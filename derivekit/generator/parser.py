"""Record definition parser using Lark."""

import logging
import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.visitors import Transformer

from .errors import GenerationError
from .types import (
    Directive,
    DirectiveArg,
    DirectiveValue,
    FieldDecl,
    RecordDecl,
    TypeExpr,
    ValueKind,
)

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None

# Outer type names that make a type nullable by construction
NULLABLE_WRAPPERS = frozenset(["Optional", "typing.Optional"])

# Outer type names that are nullable when one of their members is
UNION_WRAPPERS = frozenset(["Union", "typing.Union"])


class ValidationError(GenerationError):
    """Raised when a definition file is structurally invalid."""


@dataclass
class _Name:
    value: str


@dataclass
class _Bases:
    names: list[str]


@dataclass
class _Field:
    name: str | None
    type: TypeExpr
    directives: list[Directive]


@dataclass
class _TypeAtom:
    text: str
    base: str
    nullable: bool = False


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


class TreeTransformer(Transformer):
    """Transform parse tree into declaration types."""

    def start(self, args: list[Any]) -> list[RecordDecl]:
        return _filter(args, RecordDecl)

    def record(self, args: list[Any]) -> RecordDecl:
        bases = _find_one(args, _Bases)
        fields = [
            FieldDecl(name=f.name, type=f.type, position=i, directives=f.directives)
            for i, f in enumerate(_filter(args, _Field))
        ]
        return RecordDecl(
            name=_find_one(args, _Name),
            bases=bases.names if bases else [],
            fields=fields,
            directives=_filter(args, Directive),
        )

    def bases(self, args: list[Any]) -> _Bases:
        return _Bases(names=[str(a) for a in args if a is not None])

    def named_field(self, args: list[Any]) -> _Field:
        return _Field(
            name=_find_one(args, _Name),
            type=_find_one(args, TypeExpr),
            directives=_filter(args, Directive),
        )

    def positional_field(self, args: list[Any]) -> _Field:
        return _Field(
            name=None,
            type=_find_one(args, TypeExpr),
            directives=_filter(args, Directive),
        )

    def directive(self, args: list[Any]) -> Directive:
        return Directive(namespace=str(args[0]), arguments=_filter(args[1:], DirectiveArg))

    def keyword_arg(self, args: list[Any]) -> DirectiveArg:
        return DirectiveArg(key=str(args[0]), value=args[1])

    def flag_arg(self, args: list[Any]) -> DirectiveArg:
        return DirectiveArg(key=str(args[0]))

    def number_value(self, args: list[Any]) -> DirectiveValue:
        return DirectiveValue(kind=ValueKind.NUMBER, text=str(args[0]))

    def string_value(self, args: list[Any]) -> DirectiveValue:
        return DirectiveValue(kind=ValueKind.STRING, text=str(args[0]))

    def name_value(self, args: list[Any]) -> DirectiveValue:
        return DirectiveValue(kind=ValueKind.NAME, text=str(args[0]))

    def expr_value(self, args: list[Any]) -> DirectiveValue:
        return DirectiveValue(kind=ValueKind.EXPR, text=str(args[0])[1:-1].strip())

    def type(self, args: list[Any]) -> TypeExpr:
        atoms = _filter(args, _TypeAtom)
        text = " | ".join(a.text for a in atoms)
        if len(atoms) == 1:
            atom = atoms[0]
            return TypeExpr(text=text, base=atom.base, nullable=atom.nullable)
        return TypeExpr(
            text=text,
            base="Union",
            nullable=any(a.nullable for a in atoms),
        )

    def type_atom(self, args: list[Any]) -> _TypeAtom:
        base = str(args[0])
        params = _filter(args[1:], TypeExpr)
        if not params:
            return _TypeAtom(text=base, base=base, nullable=base == "None")
        inner = ", ".join(p.text for p in params)
        nullable = base in NULLABLE_WRAPPERS or (
            base in UNION_WRAPPERS and any(p.nullable for p in params)
        )
        return _TypeAtom(text=f"{base}[{inner}]", base=base, nullable=nullable)

    def dotted_name(self, args: list[Any]) -> str:
        return ".".join(str(a) for a in args)

    def name(self, args: list[Any]) -> _Name:
        return _Name(value=str(args[0]))


def validate(records: list[RecordDecl]) -> None:
    """Validate parsed record definitions."""
    seen: set[str] = set()
    for record in records:
        if record.name in seen:
            raise ValidationError("record declared more than once", record=record.name)
        seen.add(record.name)

        names: set[str] = set()
        for f in record.fields:
            if f.name is None:
                continue
            if f.name in names:
                raise ValidationError(
                    "field declared more than once", record=record.name, field=f.name
                )
            names.add(f.name)


def parse(text: str) -> list[RecordDecl]:
    """Parse a record definition file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/recorddef.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    records = TreeTransformer().transform(tree)

    validate(records)
    logger.debug("parsed %d record(s)", len(records))

    return records
