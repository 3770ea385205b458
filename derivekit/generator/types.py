"""Declaration types produced by the record definition parser."""

from dataclasses import dataclass, field
from enum import StrEnum

from dataclasses_json import DataClassJsonMixin


class ValueKind(StrEnum):
    """Lexical kind of a directive value."""

    NUMBER = "number"
    STRING = "string"
    NAME = "name"
    EXPR = "expr"


# Bare names that denote Python literals
LITERAL_NAMES = frozenset(["True", "False", "None"])

# Bare names accepted as booleans
BOOLEAN_NAMES = {"true": True, "false": False, "True": True, "False": False}


@dataclass
class DirectiveValue(DataClassJsonMixin):
    """A directive value, kept as source text.

    For STRING values `text` is the quoted literal as written.
    For EXPR values `text` is the expression without backquotes.
    """

    kind: ValueKind
    text: str

    @property
    def is_literal(self) -> bool:
        """True if the value can be placed in a signature verbatim."""
        if self.kind in (ValueKind.NUMBER, ValueKind.STRING):
            return True
        return self.kind == ValueKind.NAME and (
            self.text in LITERAL_NAMES or self.text in BOOLEAN_NAMES
        )

    @property
    def source(self) -> str:
        """Python source of the value."""
        if self.kind == ValueKind.NAME and self.text in BOOLEAN_NAMES:
            return repr(BOOLEAN_NAMES[self.text])
        if self.kind == ValueKind.EXPR:
            return f"({self.text})"
        return self.text


@dataclass
class DirectiveArg(DataClassJsonMixin):
    """One argument of a directive.

    A bare flag (`get`) has value=None, a keyword argument (`name="x"`)
    carries its value.
    """

    key: str
    value: DirectiveValue | None = None


@dataclass
class Directive(DataClassJsonMixin):
    """A directive attached to a record or a field, e.g. `@derive(repr)`."""

    namespace: str
    arguments: list[DirectiveArg] = field(default_factory=list)


@dataclass
class TypeExpr(DataClassJsonMixin):
    """A declared field type.

    `text` is the normalized display string, `base` the outermost
    type name and `nullable` tells whether None is a member of the type.
    """

    text: str
    base: str
    nullable: bool = False


@dataclass
class FieldDecl(DataClassJsonMixin):
    """A field of a record. Positional fields have no name."""

    name: str | None
    type: TypeExpr
    position: int
    directives: list[Directive] = field(default_factory=list)


@dataclass
class RecordDecl(DataClassJsonMixin):
    """A record definition."""

    name: str
    bases: list[str]
    fields: list[FieldDecl]
    directives: list[Directive] = field(default_factory=list)
