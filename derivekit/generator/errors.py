"""Generation-time errors.

Every error names the record (and the field, where there is one) it was
raised for, so a diagnostic can be printed without further context.
"""


class GenerationError(RuntimeError):
    """Base class for errors that abort generation of one record."""

    def __init__(self, message: str, *, record: str | None = None, field: str | None = None):
        self.message = message
        self.record = record
        self.field = field
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.record is not None:
            where.append(f"record {self.record}")
        if self.field is not None:
            where.append(f"field {self.field}")
        if not where:
            return self.message
        return f"{', '.join(where)}: {self.message}"


class DirectiveError(GenerationError):
    """Unknown, malformed or conflicting directive."""

    def __init__(
        self,
        message: str,
        *,
        record: str | None = None,
        field: str | None = None,
        directive: str | None = None,
    ):
        self.directive = directive
        if directive is not None:
            message = f"@{directive}: {message}"
        super().__init__(message, record=record, field=field)


class OrderingError(GenerationError):
    """A required constructor argument follows one with a default."""

    def __init__(self, message: str, *, record: str, field: str, position: int):
        self.position = position
        super().__init__(f"{message} (position {position})", record=record, field=field)


class NameCollisionError(GenerationError):
    """Two fields resolve to the same name in one naming context."""

    def __init__(self, message: str, *, record: str, field: str, other: str):
        self.other = other
        super().__init__(f"{message} (also used by field {other})", record=record, field=field)
