"""Base class of generated records and the binding step run after class creation."""

import logging
import operator
from dataclasses import dataclass
from typing import Any, TypeVar

from .capabilities import CompareOp

logger = logging.getLogger(__name__)


class CapabilityError(TypeError):
    """A generated operation delegates to a capability the record lacks."""


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


# Placeholder for constructor arguments whose default is evaluated per call
MISSING: Any = _Missing()


class Record:
    """Base class of generated records.

    Field values live in slots named by `__dk_storage__`.
    """

    __slots__ = ()

    __dk_storage__: tuple[str, ...] = ()
    __dk_requires__: tuple[str, ...] = ()

    def __dk_values__(self) -> tuple[Any, ...]:
        """Every stored value, in declaration order."""
        return tuple(getattr(self, slot) for slot in type(self).__dk_storage__)

    def __dk_copy__(self) -> "Record":
        """A shallow copy sharing the stored values of this record."""
        cls = type(self)
        new = cls.__new__(cls)
        for slot in cls.__dk_storage__:
            try:
                setattr(new, slot, getattr(self, slot))
            except AttributeError:
                continue
        return new


@dataclass(frozen=True)
class Accessor:
    """An attribute exposing one stored value."""

    name: str
    storage: str
    readable: bool = True
    writable: bool = False

    def build(self) -> property:
        getter = operator.attrgetter(self.storage) if self.readable else None
        setter = None
        if self.writable:
            storage = self.storage

            def setter(obj: Any, value: Any) -> None:
                setattr(obj, storage, value)

        return property(getter, setter, doc=f"Field {self.name}")


def _comparison(op: CompareOp):
    def compare(self: Any, other: Any) -> Any:
        return self.__richcmp__(other, op)

    compare.__name__ = op.dunder
    return compare


TRecord = TypeVar("TRecord", bound=type)


def bind(
    cls: TRecord,
    *,
    name: str,
    module: str | None = None,
    accessors: tuple[Accessor, ...] = (),
) -> TRecord:
    """Finish a generated class.

    Installs one property per accessor, renames the class to its exposed
    name, installs the comparison operators of `__richcmp__` and checks the
    capabilities generated operations delegate to.
    """
    for accessor in accessors:
        setattr(cls, accessor.name, accessor.build())

    cls.__name__ = name
    cls.__qualname__ = name
    if module is not None:
        cls.__module__ = module

    if "__richcmp__" in cls.__dict__:
        for op in CompareOp:
            setattr(cls, op.dunder, _comparison(op))
        if "__hash__" not in cls.__dict__:
            cls.__hash__ = None  # type: ignore[assignment]

    missing = [m for m in cls.__dk_requires__ if not callable(getattr(cls, m, None))]
    if missing:
        raise CapabilityError(
            f"{name} does not provide {', '.join(missing)}; add the capability as a base"
        )

    logger.debug("bound %s.%s", cls.__module__, name)
    return cls
