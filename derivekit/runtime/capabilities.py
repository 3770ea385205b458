"""Structural capabilities generated operations delegate to."""

import reprlib
import sys
from enum import IntEnum
from typing import Any

# Width of the value `__hash__` must return
HASH_BITS = sys.hash_info.width
HASH_MASK = (1 << HASH_BITS) - 1
HASH_MAX = (1 << (HASH_BITS - 1)) - 1

# Width of the value `__structural_hash__` returns
STRUCTURAL_HASH_MASK = (1 << 64) - 1

recursive_repr = reprlib.recursive_repr


class CompareOp(IntEnum):
    """Rich comparison operator passed to `__richcmp__`."""

    LT = 0
    LE = 1
    EQ = 2
    NE = 3
    GT = 4
    GE = 5

    @property
    def dunder(self) -> str:
        return f"__{self.name.lower()}__"

    def matches(self, ordering: int | None) -> bool:
        """Check a three-way comparison result against this operator."""
        if ordering is None:
            return self is CompareOp.NE
        if self is CompareOp.LT:
            return ordering < 0
        if self is CompareOp.LE:
            return ordering <= 0
        if self is CompareOp.EQ:
            return ordering == 0
        if self is CompareOp.NE:
            return ordering != 0
        if self is CompareOp.GT:
            return ordering > 0
        return ordering >= 0


class Eq:
    """Equality over every stored value of a record."""

    __slots__ = ()

    def __structural_eq__(self, other: Any) -> bool:
        return self.__dk_values__() == other.__dk_values__()


class Ord:
    """Lexicographic order over every stored value of a record.

    Returns -1, 0 or 1, or None if two values are not ordered.
    """

    __slots__ = ()

    def __structural_cmp__(self, other: Any) -> int | None:
        for a, b in zip(self.__dk_values__(), other.__dk_values__()):
            if a == b:
                continue
            try:
                if a < b:
                    return -1
                if b < a:
                    return 1
            except TypeError:
                return None
            return None
        return 0


class Hash:
    """Hash over every stored value of a record, as an unsigned 64 bit integer."""

    __slots__ = ()

    def __structural_hash__(self) -> int:
        return hash(self.__dk_values__()) & STRUCTURAL_HASH_MASK
