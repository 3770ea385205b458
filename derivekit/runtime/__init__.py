"""Runtime support imported by generated record modules."""

from .capabilities import (
    HASH_BITS,
    HASH_MASK,
    HASH_MAX,
    CompareOp,
    Eq,
    Hash,
    Ord,
    recursive_repr,
)
from .fields import DataclassFields, FieldSpec
from .record import MISSING, Accessor, CapabilityError, Record, bind

__all__ = [
    "HASH_BITS",
    "HASH_MASK",
    "HASH_MAX",
    "MISSING",
    "Accessor",
    "CapabilityError",
    "CompareOp",
    "DataclassFields",
    "Eq",
    "FieldSpec",
    "Hash",
    "Ord",
    "Record",
    "bind",
    "recursive_repr",
]
