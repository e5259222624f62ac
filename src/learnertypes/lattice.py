"""Utilities for walking the learner type lattice."""

from __future__ import annotations

from functools import reduce
from typing import TYPE_CHECKING

from learnertypes.errors import CompositionError
from learnertypes.types import ExtendedType

if TYPE_CHECKING:
    from learnertypes.types import AnyType, LearnerType


def is_extension_of(learner_type: ExtendedType, base: LearnerType) -> bool:
    """Whether ``learner_type`` extends ``base``, directly or indirectly."""
    return learner_type.is_extension_of(base)


def common_base_of_pair(type1: ExtendedType, type2: ExtendedType) -> AnyType | ExtendedType:
    """Get the most specific type that two extended types both extend.

    A type counts as extending itself here, so the common base of a type
    and one of its extensions is the type.
    """
    while True:
        if type1 is type2 or type1.is_extension_of(type2):
            return type2
        if type2.is_extension_of(type1):
            return type1
        if not isinstance(type1.base, ExtendedType) or not isinstance(
            type2.base, ExtendedType
        ):
            # One of the chains has run out
            return type1.registry.any
        type1, type2 = type1.base, type2.base


def get_common_base(*types: ExtendedType) -> AnyType | ExtendedType:
    """Get the most specific type that all of ``types`` extend.

    Raises:
        CompositionError: If no types are given.

    """
    if not types:
        msg = "Can't find a common base for zero types"
        raise CompositionError(msg)

    def fold(common: AnyType | ExtendedType, next_type: ExtendedType) -> AnyType | ExtendedType:
        # Nothing is more general than Any
        if not isinstance(common, ExtendedType):
            return common
        return common_base_of_pair(common, next_type)

    return reduce(fold, types[1:], types[0])


def is_potential_subtype_of(learner_type: LearnerType, other: LearnerType) -> bool:
    """Whether ``learner_type`` may be a subtype of ``other`` once initialised.

    A union may be narrowed to any one of its options at initialisation,
    so it qualifies if any option is a subtype of ``other``.
    """
    return learner_type.is_potential_subtype_of(other)
