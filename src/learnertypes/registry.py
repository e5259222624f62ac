"""Registry of learner types by name, and of canonical composite types."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from learnertypes.builders import intersection_of, union_of
from learnertypes.errors import TypeNameConflictError, UnknownLearnerTypeError
from learnertypes.types import AnyType, ExtendedType, IntersectionType, UnionType

if TYPE_CHECKING:
    from collections.abc import Iterator

    from learnertypes.types import CheckHeadersFunction, LearnerType

T = TypeVar("T", bound="LearnerType")

logger = logging.getLogger(__name__)

ANY_NAME = "Any"

# Used when naming composite types, so forbidden in extension names
RESERVED_NAME_CHARACTERS = ("[", "]", "|")


def check_extended_type_name(name: str) -> None:
    """Ensure a new extended type's name contains no reserved characters.

    Raises:
        TypeNameConflictError: If the name contains a reserved character.

    """
    for reserved in RESERVED_NAME_CHARACTERS:
        if reserved in name:
            msg = f"Illegal sub-string in type-name '{name}': {reserved}"
            raise TypeNameConflictError(msg)


def composite_name(kind: str, components: frozenset[LearnerType]) -> str:
    """Derive the display name of a composite type, e.g. ``Union[A|B]``."""
    return f"{kind}[{'|'.join(sorted(t.name for t in components))}]"


class TypeRegistry:
    """Owns a lattice of learner types.

    Each registry has its own ``Any`` root. It guarantees that every type
    in it has a unique name, and that each distinct set of components maps
    to exactly one union and one intersection instance. Registration is
    append-only.

    Construction of types is not thread-safe; declare types up front.
    """

    def __init__(self) -> None:
        self._types: dict[str, LearnerType] = {}
        self._unions: dict[frozenset[LearnerType], UnionType] = {}
        self._intersections: dict[frozenset[LearnerType], IntersectionType] = {}
        self.any = self._register(AnyType(ANY_NAME, self))

    def _register(self, learner_type: T) -> T:
        if (existing := self._types.get(learner_type.name)) is not None:
            msg = f"A learner-type named '{learner_type.name}' already exists: {existing!r}"
            raise TypeNameConflictError(msg)

        self._types[learner_type.name] = learner_type
        logger.debug("Registered learner type %r", learner_type)
        return learner_type

    def create_extended(
        self,
        name: str,
        base: AnyType | ExtendedType,
        constraint: CheckHeadersFunction,
    ) -> ExtendedType:
        """Create and register a new extension of ``base``.

        Raises:
            TypeNameConflictError: If the name is taken or contains a
                reserved character.

        """
        check_extended_type_name(name)
        return self._register(ExtendedType(name, self, base, constraint))

    def canonical_union(self, components: frozenset[LearnerType]) -> UnionType:
        """Get the union of exactly these components, creating it if needed."""
        if (existing := self._unions.get(components)) is not None:
            return existing
        union = self._register(UnionType(composite_name("Union", components), self, components))
        self._unions[components] = union
        return union

    def canonical_intersection(
        self, components: frozenset[LearnerType]
    ) -> IntersectionType:
        """Get the intersection of exactly these components, creating it if needed."""
        if (existing := self._intersections.get(components)) is not None:
            return existing
        intersection = self._register(
            IntersectionType(composite_name("Intersection", components), self, components)
        )
        self._intersections[components] = intersection
        return intersection

    def union_of(self, *types: LearnerType) -> LearnerType:
        """Get the union of the given types (see ``builders.union_of``)."""
        return union_of(*types, registry=self)

    def intersection_of(self, *types: LearnerType) -> LearnerType:
        """Get the intersection of the given types (see ``builders.intersection_of``)."""
        return intersection_of(*types, registry=self)

    def lookup(self, name: str) -> LearnerType:
        """Get a previously registered type by name.

        Raises:
            UnknownLearnerTypeError: If no type has that name.

        """
        try:
            return self._types[name]
        except KeyError:
            msg = f"No type named '{name}'"
            raise UnknownLearnerTypeError(msg) from None

    __getitem__ = lookup

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[LearnerType]:
        return iter(list(self._types.values()))

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"<TypeRegistry with {len(self)} types>"


DEFAULT_REGISTRY = TypeRegistry()
"""The registry used by the built-in taxonomy and module-level lookups."""

AnyLearnerType = DEFAULT_REGISTRY.any


def lookup(name: str) -> LearnerType:
    """Get a type from the default registry by name."""
    return DEFAULT_REGISTRY.lookup(name)
