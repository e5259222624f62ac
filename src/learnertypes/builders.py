"""Builders which normalize lists of types into canonical unions/intersections.

Both builders apply the same stages:

1. Collect the types into an identity set.
2. Flatten nested composites of the same kind.
3. Reject illegal nesting (intersections can't contain unions).
4. Drop members made redundant by another member.
5. Collapse a single survivor to itself, otherwise look up the canonical
   composite for the final member set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from learnertypes.errors import CompositionError
from learnertypes.types import IntersectionType, UnionType, is_subtype

if TYPE_CHECKING:
    from collections.abc import Iterable

    from learnertypes.registry import TypeRegistry
    from learnertypes.types import LearnerType


def union_of(*types: LearnerType, registry: TypeRegistry | None = None) -> LearnerType:
    """Get the type satisfied by any one of the given types.

    Args:
        *types: The types to union.
        registry: The registry to create the union in. Defaults to the
            registry the types belong to.

    Returns:
        The canonical union, or the single remaining type if all others are
        subsumed by it.

    Raises:
        CompositionError: If no types are given, or they belong to
            different registries.

    """
    if not types:
        msg = "Can't create a union of zero types"
        raise CompositionError(msg)
    owner = owning_registry(types, registry)

    components = set(types)
    delayer_unions(components)

    # More general members already accept whatever a more specific one does
    remove_redundant(components, remove_more_specific=True)

    if len(components) == 1:
        return components.pop()
    return owner.canonical_union(frozenset(components))


def intersection_of(
    *types: LearnerType, registry: TypeRegistry | None = None
) -> LearnerType:
    """Get the type satisfied only when all of the given types are.

    Args:
        *types: The types to intersect. May not include unions.
        registry: The registry to create the intersection in. Defaults to
            the registry the types belong to.

    Returns:
        The canonical intersection, or the single remaining type if it
        implies all the others.

    Raises:
        CompositionError: If no types are given, a union is given, or the
            types belong to different registries.

    """
    if not types:
        msg = "Can't create an intersection of zero types"
        raise CompositionError(msg)
    owner = owning_registry(types, registry)

    components = set(types)
    delayer_intersections(components)

    # No De Morgan expansion; the subtype relation relies on this shape
    if unions := [t for t in components if isinstance(t, UnionType)]:
        msg = f"Can't include union types in an intersection type: {', '.join(map(str, unions))}"
        raise CompositionError(msg)

    # A more specific member already implies the less specific ones
    remove_redundant(components, remove_more_specific=False)

    if len(components) == 1:
        return components.pop()
    return owner.canonical_intersection(frozenset(components))


def delayer_unions(types: set[LearnerType]) -> None:
    """Replace any unions in the set with their component types."""
    _delayer(types, UnionType)


def delayer_intersections(types: set[LearnerType]) -> None:
    """Replace any intersections in the set with their component types."""
    _delayer(types, IntersectionType)


def _delayer(types: set[LearnerType], kind: type[UnionType | IntersectionType]) -> None:
    # Canonical composites are already flat, so one pass suffices
    nested = [t for t in types if isinstance(t, kind)]
    for composite in nested:
        types.discard(composite)
        types.update(composite.components)


def remove_redundant(types: set[LearnerType], *, remove_more_specific: bool) -> None:
    """Remove types made redundant by a more/less specific type in the set.

    Args:
        types: The set of types, modified in place.
        remove_more_specific: If True, remove any type which is a subtype of
            another member (for unions). If False, remove any type which is a
            supertype of another member (for intersections).

    """
    for candidate in list(types):
        for other in types:
            if other is candidate:
                continue
            redundant = (
                is_subtype(candidate, other)
                if remove_more_specific
                else is_subtype(other, candidate)
            )
            if redundant:
                types.discard(candidate)
                break


def owning_registry(
    types: Iterable[LearnerType], registry: TypeRegistry | None = None
) -> TypeRegistry:
    """Get the single registry that all of the given types belong to.

    Raises:
        CompositionError: If the types come from more than one registry.

    """
    owners = {t.registry for t in types}
    if registry is not None:
        owners.add(registry)
    if len(owners) != 1:
        msg = "Can't combine learner types from different registries"
        raise CompositionError(msg)
    return owners.pop()
