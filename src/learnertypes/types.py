"""The learner type lattice: four closed forms and the subtype relation.

A learner type describes the shape of the headers a learner can predict
from and predict into. Types form a lattice with ``Any`` at the top:

- ``AnyType``: matches every header pair.
- ``ExtendedType``: a base type plus one extra header constraint.
- ``IntersectionType``: all component types must be satisfied.
- ``UnionType``: at least one component type must be satisfied.

Nodes are never constructed directly. Use ``TypeRegistry.any.extend``,
``union_of`` and ``intersection_of``, which keep names unique and
composite types canonical.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any, TypeAlias

from learnertypes.cache import CheckHeadersCache

if TYPE_CHECKING:
    from collections.abc import Iterator

    from learnertypes.registry import TypeRegistry

CheckHeadersFunction: TypeAlias = Callable[[Any, Any], str | None]
"""Signature of a header constraint: (input headers, output headers) -> error."""


@dataclass(frozen=True, eq=False, repr=False)
class LearnerType:
    """Base of the learner type lattice.

    Equality and hashing are by identity: two types are the same type only
    if they are the same object.
    """

    name: str
    registry: TypeRegistry

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Keep the set of type forms closed."""
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            msg = (
                f"Cannot subclass LearnerType with {cls.__qualname__}; "
                "derive new types with extend() instead"
            )
            raise TypeError(msg)

    def check_headers(self, input_headers: Any, output_headers: Any) -> str | None:
        """Check whether this type can handle the given prediction headers.

        Args:
            input_headers: The headers of the data being predicted from.
            output_headers: The headers of the produced predictions.

        Returns:
            None if the headers pass the check, or a message detailing why
            they don't.

        Raises:
            RecursiveCheckError: If a constraint re-enters its own check.

        """
        return CheckHeadersCache.for_headers(input_headers, output_headers).check(self)

    def check_headers_cached(self, cache: CheckHeadersCache) -> str | None:
        """Check the headers held by ``cache``, reusing its cached results.

        Implementations must not ask the cache for ``self``.
        """
        raise NotImplementedError

    def is_subtype_of(self, other: LearnerType) -> bool:
        """Whether this type is at least as specific as ``other``."""
        return is_subtype(self, other)

    def is_not_subtype_of(self, other: LearnerType) -> bool:
        """Whether this type is less specific than ``other``."""
        return not is_subtype(self, other)

    def is_potential_subtype_of(self, other: LearnerType) -> bool:
        """Whether this type may be a subtype of ``other`` once a learner is initialised."""
        return is_subtype(self, other)

    def __contains__(self, headers: tuple[Any, Any]) -> bool:
        input_headers, output_headers = headers
        return self.check_headers(input_headers, output_headers) is None

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


@dataclass(frozen=True, eq=False, repr=False)
class AnyType(LearnerType):
    """Matches any headers; the top of the lattice and the root of all extensions."""

    def check_headers_cached(self, cache: CheckHeadersCache) -> str | None:
        return None

    def extend(self, name: str, constraint: CheckHeadersFunction) -> ExtendedType:
        """Create a type which extends Any with an additional constraint."""
        return self.registry.create_extended(name, self, constraint)


@dataclass(frozen=True, eq=False, repr=False)
class ExtendedType(LearnerType):
    """A base type made more specific by one additional header constraint."""

    base: AnyType | ExtendedType
    constraint: CheckHeadersFunction

    def check_headers_cached(self, cache: CheckHeadersCache) -> str | None:
        # Only check our own constraint if the base conditions hold
        base_error = cache.check(self.base)
        if base_error is not None:
            return base_error
        return cache.call(self.constraint)

    def extend(self, name: str, constraint: CheckHeadersFunction) -> ExtendedType:
        """Create a type which extends this type with an additional constraint."""
        return self.registry.create_extended(name, self, constraint)

    def is_extension_of(self, base: LearnerType) -> bool:
        """Whether ``base`` is found by following this type's base links."""
        return any(ancestor is base for ancestor in self.iter_bases())

    def iter_bases(self) -> Iterator[AnyType | ExtendedType]:
        """Iterate the direct and indirect bases, from the direct base to Any."""
        current: AnyType | ExtendedType = self
        while isinstance(current, ExtendedType):
            current = current.base
            yield current


@dataclass(frozen=True, eq=False, repr=False)
class CompositeType(LearnerType):
    """Shared shape of union and intersection types."""

    components: frozenset[LearnerType]

    @cached_property
    def ordered_components(self) -> tuple[LearnerType, ...]:
        """The components in display-name order, for deterministic evaluation."""
        return tuple(sorted(self.components, key=lambda t: t.name))


@dataclass(frozen=True, eq=False, repr=False)
class IntersectionType(CompositeType):
    """Satisfied only if every component type is satisfied."""

    def check_headers_cached(self, cache: CheckHeadersCache) -> str | None:
        for component in self.ordered_components:
            error = cache.check(component)
            if error is not None:
                return error
        return None


@dataclass(frozen=True, eq=False, repr=False)
class UnionType(CompositeType):
    """Satisfied if any one of its component types is satisfied."""

    def check_headers_cached(self, cache: CheckHeadersCache) -> str | None:
        # Every branch's reason is relevant when none of them match
        errors: dict[str, None] = {}
        for component in self.ordered_components:
            error = cache.check(component)
            if error is None:
                return None
            errors[error] = None
        return "\n".join(errors)

    def is_potential_subtype_of(self, other: LearnerType) -> bool:
        # Initialisation may narrow the union to any one of its options
        return any(is_subtype(option, other) for option in self.components)


def is_subtype(sub: LearnerType, sup: LearnerType) -> bool:
    """Check whether every header pair accepted by ``sub`` is accepted by ``sup``.

    Args:
        sub: The potential subtype.
        sup: The potential supertype.

    Returns:
        True if ``sub`` is at least as specific as ``sup``.

    """
    match (sub, sup):
        # Any is only as specific as itself
        case (AnyType(), AnyType()):
            return True
        case (AnyType(), ExtendedType() | IntersectionType() | UnionType()):
            return False
        # Everything is a subtype of Any
        case (ExtendedType() | IntersectionType() | UnionType(), AnyType()):
            return True
        case (ExtendedType(), ExtendedType()):
            return sub is sup or sub.is_extension_of(sup)
        # An extension never satisfies all of an intersection's constraints
        case (ExtendedType(), IntersectionType()):
            return False
        case (ExtendedType() | IntersectionType(), UnionType(components=options)):
            return any(is_subtype(sub, option) for option in options)
        case (IntersectionType(components=parts), ExtendedType()):
            return any(is_subtype(part, sup) for part in parts)
        case (IntersectionType(), IntersectionType(components=parts)):
            return all(is_subtype(sub, part) for part in parts)
        case (UnionType(), ExtendedType() | IntersectionType()):
            return False
        case (UnionType(components=options), UnionType()):
            return all(is_subtype(option, sup) for option in options)

    msg = f"Cannot compare {sub!r} with {sup!r}"
    raise TypeError(msg)
