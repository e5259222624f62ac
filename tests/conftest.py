"""Shared fixtures for the learner type tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from learnertypes import ExtendedType, TypeRegistry


def accept(_: Any, __: Any) -> str | None:
    """Constraint which accepts any headers."""
    return None


def reject(message: str):
    """Build a constraint which always fails with ``message``."""

    def constraint(_: Any, __: Any) -> str | None:
        return message

    return constraint


@dataclass
class CountingConstraint:
    """Constraint stub which records how often it is called."""

    result: str | None = None
    calls: list[tuple[Any, Any]] = field(default_factory=list)

    def __call__(self, input_headers: Any, output_headers: Any) -> str | None:
        self.calls.append((input_headers, output_headers))
        return self.result


@dataclass
class Lattice:
    """A small hierarchy of extensions in an isolated registry.

    A and B extend Any; A1 and A2 extend A; A11 extends A1; C extends Any.
    """

    registry: TypeRegistry
    A: ExtendedType
    A1: ExtendedType
    A2: ExtendedType
    A11: ExtendedType
    B: ExtendedType
    C: ExtendedType


@pytest.fixture
def registry() -> TypeRegistry:
    """A fresh registry, isolated from the default one."""
    return TypeRegistry()


@pytest.fixture
def lattice(registry: TypeRegistry) -> Lattice:
    a = registry.any.extend("A", accept)
    a1 = a.extend("A1", accept)
    return Lattice(
        registry=registry,
        A=a,
        A1=a1,
        A2=a.extend("A2", accept),
        A11=a1.extend("A11", accept),
        B=registry.any.extend("B", accept),
        C=registry.any.extend("C", accept),
    )
