"""Exception types for the learner type lattice and the learner framework.

Configuration and usage errors are raised as exceptions. A header pair
that doesn't satisfy a type is *not* an error: ``check_headers`` returns
the failure reason as a string instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from learnertypes.types import LearnerType


class LearnerTypeError(Exception):
    """Base class for errors raised by the type lattice."""


class TypeNameConflictError(LearnerTypeError, ValueError):
    """A type name is already registered or contains a reserved character."""


class CompositionError(LearnerTypeError, ValueError):
    """A union/intersection/common-base request violates its preconditions."""


class UnknownLearnerTypeError(LearnerTypeError, KeyError):
    """No type is registered under the requested name."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class RecursiveCheckError(LearnerTypeError, RecursionError):
    """A type's header check re-entered itself during a single check.

    Attributes:
        chain: The types being evaluated, outermost first, ending with
            the type that was requested again.

    """

    def __init__(self, chain: Sequence[LearnerType]) -> None:
        self.chain = tuple(chain)
        path = " -> ".join(t.name for t in self.chain)
        super().__init__(f"Header check for '{self.chain[-1]}' depends on itself: {path}")


class HeaderMismatchError(LearnerTypeError, ValueError):
    """Two sets of column headers do not have the same structure."""


class LearnerError(Exception):
    """Base class for errors in the abstract use of learners.

    Attributes:
        learner: The learner the error concerns.

    """

    def __init__(self, learner: Any, message: str) -> None:
        self.learner = learner
        cls = type(learner)
        super().__init__(f"Learner Error ({cls.__module__}.{cls.__qualname__}): {message}")


class LearnerNotInitialisedError(LearnerError):
    """A learner was used before being initialised."""

    def __init__(self, learner: Any) -> None:
        super().__init__(learner, "Learner not initialised")


class LearnerInitialisationError(LearnerError):
    """A learner's initialisation produced an inconsistent result."""


class LearnerStaticConfigurationError(LearnerError):
    """A learner's declared types or configuration are inconsistent."""
