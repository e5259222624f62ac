"""Per-query memoization of header checks.

A single ``check_headers`` call evaluates a graph of types in which shared
bases (e.g. two union branches extending the same type) would otherwise be
checked repeatedly. The cache evaluates each type instance at most once per
header pair.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from learnertypes.errors import RecursiveCheckError

if TYPE_CHECKING:
    from learnertypes.types import CheckHeadersFunction, LearnerType

_active_cache: ContextVar[CheckHeadersCache | None] = ContextVar(
    "learnertypes_active_cache", default=None
)


class CheckHeadersCache:
    """Cached results of checking types against one pair of headers.

    While a check is running, the cache is the *active* cache of the
    current context. A constraint that calls ``other.check_headers`` on the
    same header objects joins it rather than starting afresh, so nested
    checks share results and a type that depends on its own check raises
    ``RecursiveCheckError`` instead of recursing forever.
    """

    def __init__(self, input_headers: Any, output_headers: Any) -> None:
        self.input_headers = input_headers
        self.output_headers = output_headers
        self._results: dict[LearnerType, str | None] = {}
        self._in_progress: list[LearnerType] = []

    @classmethod
    def for_headers(cls, input_headers: Any, output_headers: Any) -> CheckHeadersCache:
        """Get the active cache for these headers, or a fresh one."""
        active = _active_cache.get()
        if (
            active is not None
            and active.input_headers is input_headers
            and active.output_headers is output_headers
        ):
            return active
        return cls(input_headers, output_headers)

    def check(self, learner_type: LearnerType) -> str | None:
        """Get the result of checking ``learner_type``, evaluating it on first access."""
        if learner_type in self._results:
            return self._results[learner_type]

        if any(pending is learner_type for pending in self._in_progress):
            raise RecursiveCheckError([*self._in_progress, learner_type])

        self._in_progress.append(learner_type)
        token = _active_cache.set(self)
        try:
            result = learner_type.check_headers_cached(self)
        finally:
            _active_cache.reset(token)
            self._in_progress.pop()

        self._results[learner_type] = result
        return result

    __getitem__ = check

    def call(self, constraint: CheckHeadersFunction) -> str | None:
        """Call a constraint against the headers; results are not cached."""
        return constraint(self.input_headers, self.output_headers)

    def __contains__(self, learner_type: LearnerType) -> bool:
        return learner_type in self._results

    def __len__(self) -> int:
        return len(self._results)
