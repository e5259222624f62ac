"""Standard learner types, defined on the default registry."""

from __future__ import annotations

from learnertypes.headers import Headers
from learnertypes.registry import AnyLearnerType


def _classifying(_: Headers, output_headers: Headers) -> str | None:
    for index, header in enumerate(output_headers):
        if not header.is_nominal:
            return (
                f"Header {header.name} at position {index} in prediction outputs "
                f"is not a nominal column ({header.dtype})"
            )
    return None


def _regressing(_: Headers, output_headers: Headers) -> str | None:
    for index, header in enumerate(output_headers):
        if not header.is_numeric:
            return (
                f"Header {header.name} at position {index} in prediction outputs "
                f"is not a numeric column ({header.dtype})"
            )
    return None


def _single_target(_: Headers, output_headers: Headers) -> str | None:
    if len(output_headers) != 1:
        return "Prediction output headers must have exactly one column"
    return None


def _multi_target(_: Headers, output_headers: Headers) -> str | None:
    if len(output_headers) < 2:  # noqa: PLR2004
        return "Prediction output headers must have at least two columns"
    return None


def _no_missing_targets(_: Headers, output_headers: Headers) -> str | None:
    if any(header.nullable for header in output_headers):
        return "Prediction outputs can't have missing values"
    return None


def _no_missing_features(input_headers: Headers, _: Headers) -> str | None:
    if any(header.nullable for header in input_headers):
        return "Prediction inputs can't have missing values"
    return None


Classifier = AnyLearnerType.extend("Classifying", _classifying)
Regressor = AnyLearnerType.extend("Regressing", _regressing)
SingleTarget = AnyLearnerType.extend("SingleTarget", _single_target)
MultiTarget = AnyLearnerType.extend("MultiTarget", _multi_target)
NoMissingTargets = AnyLearnerType.extend("NoMissingTargets", _no_missing_targets)
NoMissingFeatures = AnyLearnerType.extend("NoMissingFeatures", _no_missing_features)
