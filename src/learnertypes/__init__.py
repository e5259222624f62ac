"""learnertypes - Structural type lattice for classifying ML learners."""

from learnertypes.builders import (
    intersection_of,
    union_of,
)
from learnertypes.cache import CheckHeadersCache
from learnertypes.errors import (
    CompositionError,
    HeaderMismatchError,
    LearnerError,
    LearnerInitialisationError,
    LearnerNotInitialisedError,
    LearnerStaticConfigurationError,
    LearnerTypeError,
    RecursiveCheckError,
    TypeNameConflictError,
    UnknownLearnerTypeError,
)
from learnertypes.headers import (
    ColumnHeader,
    Headers,
)
from learnertypes.lattice import (
    get_common_base,
    is_extension_of,
    is_potential_subtype_of,
)
from learnertypes.learner import (
    AbstractLearner,
    Learner,
    LearnerHarness,
    learner_type_of,
    predict_input_header_columns,
)
from learnertypes.registry import (
    DEFAULT_REGISTRY,
    AnyLearnerType,
    TypeRegistry,
    lookup,
)
from learnertypes.taxonomy import (
    Classifier,
    MultiTarget,
    NoMissingFeatures,
    NoMissingTargets,
    Regressor,
    SingleTarget,
)
from learnertypes.types import (
    AnyType,
    CheckHeadersFunction,
    ExtendedType,
    IntersectionType,
    LearnerType,
    UnionType,
    is_subtype,
)

__all__ = [
    # Registry
    "DEFAULT_REGISTRY",
    # Learners
    "AbstractLearner",
    "AnyLearnerType",
    # Type forms
    "AnyType",
    "CheckHeadersCache",
    "CheckHeadersFunction",
    # Taxonomy
    "Classifier",
    # Headers
    "ColumnHeader",
    # Errors
    "CompositionError",
    "ExtendedType",
    "HeaderMismatchError",
    "Headers",
    "IntersectionType",
    "Learner",
    "LearnerError",
    "LearnerHarness",
    "LearnerInitialisationError",
    "LearnerNotInitialisedError",
    "LearnerStaticConfigurationError",
    "LearnerType",
    "LearnerTypeError",
    "MultiTarget",
    "NoMissingFeatures",
    "NoMissingTargets",
    "RecursiveCheckError",
    "Regressor",
    "SingleTarget",
    "TypeNameConflictError",
    "TypeRegistry",
    "UnionType",
    "UnknownLearnerTypeError",
    # Lattice operations
    "get_common_base",
    "intersection_of",
    "is_extension_of",
    "is_potential_subtype_of",
    "is_subtype",
    "learner_type_of",
    "lookup",
    "predict_input_header_columns",
    "union_of",
]
