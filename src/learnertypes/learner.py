"""The learner interface, and a harness which holds learners to their types.

Learners consume and produce polars frames. Each learner class declares the
learner type it belongs to::

    class MajorityClass(AbstractLearner, learner_type=Classifier):
        ...

An instance may narrow that type before initialisation (its *uninitialised*
type), and initialisation fixes the *initialised* type along with the
prediction headers. ``LearnerHarness`` checks that all of these agree.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, NoReturn

import polars as pl

from learnertypes.errors import (
    LearnerInitialisationError,
    LearnerNotInitialisedError,
    LearnerStaticConfigurationError,
)
from learnertypes.headers import Headers, headers_of, must_have_equivalent_structure
from learnertypes.registry import AnyLearnerType
from learnertypes.types import LearnerType, UnionType

logger = logging.getLogger(__name__)


class Learner(ABC):
    """A trainable predictor of output columns from input columns."""

    class_learner_type: ClassVar[LearnerType] = AnyLearnerType

    def __init_subclass__(cls, learner_type: LearnerType | None = None, **kwargs: Any) -> None:
        """Set the class-level learner type; subclasses inherit it if not given."""
        super().__init_subclass__(**kwargs)
        if learner_type is not None:
            cls.class_learner_type = learner_type

    @property
    @abstractmethod
    def uninitialised_type(self) -> LearnerType: ...

    @property
    @abstractmethod
    def is_initialised(self) -> bool: ...

    @property
    @abstractmethod
    def train_headers(self) -> Headers: ...

    @property
    @abstractmethod
    def predict_input_headers(self) -> Headers: ...

    @property
    @abstractmethod
    def predict_output_headers(self) -> Headers: ...

    @property
    @abstractmethod
    def initialised_type(self) -> LearnerType: ...

    def ensure_initialised(self) -> None:
        """Raise LearnerNotInitialisedError if the learner isn't initialised."""
        if not self.is_initialised:
            raise LearnerNotInitialisedError(self)

    @abstractmethod
    def initialise(self, headers: Headers | pl.DataFrame) -> None:
        """Prepare the learner for data with the given headers."""

    @abstractmethod
    def train(self, frame: pl.DataFrame) -> None:
        """Train on a frame structured like the initialisation headers."""

    @abstractmethod
    def predict(self, frame: pl.DataFrame) -> pl.DataFrame:
        """Predict the output columns for each row of ``frame``."""


def learner_type_of(cls: type[Learner]) -> LearnerType:
    """Get the learner type declared for a learner class."""
    return cls.class_learner_type


def predict_input_header_columns(learner: Learner) -> tuple[int, ...]:
    """Get the indices of the training columns selected as prediction inputs."""
    return learner.predict_input_headers.subset_indices(learner.train_headers)


@dataclass(frozen=True)
class Initialisation:
    """What a learner decided when it was initialised."""

    train_headers: Headers
    predict_input_headers: Headers
    predict_output_headers: Headers
    initialised_type: LearnerType


class AbstractLearner(Learner):
    """Base class for learners which implements the bookkeeping.

    Subclasses implement ``perform_initialisation``, ``perform_train`` and
    ``perform_predict``.
    """

    def __init__(self, uninitialised_type: LearnerType | None = None) -> None:
        self._uninitialised_type = (
            uninitialised_type
            if uninitialised_type is not None
            else learner_type_of(type(self))
        )
        self._initialisation: Initialisation | None = None

    @property
    def uninitialised_type(self) -> LearnerType:
        return self._uninitialised_type

    @property
    def is_initialised(self) -> bool:
        return self._initialisation is not None

    @property
    def initialisation(self) -> Initialisation:
        """The result of initialisation.

        Raises:
            LearnerNotInitialisedError: If the learner isn't initialised.

        """
        if self._initialisation is None:
            raise LearnerNotInitialisedError(self)
        return self._initialisation

    @property
    def train_headers(self) -> Headers:
        return self.initialisation.train_headers

    @property
    def predict_input_headers(self) -> Headers:
        return self.initialisation.predict_input_headers

    @property
    def predict_output_headers(self) -> Headers:
        return self.initialisation.predict_output_headers

    @property
    def initialised_type(self) -> LearnerType:
        return self.initialisation.initialised_type

    def initialise(self, headers: Headers | pl.DataFrame) -> None:
        train_headers = headers_of(headers)
        input_headers, output_headers, learner_type = self.perform_initialisation(
            train_headers
        )
        self._initialisation = Initialisation(
            train_headers, input_headers, output_headers, learner_type
        )

    def train(self, frame: pl.DataFrame) -> None:
        self.ensure_initialised()
        self.perform_train(frame)

    def predict(self, frame: pl.DataFrame) -> pl.DataFrame:
        self.ensure_initialised()
        return self.perform_predict(frame)

    @abstractmethod
    def perform_initialisation(
        self, headers: Headers
    ) -> tuple[Headers, Headers, LearnerType]:
        """Initialise for training data with the given headers.

        Returns:
            The prediction input headers, the prediction output headers and
            the type of the initialised learner.

        """

    @abstractmethod
    def perform_train(self, frame: pl.DataFrame) -> None:
        """Train on a frame matching the initialisation headers."""

    @abstractmethod
    def perform_predict(self, frame: pl.DataFrame) -> pl.DataFrame:
        """Predict from a frame matching the prediction input headers."""


class LearnerHarness(Learner):
    """Wraps a learner and checks it receives and produces sane data.

    Raises:
        LearnerStaticConfigurationError: If the learner's uninitialised type
            is not a subtype of its class type.

    """

    def __init__(self, base: Learner) -> None:
        self.base = base

        class_type = learner_type_of(type(base))
        if base.uninitialised_type.is_not_subtype_of(class_type):
            self._fail(
                LearnerStaticConfigurationError,
                f"Uninitialised type ({base.uninitialised_type}) is not sub-type "
                f"of class type ({class_type})",
            )

        if base.is_initialised:
            self._check_initialisation(None)

    @property
    def uninitialised_type(self) -> LearnerType:
        return self.base.uninitialised_type

    @property
    def is_initialised(self) -> bool:
        return self.base.is_initialised

    @property
    def train_headers(self) -> Headers:
        return self.base.train_headers

    @property
    def predict_input_headers(self) -> Headers:
        return self.base.predict_input_headers

    @property
    def predict_output_headers(self) -> Headers:
        return self.base.predict_output_headers

    @property
    def initialised_type(self) -> LearnerType:
        return self.base.initialised_type

    def initialise(self, headers: Headers | pl.DataFrame) -> None:
        train_headers = headers_of(headers)
        self.base.initialise(train_headers)
        self._check_initialisation(train_headers)

    def train(self, frame: pl.DataFrame) -> None:
        self.base.ensure_initialised()
        must_have_equivalent_structure(frame, self.train_headers)
        self.base.train(frame)

    def predict(self, frame: pl.DataFrame) -> pl.DataFrame:
        """Predict from a frame shaped like either the training or prediction inputs.

        Training-shaped frames are reduced to the prediction input columns.

        Raises:
            HeaderMismatchError: If the frame or the predictions don't have
                the expected structure.

        """
        self.base.ensure_initialised()
        frame_headers = headers_of(frame)
        if frame_headers.has_equivalent_structure_to(self.train_headers):
            frame = frame.select(list(self.predict_input_headers.names))
        else:
            must_have_equivalent_structure(frame_headers, self.predict_input_headers)

        # Learners get their own handle so they can't alter the caller's frame
        predictions = self.base.predict(frame.clone())
        must_have_equivalent_structure(predictions, self.predict_output_headers)
        return predictions

    def _check_initialisation(self, train_headers: Headers | None) -> None:
        initialised_type = self.initialised_type
        uninitialised_type = self.uninitialised_type

        # The type must be fully specified
        if isinstance(initialised_type, UnionType):
            self._fail(
                LearnerInitialisationError,
                f"Initialised type should not be a union-type, got {initialised_type}",
            )

        if initialised_type.is_not_subtype_of(uninitialised_type):
            self._fail(
                LearnerInitialisationError,
                f"Initialisation resulted in a learner of type {initialised_type}, "
                f"which is not a sub-type of {uninitialised_type}",
            )

        input_names = set(self.predict_input_headers.names)
        output_names = set(self.predict_output_headers.names)

        if train_headers is not None:
            unknown = [
                column.name
                for column in self.predict_input_headers
                if column not in train_headers
            ]
            if unknown:
                self._fail(
                    LearnerInitialisationError,
                    "Initialisation returned prediction input headers that are "
                    f"not in the training headers: {unknown}",
                )

        if input_names & output_names:
            self._fail(
                LearnerInitialisationError,
                "Initialisation returned prediction output headers that are "
                f"in the input headers: {sorted(input_names & output_names)}",
            )

        error = initialised_type.check_headers(
            self.predict_input_headers, self.predict_output_headers
        )
        if error is not None:
            self._fail(
                LearnerInitialisationError,
                f"Prediction headers don't match type {initialised_type}: {error}",
            )

    def _fail(
        self,
        error_type: type[LearnerInitialisationError | LearnerStaticConfigurationError],
        message: str,
    ) -> NoReturn:
        logger.warning("Rejected learner %s: %s", type(self.base).__qualname__, message)
        raise error_type(self.base, message)
