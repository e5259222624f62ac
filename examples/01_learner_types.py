"""
Learner Types Example
=====================

Classifying learners by the shape of the data they predict, demonstrating:
- Defining new learner types by extension
- Composing types with union_of / intersection_of
- Checking headers taken from a polars frame
- Running a learner through the LearnerHarness
"""

import polars as pl

from learnertypes import (
    AbstractLearner,
    Classifier,
    Headers,
    LearnerHarness,
    NoMissingFeatures,
    Regressor,
    SingleTarget,
    intersection_of,
    union_of,
)


# ============================================================================
# Define Types
# ============================================================================

def _binary_output(_: Headers, output_headers: Headers) -> str | None:
    for header in output_headers:
        if header.dtype != pl.Boolean:
            return f"Column {header.name} is not a binary column ({header.dtype})"
    return None


BinaryClassifier = Classifier.extend("BinaryClassifying", _binary_output)

CleanSingleTargetClassifier = intersection_of(Classifier, SingleTarget, NoMissingFeatures)


# ============================================================================
# Implement a Learner
# ============================================================================

class ZeroR(AbstractLearner, learner_type=union_of(Classifier, Regressor)):
    """Predicts the most common label, or the mean value, of the target."""

    def __init__(self, target: str) -> None:
        super().__init__()
        self.target = target
        self.prediction = None

    def perform_initialisation(self, headers):
        inputs = headers.select(n for n in headers.names if n != self.target)
        outputs = headers.select([self.target])
        # Decide which branch of the union this learner becomes
        learner_type = Classifier if outputs[0].is_nominal else Regressor
        return inputs, outputs, intersection_of(learner_type, SingleTarget)

    def perform_train(self, frame):
        target = frame.get_column(self.target)
        self.prediction = target.mean() if target.dtype.is_numeric() else target.mode().sort()[0]

    def perform_predict(self, frame):
        dtype = self.predict_output_headers[0].dtype
        return pl.Series(self.target, [self.prediction] * frame.height, dtype=dtype).to_frame()


# ============================================================================
# Usage
# ============================================================================

def main():
    frame = pl.DataFrame({
        "petal_length": [1.4, 4.7, 5.1, 1.3],
        "species": ["setosa", "versicolor", "virginica", "setosa"],
        "is_setosa": [True, False, False, True],
    })
    headers = Headers.from_frame(frame)
    inputs = headers.select(["petal_length"])

    print("Type checks")
    print("-" * 40)
    for learner_type, target in [
        (Classifier, "species"),
        (BinaryClassifier, "species"),
        (BinaryClassifier, "is_setosa"),
        (Regressor, "species"),
        (CleanSingleTargetClassifier, "species"),
    ]:
        error = learner_type.check_headers(inputs, headers.select([target]))
        print(f"{learner_type} -> {target}: {error or 'ok'}")
    print()

    print("Subtyping")
    print("-" * 40)
    print(f"{BinaryClassifier} <: {Classifier}: {BinaryClassifier.is_subtype_of(Classifier)}")
    print(f"{CleanSingleTargetClassifier} <: {Classifier}: "
          f"{CleanSingleTargetClassifier.is_subtype_of(Classifier)}")
    print()

    print("Harnessed learner")
    print("-" * 40)
    learner = LearnerHarness(ZeroR(target="species"))
    learner.initialise(frame.drop("is_setosa"))
    learner.train(frame.drop("is_setosa"))
    print(f"Initialised type: {learner.initialised_type}")
    print(learner.predict(frame.select(["petal_length"])))


if __name__ == "__main__":
    main()
