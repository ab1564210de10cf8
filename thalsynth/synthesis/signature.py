"""Rule-based thalassemia trait signature classifier."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from thalsynth.config import PanelConfig, SignatureCondition
from thalsynth.data.records import AnnotatedRecord, as_mapping, numeric_value


class SignatureClassifier:
    """Score a record against a set of named threshold conditions.

    Every condition that holds adds its weight to an integer score that
    starts at zero; absent or malformed values never contribute.  A record is
    signature-positive when the final score reaches ``positive_score``.  The
    default panel requires two of microcytosis, hypochromia, mild anaemia and
    erythrocytosis, with low ferritin counting against (iron deficiency is
    the competing explanation for small pale cells).
    """

    def __init__(
        self,
        conditions: Iterable[SignatureCondition] | None = None,
        positive_score: int | None = None,
    ) -> None:
        defaults = PanelConfig.default()
        self.conditions = list(conditions) if conditions is not None else defaults.conditions
        self.positive_score = (
            positive_score if positive_score is not None else defaults.positive_score
        )

    @classmethod
    def from_config(cls, config: PanelConfig) -> SignatureClassifier:
        return cls(conditions=config.conditions, positive_score=config.positive_score)

    def matched_conditions(self, record: Mapping[str, Any] | AnnotatedRecord) -> list[str]:
        """Return the names of the conditions that hold for *record*."""
        values = as_mapping(record)
        matched = []
        for condition in self.conditions:
            value = numeric_value(values.get(condition.field))
            if value is not None and condition.holds(value):
                matched.append(condition.name)
        return matched

    def score(self, record: Mapping[str, Any] | AnnotatedRecord) -> int:
        """Return the net signature score of *record*."""
        matched = set(self.matched_conditions(record))
        return sum(c.weight for c in self.conditions if c.name in matched)

    def classify(self, record: Mapping[str, Any] | AnnotatedRecord) -> bool:
        """Return True if *record* matches the signature."""
        return self.score(record) >= self.positive_score

    def annotate(self, records: Iterable[Mapping[str, Any]]) -> list[AnnotatedRecord]:
        """Classify each record once and wrap it with its flag."""
        return [
            AnnotatedRecord(values=record, signature_positive=self.classify(record))
            for record in records
        ]
