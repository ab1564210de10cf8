"""Empirical categorical distributions and biased weighted sampling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import numpy as np

from thalsynth.data.records import AnnotatedRecord, as_mapping


@dataclass(frozen=True)
class CategoricalDistribution:
    """Observed values of one categorical field with positive weights."""

    field: str
    values: tuple[str, ...]
    weights: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError(f"Distribution for '{self.field}' has no values")
        if len(self.values) != len(self.weights):
            raise ValueError("values and weights must have the same length")
        if any(w <= 0 for w in self.weights):
            raise ValueError("weights must be positive")

    def as_dict(self) -> dict[str, float]:
        return dict(zip(self.values, self.weights))

    def with_bias(self, value: str, factor: float) -> CategoricalDistribution:
        """Return a copy with *value*'s weight multiplied by *factor*.

        A value missing from the distribution is appended with weight
        *factor*.
        """
        if value in self.values:
            weights = tuple(
                w * factor if v == value else w
                for v, w in zip(self.values, self.weights)
            )
            return CategoricalDistribution(self.field, self.values, weights)
        return CategoricalDistribution(
            self.field, self.values + (value,), self.weights + (factor,)
        )


def build_distribution(
    records: Iterable[Mapping[str, Any] | AnnotatedRecord],
    field: str,
    unknown_value: str = "Unknown",
) -> CategoricalDistribution:
    """Count occurrences of each value of *field*, in first-seen order.

    Missing values count as *unknown_value*.  With no records the result
    holds the single entry ``(unknown_value, 1)``.
    """
    counts: dict[str, float] = {}
    for row in records:
        value = as_mapping(row).get(field)
        key = unknown_value if value is None else str(value)
        counts[key] = counts.get(key, 0) + 1
    if not counts:
        counts[unknown_value] = 1
    return CategoricalDistribution(
        field=field,
        values=tuple(counts.keys()),
        weights=tuple(float(w) for w in counts.values()),
    )


class CategoricalSampler:
    """Draw values from a :class:`CategoricalDistribution`.

    Sampling uses the cumulative weights: a uniform draw in
    ``[0, total)`` selects the first value whose cumulative weight reaches
    the draw, with the last value as the fallback.
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()

    def sample(
        self,
        distribution: CategoricalDistribution,
        bias_value: str | None = None,
        bias_factor: float | None = None,
    ) -> str:
        """Return one value, optionally favouring *bias_value* by *bias_factor*."""
        if bias_value is not None and bias_factor is not None:
            distribution = distribution.with_bias(bias_value, bias_factor)

        cumulative = np.cumsum(distribution.weights)
        draw = float(self.rng.random()) * float(cumulative[-1])
        index = int(np.searchsorted(cumulative, draw, side="left"))
        if index >= len(distribution.values):
            index = len(distribution.values) - 1
        return distribution.values[index]
