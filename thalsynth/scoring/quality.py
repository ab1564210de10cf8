"""Distributional fidelity: aligned histograms and histogram intersection."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from thalsynth.config import ScoringPolicy
from thalsynth.data.records import AnnotatedRecord, as_mapping, numeric_value


def round_percent(value: float) -> int:
    """Round half away from zero to an integer percent."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class HistogramBin:
    index: int
    center: float
    percent: float


@dataclass(frozen=True)
class ValueRange:
    minimum: float
    maximum: float


@dataclass
class FeatureComparison:
    """Aligned, smoothed histograms of one feature and their overlap."""

    feature: str
    value_range: ValueRange | None
    original: list[HistogramBin] = field(default_factory=list)
    synthetic: list[HistogramBin] = field(default_factory=list)
    similarity: int | None = None

    @property
    def computable(self) -> bool:
        return self.similarity is not None

    def to_dict(self, decimals: int = 3) -> dict:
        def bins(hist: list[HistogramBin]) -> list[dict]:
            return [
                {"bin": b.index, "x": round(b.center, decimals), "percent": round(b.percent, decimals)}
                for b in hist
            ]

        return {
            "feature": self.feature,
            "range": (
                {"min": self.value_range.minimum, "max": self.value_range.maximum}
                if self.value_range else None
            ),
            "original": bins(self.original),
            "synthetic": bins(self.synthetic),
            "similarity": self.similarity,
        }


def collect_values(
    records: Iterable[Mapping[str, Any] | AnnotatedRecord], feature: str,
) -> list[float]:
    """Finite numeric values of *feature*; absent and non-numeric cells are skipped."""
    values = []
    for row in records:
        value = numeric_value(as_mapping(row).get(feature))
        if value is not None:
            values.append(value)
    return values


def shared_range(
    datasets: Iterable[Sequence[Mapping[str, Any] | AnnotatedRecord]], feature: str,
) -> ValueRange | None:
    """Union ``[min, max]`` of *feature* across all datasets, or None if empty."""
    values: list[float] = []
    for records in datasets:
        values.extend(collect_values(records, feature))
    if not values:
        return None
    return ValueRange(min(values), max(values))


def histogram(
    records: Sequence[Mapping[str, Any] | AnnotatedRecord],
    feature: str,
    bins: int = 50,
    value_range: ValueRange | None = None,
) -> list[HistogramBin]:
    """Percentage histogram of *feature* over *bins* equal-width bins.

    Without *value_range* the observed min/max is used.  Values outside the
    range are clamped into the first or last bin, so the upper edge lands in
    the last bin.  Returns an empty list when no value is present.
    """
    if bins <= 0:
        raise ValueError(f"bins must be positive, got {bins}")
    values = np.asarray(collect_values(records, feature), dtype=float)
    if values.size == 0:
        return []

    lo = value_range.minimum if value_range else float(values.min())
    hi = value_range.maximum if value_range else float(values.max())
    width = ((hi - lo) or 1.0) / bins

    idx = np.clip(np.floor((values - lo) / width), 0, bins - 1).astype(int)
    percents = 100.0 * np.bincount(idx, minlength=bins) / values.size
    centers = lo + (np.arange(bins) + 0.5) * width
    return [
        HistogramBin(index=i, center=float(c), percent=float(p))
        for i, (c, p) in enumerate(zip(centers, percents))
    ]


def _percents(hist: Sequence[HistogramBin]) -> np.ndarray:
    return np.array([b.percent for b in hist], dtype=float)


def _with_percents(hist: Sequence[HistogramBin], percents: np.ndarray) -> list[HistogramBin]:
    return [replace(b, percent=float(p)) for b, p in zip(hist, percents)]


def smooth(hist: Sequence[HistogramBin], window: int = 5) -> list[HistogramBin]:
    """Centered moving average of bin percentages; the window shrinks at the edges."""
    if len(hist) <= 1 or window <= 1:
        return list(hist)
    n = len(hist)
    half = window // 2
    kernel = np.ones(2 * half + 1)
    sums = np.convolve(_percents(hist), kernel, mode="full")[half:half + n]
    sizes = np.convolve(np.ones(n), kernel, mode="full")[half:half + n]
    return _with_percents(hist, sums / sizes)


def normalize(hist: Sequence[HistogramBin]) -> list[HistogramBin]:
    """Rescale bin percentages to sum to 100; an all-zero histogram is returned as is."""
    percents = _percents(hist)
    total = percents.sum()
    if total <= 0:
        return list(hist)
    return _with_percents(hist, 100.0 * percents / total)


def overlap(hist_a: Sequence[HistogramBin], hist_b: Sequence[HistogramBin]) -> int:
    """Histogram intersection of two aligned histograms, as an integer percent."""
    n = min(len(hist_a), len(hist_b))
    total = float(np.minimum(_percents(hist_a[:n]), _percents(hist_b[:n])).sum())
    return min(100, max(0, round_percent(total)))


class QualityScorer:
    """Compare original and synthetic distributions feature by feature."""

    def __init__(self, policy: ScoringPolicy | None = None) -> None:
        self.policy = policy or ScoringPolicy()

    def compare(
        self,
        original: Sequence[Mapping[str, Any] | AnnotatedRecord],
        synthetic: Sequence[Mapping[str, Any] | AnnotatedRecord],
        feature: str,
        bins: int | None = None,
    ) -> FeatureComparison:
        """Histogram both datasets over their union range and score the overlap.

        Each histogram is smoothed, then rescaled to 100% since the moving
        average loses mass at the edge bins.  ``similarity`` is None when
        either side has no value for *feature*.
        """
        bins = bins or self.policy.bins
        window = self.policy.smoothing_window
        value_range = shared_range([original, synthetic], feature)
        if value_range is None:
            return FeatureComparison(feature=feature, value_range=None)

        orig_hist = normalize(smooth(histogram(original, feature, bins, value_range), window))
        synth_hist = normalize(smooth(histogram(synthetic, feature, bins, value_range), window))
        similarity = overlap(orig_hist, synth_hist) if orig_hist and synth_hist else None
        return FeatureComparison(
            feature=feature,
            value_range=value_range,
            original=orig_hist,
            synthetic=synth_hist,
            similarity=similarity,
        )
