"""Re-identification and attribute-disclosure risk of a synthetic dataset."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import chain
from typing import Any, Mapping, Sequence

import numpy as np
from sklearn.neighbors import NearestNeighbors

from thalsynth.config import PanelConfig, ScoringPolicy
from thalsynth.data.records import AnnotatedRecord, as_mapping, numeric_value
from thalsynth.scoring.quality import collect_values, round_percent

logger = logging.getLogger(__name__)

Row = Mapping[str, Any] | AnnotatedRecord


@dataclass(frozen=True)
class PrivacyAssessment:
    """Nearest-neighbour re-identification risk.

    ``risk_percent`` is None when the risk could not be computed; callers
    must check :attr:`computable` rather than treat that as zero risk.
    """

    risk_percent: int | None
    threshold: float | None
    flagged_count: int = 0
    features: tuple[str, ...] = ()

    @property
    def computable(self) -> bool:
        return self.risk_percent is not None

    @classmethod
    def not_computable(cls) -> PrivacyAssessment:
        return cls(risk_percent=None, threshold=None)


@dataclass(frozen=True)
class RareCombination:
    key: str
    label: str
    count: int


@dataclass(frozen=True)
class AttributeDisclosure:
    """Share of synthetic rows reproducing a rare original combination."""

    risk_percent: int | None
    leaked_count: int = 0

    @property
    def computable(self) -> bool:
        return self.risk_percent is not None


class PrivacyRiskScorer:
    """Score a synthetic dataset against the original it was derived from.

    Parameters
    ----------
    config:
        Panel configuration; its numeric fields are the quasi-identifiers and
        its categorical fields form the attribute combinations.
    policy:
        Thresholds for the nearest-neighbour test and rare combinations.
    """

    def __init__(
        self,
        config: PanelConfig | None = None,
        policy: ScoringPolicy | None = None,
    ) -> None:
        self.config = config or PanelConfig.default()
        self.policy = policy or ScoringPolicy()

    # ------------------------------------------------------------------
    # Re-identification
    # ------------------------------------------------------------------

    def assess(self, original: Sequence[Row], synthetic: Sequence[Row]) -> PrivacyAssessment:
        """Fraction of synthetic rows unusually close to some original row.

        Rows are z-scored on the quasi-identifiers with the original's mean
        and standard deviation (absent values map to 0).  A synthetic row is
        flagged when its nearest original row is closer than
        ``threshold_factor`` times the median nearest-neighbour distance
        among the original rows themselves.
        """
        if not original or not synthetic:
            logger.debug("Privacy risk not computable: empty dataset")
            return PrivacyAssessment.not_computable()

        features = self._present_features(original, synthetic)
        if not features:
            logger.debug("Privacy risk not computable: no quasi-identifier fields present")
            return PrivacyAssessment.not_computable()

        stats = self._feature_stats(original, features)
        orig_vecs = self._vectorize(original, features, stats)
        synth_vecs = self._vectorize(synthetic, features, stats)

        nn = NearestNeighbors(n_neighbors=1, algorithm="kd_tree").fit(orig_vecs)
        synth_dists, _ = nn.kneighbors(synth_vecs)
        nearest = synth_dists[:, 0]

        baseline = self._baseline(nn, len(original))
        threshold = max(self.policy.min_threshold, baseline * self.policy.threshold_factor)
        flagged = int(np.count_nonzero(nearest < threshold))
        return PrivacyAssessment(
            risk_percent=round_percent(100.0 * flagged / len(synthetic)),
            threshold=float(threshold),
            flagged_count=flagged,
            features=tuple(features),
        )

    def _present_features(self, original: Sequence[Row], synthetic: Sequence[Row]) -> list[str]:
        rows = [as_mapping(r) for r in chain(original, synthetic)]
        return [f for f in self.config.numeric_fields if any(f in row for row in rows)]

    @staticmethod
    def _feature_stats(original: Sequence[Row], features: list[str]) -> dict[str, tuple[float, float]]:
        stats = {}
        for feature in features:
            values = collect_values(original, feature)
            mean = float(np.mean(values)) if values else 0.0
            std = float(np.std(values)) if values else 0.0
            stats[feature] = (mean, std or 1.0)
        return stats

    @staticmethod
    def _vectorize(
        rows: Sequence[Row], features: list[str], stats: dict[str, tuple[float, float]],
    ) -> np.ndarray:
        matrix = np.zeros((len(rows), len(features)))
        for i, row in enumerate(rows):
            values = as_mapping(row)
            for j, feature in enumerate(features):
                value = numeric_value(values.get(feature))
                if value is not None:
                    mean, std = stats[feature]
                    matrix[i, j] = (value - mean) / std
        return matrix

    def _baseline(self, nn: NearestNeighbors, n_original: int) -> float:
        """Median positive nearest-neighbour distance within the original data."""
        if n_original < 2:
            return self.policy.default_baseline
        # Without a query matrix each fitted point is excluded from its own neighbours.
        internal, _ = nn.kneighbors(n_neighbors=1)
        positive = np.sort(internal[:, 0][internal[:, 0] > 0])
        if positive.size == 0:
            return self.policy.default_baseline
        return float(positive[positive.size // 2])

    # ------------------------------------------------------------------
    # Rare combinations / attribute disclosure
    # ------------------------------------------------------------------

    def combination_key(self, row: Row) -> str:
        values = as_mapping(row)
        return self.policy.combo_separator.join(
            "" if values.get(f) is None else str(values.get(f))
            for f in self.config.categorical_fields
        )

    def _rare_counts(self, original: Sequence[Row]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for row in original:
            key = self.combination_key(row)
            counts[key] = counts.get(key, 0) + 1
        n = max(1, len(original))
        return {k: c for k, c in counts.items() if c / n < self.policy.rare_fraction}

    def rare_combinations(self, original: Sequence[Row], limit: int | None = None) -> list[RareCombination]:
        """Categorical combinations seen in under ``rare_fraction`` of original rows.

        Returned in first-seen order, at most *limit* (default
        ``max_rare_combinations``) entries.
        """
        limit = self.policy.max_rare_combinations if limit is None else limit
        sep, label_sep = self.policy.combo_separator, self.policy.label_separator
        return [
            RareCombination(key=key, label=key.replace(sep, label_sep), count=count)
            for key, count in list(self._rare_counts(original).items())[:limit]
        ]

    def attribute_disclosure(self, original: Sequence[Row], synthetic: Sequence[Row]) -> AttributeDisclosure:
        """Share of synthetic rows whose combination is rare in the original."""
        if not original or not synthetic:
            return AttributeDisclosure(risk_percent=None)
        rare = self._rare_counts(original)
        leaked = sum(1 for row in synthetic if self.combination_key(row) in rare)
        return AttributeDisclosure(
            risk_percent=round_percent(100.0 * leaked / len(synthetic)),
            leaked_count=leaked,
        )
