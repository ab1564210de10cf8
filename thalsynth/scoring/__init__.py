"""Quality and privacy scoring of synthetic datasets."""

from thalsynth.scoring.privacy import (
    AttributeDisclosure,
    PrivacyAssessment,
    PrivacyRiskScorer,
    RareCombination,
)
from thalsynth.scoring.quality import (
    FeatureComparison,
    HistogramBin,
    QualityScorer,
    ValueRange,
    histogram,
    normalize,
    overlap,
    smooth,
)

__all__ = [
    "AttributeDisclosure",
    "FeatureComparison",
    "HistogramBin",
    "PrivacyAssessment",
    "PrivacyRiskScorer",
    "QualityScorer",
    "RareCombination",
    "ValueRange",
    "histogram",
    "normalize",
    "overlap",
    "smooth",
]
