"""Privacy / utility report assembled from the quality and privacy scorers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import jinja2

from thalsynth.config import PanelConfig, ScoringPolicy
from thalsynth.data.records import AnnotatedRecord, as_mapping, is_absent
from thalsynth.scoring.privacy import (
    AttributeDisclosure,
    PrivacyAssessment,
    PrivacyRiskScorer,
    RareCombination,
)
from thalsynth.scoring.quality import FeatureComparison, QualityScorer

RECOMMENDATIONS = [
    "Apply k-anonymity (k >= 5) on quasi-identifiers (age bucket, sex, genotype).",
    "If re-identification risk is high, add calibrated noise (DP or Gaussian) to "
    "sensitive numeric columns.",
    "Remove or transform synthetic rows whose nearest-neighbour distance is below "
    "the threshold.",
    "Annotate shared datasets with metadata: source, generation model, quality "
    "score and privacy score.",
]

Row = Mapping[str, Any] | AnnotatedRecord


@dataclass
class PrivacyReport:
    """Structured result of a report request."""

    n_original: int
    n_synthetic: int
    feature: str
    similarity: int | None
    reidentification: PrivacyAssessment
    attribute_disclosure: AttributeDisclosure
    rare_combinations: list[RareCombination] = field(default_factory=list)
    distribution_data: dict[str, FeatureComparison] = field(default_factory=dict)
    snapshot_columns: list[str] = field(default_factory=list)
    snapshot: list[dict[str, Any]] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=lambda: list(RECOMMENDATIONS))

    @property
    def feature_similarity(self) -> dict[str, int | None]:
        return {name: c.similarity for name, c in self.distribution_data.items()}

    def to_dict(self) -> dict:
        threshold = self.reidentification.threshold
        return {
            "n_original": self.n_original,
            "n_synthetic": self.n_synthetic,
            "feature": self.feature,
            "similarity": self.similarity,
            "feature_similarity": self.feature_similarity,
            "reid_risk_percent": self.reidentification.risk_percent,
            "attr_risk_percent": self.attribute_disclosure.risk_percent,
            "threshold": round(threshold, 3) if threshold is not None else None,
            "flagged_count": self.reidentification.flagged_count,
            "leaked_count": self.attribute_disclosure.leaked_count,
            "rare_combinations": [
                {"combo": r.label, "count": r.count} for r in self.rare_combinations
            ],
            "distribution_data": {
                name: c.to_dict() for name, c in self.distribution_data.items()
            },
            "snapshot": {"columns": list(self.snapshot_columns), "rows": list(self.snapshot)},
            "recommendations": list(self.recommendations),
        }


class ReportBuilder:
    """Compute every figure of the privacy report for one dataset pair."""

    def __init__(
        self,
        config: PanelConfig | None = None,
        policy: ScoringPolicy | None = None,
    ) -> None:
        self.config = config or PanelConfig.default()
        self.policy = policy or ScoringPolicy()
        self.quality = QualityScorer(self.policy)
        self.privacy = PrivacyRiskScorer(self.config, self.policy)

    def build(
        self,
        original: Sequence[Row],
        synthetic: Sequence[Row],
        feature: str | None = None,
        bins: int | None = None,
    ) -> PrivacyReport:
        """Build the report; *feature* selects the headline similarity."""
        feature = feature or self.policy.default_feature
        distribution = {
            name: self.quality.compare(original, synthetic, name, bins=bins)
            for name in self.config.numeric_fields
        }
        if feature not in distribution:
            distribution[feature] = self.quality.compare(original, synthetic, feature, bins=bins)

        columns, rows = self.snapshot(synthetic)
        return PrivacyReport(
            n_original=len(original),
            n_synthetic=len(synthetic),
            feature=feature,
            similarity=distribution[feature].similarity,
            reidentification=self.privacy.assess(original, synthetic),
            attribute_disclosure=self.privacy.attribute_disclosure(original, synthetic),
            rare_combinations=self.privacy.rare_combinations(original),
            distribution_data=distribution,
            snapshot_columns=columns,
            snapshot=rows,
        )

    def snapshot(self, synthetic: Sequence[Row]) -> tuple[list[str], list[dict[str, Any]]]:
        """Leading rows and columns of the synthetic set, in the first row's key order."""
        rows = [as_mapping(r) for r in synthetic[:self.policy.snapshot_rows]]
        if not rows:
            return [], []
        columns = list(rows[0])[:self.policy.snapshot_columns]
        return columns, [
            {c: "" if is_absent(row.get(c)) else row.get(c) for c in columns} for row in rows
        ]


def _percent(value: int | None) -> str:
    return "N/A" if value is None else f"{value}%"


def render_markdown(report: PrivacyReport, template_dir: str | Path | None = None) -> str:
    """Render *report* as a Markdown document."""
    if template_dir is None:
        template_dir = Path(__file__).parent / "templates"
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(template_dir)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["percent"] = _percent
    template = env.get_template("privacy_report.md.j2")
    return template.render(report=report, data=report.to_dict())
