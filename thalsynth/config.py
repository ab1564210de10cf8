"""Panel configuration: field roles, classifier rules, noise profiles, scoring policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Classifier rules
# ---------------------------------------------------------------------------


class Comparison(str, Enum):
    """How a condition compares a field value against its cutoff."""

    AT_MOST = "at_most"          # 0 < value <= cutoff
    ABOVE = "above"              # value > cutoff
    BELOW = "below"              # value < cutoff


class SignatureCondition(BaseModel):
    """One named threshold rule contributing to the signature score."""

    name: str
    field: str
    comparison: Comparison
    cutoff: float
    weight: int = Field(
        default=1,
        description="Score contribution when the condition holds (negative "
        "for competing-explanation signals).",
    )

    def holds(self, value: float) -> bool:
        """Return whether *value* satisfies this condition."""
        if self.comparison == Comparison.AT_MOST:
            return 0 < value <= self.cutoff
        if self.comparison == Comparison.ABOVE:
            return value > self.cutoff
        return value < self.cutoff


# ---------------------------------------------------------------------------
# Noise profiles
# ---------------------------------------------------------------------------


class FieldNoiseProfile(BaseModel):
    """Clipping range and relative noise magnitude for one numeric field."""

    lower_bound: float
    upper_bound: float
    noise_fraction: float = Field(ge=0.0)

    @model_validator(mode="after")
    def _check_bounds(self) -> FieldNoiseProfile:
        if self.lower_bound > self.upper_bound:
            raise ValueError(
                f"lower_bound {self.lower_bound} exceeds upper_bound {self.upper_bound}"
            )
        return self


def _general_profiles() -> dict[str, FieldNoiseProfile]:
    return {
        "Hemoglobin": FieldNoiseProfile(lower_bound=5, upper_bound=18, noise_fraction=0.08),
        "MCV": FieldNoiseProfile(lower_bound=50, upper_bound=110, noise_fraction=0.06),
        "MCH": FieldNoiseProfile(lower_bound=15, upper_bound=40, noise_fraction=0.07),
        "RBC": FieldNoiseProfile(lower_bound=2.5, upper_bound=8.0, noise_fraction=0.06),
        "Ferritin": FieldNoiseProfile(lower_bound=5, upper_bound=5000, noise_fraction=0.12),
    }


def _signature_profiles() -> dict[str, FieldNoiseProfile]:
    return {
        "Hemoglobin": FieldNoiseProfile(lower_bound=7.0, upper_bound=13.0, noise_fraction=0.06),
        "MCV": FieldNoiseProfile(lower_bound=55, upper_bound=80, noise_fraction=0.04),
        "MCH": FieldNoiseProfile(lower_bound=18, upper_bound=27, noise_fraction=0.05),
        "RBC": FieldNoiseProfile(lower_bound=4.0, upper_bound=7.5, noise_fraction=0.05),
        "Ferritin": FieldNoiseProfile(lower_bound=10, upper_bound=2000, noise_fraction=0.10),
    }


def _default_conditions() -> list[SignatureCondition]:
    return [
        SignatureCondition(name="microcytosis", field="MCV", comparison=Comparison.AT_MOST, cutoff=80),
        SignatureCondition(name="hypochromia", field="MCH", comparison=Comparison.AT_MOST, cutoff=27),
        SignatureCondition(name="mild_anemia", field="Hemoglobin", comparison=Comparison.AT_MOST, cutoff=12),
        SignatureCondition(name="erythrocytosis", field="RBC", comparison=Comparison.ABOVE, cutoff=4.0),
        SignatureCondition(
            name="iron_deficiency", field="Ferritin", comparison=Comparison.BELOW, cutoff=15, weight=-1,
        ),
    ]


# ---------------------------------------------------------------------------
# Panel configuration
# ---------------------------------------------------------------------------


class PanelConfig(BaseModel):
    """Complete configuration of the screening panel and the generator.

    The defaults reproduce the thalassemia trait panel: one identifier,
    two categorical fields and five numeric laboratory fields.
    """

    id_field: str = "Patient_ID"
    categorical_fields: list[str] = Field(default_factory=lambda: ["Gender", "Genotype"])
    numeric_fields: list[str] = Field(
        default_factory=lambda: ["Hemoglobin", "MCV", "MCH", "RBC", "Ferritin"]
    )
    flag_field: str = "Likely_Thalassemia"
    unknown_value: str = "Unknown"

    conditions: list[SignatureCondition] = Field(default_factory=_default_conditions)
    positive_score: int = 2

    general_profiles: dict[str, FieldNoiseProfile] = Field(default_factory=_general_profiles)
    signature_profiles: dict[str, FieldNoiseProfile] = Field(default_factory=_signature_profiles)
    precision: dict[str, int] = Field(
        default_factory=lambda: {"Hemoglobin": 2, "Ferritin": 1}
    )
    default_precision: int = 3
    small_value_cutoff: float = 10.0
    small_value_jitter: float = Field(default=0.25, ge=0.0)
    fallback_noise_fraction: float = Field(default=0.05, ge=0.0)

    bias_factor: float = Field(default=1.4, gt=0.0)

    @property
    def canonical_fields(self) -> list[str]:
        """All canonical fields in export order."""
        return [self.id_field, *self.categorical_fields, *self.numeric_fields]

    def precision_for(self, field: str) -> int:
        return self.precision.get(field, self.default_precision)

    def with_noise_scale(self, factor: float) -> PanelConfig:
        """Return a copy with every noise magnitude multiplied by *factor*.

        The copy is re-validated, so the result obeys the same constraints
        as a loaded configuration.

        Raises:
            ValueError: If *factor* is negative.
        """
        if factor < 0:
            raise ValueError(f"noise scale factor must be non-negative, got {factor}")

        def scaled(profiles: dict[str, FieldNoiseProfile]) -> dict[str, dict]:
            return {
                name: {**p.model_dump(), "noise_fraction": p.noise_fraction * factor}
                for name, p in profiles.items()
            }

        return PanelConfig.model_validate({
            **self.model_dump(),
            "general_profiles": scaled(self.general_profiles),
            "signature_profiles": scaled(self.signature_profiles),
            "small_value_jitter": self.small_value_jitter * factor,
            "fallback_noise_fraction": self.fallback_noise_fraction * factor,
        })

    @classmethod
    def default(cls) -> PanelConfig:
        return cls()

    @classmethod
    def from_file(cls, path: str | Path) -> PanelConfig:
        """Load a JSON configuration document; omitted keys keep their defaults.

        Raises:
            FileNotFoundError: If *path* does not exist.
            pydantic.ValidationError: If the document is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return cls.model_validate_json(path.read_text(encoding="utf-8"))


@dataclass
class ScoringPolicy:
    """Thresholds used by the quality and privacy scorers."""
    threshold_factor: float = 0.6      # fraction of the original's median NN distance
    min_threshold: float = 1e-4        # floor so the threshold is never zero
    default_baseline: float = 1.0      # used when no positive internal distance exists
    rare_fraction: float = 0.05        # strictly below this share counts as rare
    max_rare_combinations: int = 12
    combo_separator: str = "||"
    label_separator: str = " | "
    bins: int = 50
    smoothing_window: int = 5
    default_feature: str = "Hemoglobin"
    snapshot_rows: int = 6
    snapshot_columns: int = 8
