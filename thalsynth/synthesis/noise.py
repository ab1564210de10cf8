"""Range-aware noise for numeric laboratory values."""

from __future__ import annotations

from typing import Any

import numpy as np

from thalsynth.config import FieldNoiseProfile, PanelConfig
from thalsynth.data.records import is_absent, numeric_value


class NoiseCalibrator:
    """Perturb one numeric value within a clinically plausible range.

    Two profile sets are configured per field: a *general* one spanning the
    plausible range, and a narrower *signature* one used for rows that must
    keep their thalassemia trait pattern.  Absent or unparseable values are
    returned unchanged.
    """

    def __init__(
        self,
        config: PanelConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or PanelConfig.default()
        self.rng = rng if rng is not None else np.random.default_rng()

    def profile_for(self, field: str, preserve_signature: bool = False) -> FieldNoiseProfile | None:
        """Return the profile used for *field*, or None when unconfigured.

        The signature profile falls back to the general one for fields that
        have no signature range.
        """
        if preserve_signature and field in self.config.signature_profiles:
            return self.config.signature_profiles[field]
        return self.config.general_profiles.get(field)

    def perturb(self, field: str, value: Any, preserve_signature: bool = False) -> Any:
        """Return a noisy copy of *value* for *field*.

        With a configured profile the result always lies within
        ``[lower_bound, upper_bound]`` and is rounded to the field precision.
        Without one a small symmetric percentage noise is applied and nothing
        is clipped.
        """
        if is_absent(value):
            return value
        number = numeric_value(value)
        if number is None:
            return value

        profile = self.profile_for(field, preserve_signature)
        if profile is None:
            fraction = self.config.fallback_noise_fraction
            noisy = number + float(self.rng.uniform(-fraction, fraction)) * number
            return round(noisy, self.config.default_precision)

        spread = profile.noise_fraction * max(1.0, abs(number))
        noisy = number + float(self.rng.uniform(-spread, spread))
        if number < self.config.small_value_cutoff:
            jitter = self.config.small_value_jitter
            noisy += float(self.rng.uniform(-jitter, jitter))

        noisy = round(noisy, self.config.precision_for(field))
        return min(max(noisy, profile.lower_bound), profile.upper_bound)
