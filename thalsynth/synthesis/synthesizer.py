"""Per-row synthetic record generation."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from thalsynth.config import PanelConfig
from thalsynth.data.records import AnnotatedRecord, Record, is_absent, numeric_value
from thalsynth.errors import EmptyDatasetError, InvalidCountError
from thalsynth.synthesis.categorical import (
    CategoricalDistribution,
    CategoricalSampler,
    build_distribution,
)
from thalsynth.synthesis.noise import NoiseCalibrator

logger = logging.getLogger(__name__)


def synthetic_id(index: int) -> str:
    """Return the identifier of the *index*-th (zero-based) synthetic row."""
    return f"P{index + 1:03d}"


def check_request(records: Sequence[AnnotatedRecord], count: int) -> None:
    """Reject a generation request before any work is done.

    Raises:
        InvalidCountError: If *count* is not a positive integer.
        EmptyDatasetError: If *records* is empty.
    """
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count <= 0:
        raise InvalidCountError(f"Row count must be a positive integer, got {count!r}")
    if not records:
        raise EmptyDatasetError("Cannot generate synthetic rows from an empty dataset")


def field_means(records: Sequence[AnnotatedRecord], fields: Sequence[str]) -> dict[str, float]:
    """Mean of the present values of each field; 0.0 when none are present."""
    means: dict[str, float] = {}
    for field in fields:
        values = [v for v in (numeric_value(r.get(field)) for r in records) if v is not None]
        means[field] = float(np.mean(values)) if values else 0.0
    return means


class RecordSynthesizer:
    """Generate synthetic rows by perturbing source rows in cyclic order.

    Output row *i* is built from source row ``i mod len(records)``.  Numeric
    fields go through :class:`NoiseCalibrator` (signature-preserving when the
    base row is flagged); categorical fields are drawn from the empirical
    distribution of the whole source set, tilted toward the base row's own
    value for flagged rows.  Each output row gets a fresh identifier and
    inherits the base row's flag.

    Parameters
    ----------
    config:
        Panel configuration.  Defaults are used when ``None``.
    rng:
        Random source shared by the noise calibrator and the sampler.  Pass
        a seeded ``numpy.random.Generator`` for reproducible output.
    """

    def __init__(
        self,
        config: PanelConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or PanelConfig.default()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.calibrator = NoiseCalibrator(self.config, rng=self.rng)
        self.sampler = CategoricalSampler(rng=self.rng)

    def generate(self, records: Sequence[AnnotatedRecord], count: int) -> list[Record]:
        """Return exactly *count* synthetic records.

        Raises:
            InvalidCountError: If *count* is not a positive integer.
            EmptyDatasetError: If *records* is empty.
        """
        check_request(records, count)

        cfg = self.config
        distributions = {
            field: build_distribution(records, field, cfg.unknown_value)
            for field in cfg.categorical_fields
        }
        means = field_means(records, cfg.numeric_fields)
        n_positive = sum(1 for r in records if r.signature_positive)
        logger.info(
            "Generating %d synthetic rows from %d source rows (%d signature-positive)",
            count, len(records), n_positive,
        )

        return [
            self._synthesize_row(i, records[i % len(records)], distributions, means)
            for i in range(int(count))
        ]

    def _synthesize_row(
        self,
        index: int,
        base: AnnotatedRecord,
        distributions: dict[str, CategoricalDistribution],
        means: dict[str, float],
    ) -> Record:
        cfg = self.config
        preserve = base.signature_positive
        row: Record = {cfg.id_field: synthetic_id(index)}

        for field in cfg.numeric_fields:
            value = base.get(field)
            raw = means[field] if is_absent(value) else value
            row[field] = self.calibrator.perturb(field, raw, preserve_signature=preserve)

        for field in cfg.categorical_fields:
            base_value = base.get(field)
            if preserve and base_value:
                row[field] = self.sampler.sample(
                    distributions[field], bias_value=str(base_value), bias_factor=cfg.bias_factor,
                )
            else:
                row[field] = self.sampler.sample(distributions[field])

        row[cfg.flag_field] = preserve
        return row
