"""Synthetic record generation: classification, noise, sampling, orchestration."""

from thalsynth.synthesis.categorical import (
    CategoricalDistribution,
    CategoricalSampler,
    build_distribution,
)
from thalsynth.synthesis.noise import NoiseCalibrator
from thalsynth.synthesis.signature import SignatureClassifier
from thalsynth.synthesis.strategy import (
    FallbackGenerator,
    LocalGenerator,
    RemoteGenerator,
    SyntheticGenerator,
)
from thalsynth.synthesis.synthesizer import RecordSynthesizer

__all__ = [
    "CategoricalDistribution",
    "CategoricalSampler",
    "FallbackGenerator",
    "LocalGenerator",
    "NoiseCalibrator",
    "RecordSynthesizer",
    "RemoteGenerator",
    "SignatureClassifier",
    "SyntheticGenerator",
    "build_distribution",
]
