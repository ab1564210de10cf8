"""
Pytest Configuration and Shared Fixtures

Global fixtures and configuration for the test suite.
"""

import numpy as np
import pytest

from thalsynth.audit import AuditLog
from thalsynth.config import PanelConfig, ScoringPolicy
from thalsynth.data.loader import DataLoader
from thalsynth.synthesis.signature import SignatureClassifier


# Patient_ID, Gender, Genotype, Hemoglobin, MCV, MCH, RBC, Ferritin
_PANEL = [
    ("P001", "Male", "beta-trait", 11.2, 64.0, 20.5, 5.8, 85.0),
    ("P002", "Female", "beta-trait", 10.8, 66.5, 21.0, 5.4, 60.0),
    ("P003", "Female", "HbE", 11.5, 70.2, 22.4, 5.1, 120.0),
    ("P004", "Male", "alpha-trait", 12.0, 72.0, 23.1, 5.6, 95.0),
    ("P005", "Male", "normal", 14.8, 88.0, 29.5, 4.9, 110.0),
    ("P006", "Female", "normal", 13.1, 91.0, 30.2, 4.3, 45.0),
    ("P007", "Female", "normal", 12.9, 86.5, 28.8, 3.9, 70.0),
    ("P008", "Male", "normal", 15.2, 93.0, 31.0, 5.0, 150.0),
    ("P009", "Female", "iron-deficiency", 12.5, 72.5, 23.0, 3.9, 6.0),
    ("P010", "Male", "normal", 14.1, 89.0, 29.9, 4.6, None),
]

# Rows P001-P004 carry the trait signature.
EXPECTED_FLAGS = [True, True, True, True, False, False, False, False, False, False]


@pytest.fixture
def config():
    return PanelConfig.default()


@pytest.fixture
def policy():
    return ScoringPolicy()


@pytest.fixture
def rng():
    """Seeded random source for reproducible generation."""
    return np.random.default_rng(42)


@pytest.fixture
def panel_records():
    """Ten cleaned panel records: four trait carriers, one iron-deficient, five normal."""
    fields = ["Patient_ID", "Gender", "Genotype", "Hemoglobin", "MCV", "MCH", "RBC", "Ferritin"]
    return [dict(zip(fields, row)) for row in _PANEL]


@pytest.fixture
def annotated_records(panel_records):
    return SignatureClassifier().annotate(panel_records)


@pytest.fixture
def panel_csv(tmp_path, panel_records):
    """The sample panel written to CSV with source-style headers."""
    renamed = [
        {
            "ID": r["Patient_ID"],
            "Sex": r["Gender"],
            "Mutation": r["Genotype"],
            "Hb": r["Hemoglobin"],
            "MCV": r["MCV"],
            "MCH": r["MCH"],
            "RBC Count": r["RBC"],
            "Serum Ferritin": r["Ferritin"],
        }
        for r in panel_records
    ]
    return DataLoader().write_csv(renamed, tmp_path / "panel.csv")


@pytest.fixture
def audit_log(tmp_path):
    return AuditLog(tmp_path / "audit" / "test.audit.jsonl")
