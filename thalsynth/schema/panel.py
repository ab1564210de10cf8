"""Thalassemia screening panel definition.

Seven canonical columns plus a row identifier: sex and genotype as free-form
categories, and the five complete-blood-count / iron-study values used to
separate thalassemia trait from iron-deficiency anaemia.
"""

from __future__ import annotations

from thalsynth.schema.base import ColumnRole, ColumnSpec, PanelSchema


def get_panel_schema() -> PanelSchema:
    """Return the thalassemia screening panel schema."""

    return PanelSchema(
        name="thalassemia_panel",
        version="1.0",
        description="Thalassemia trait screening panel (CBC indices and ferritin)",
        columns=[
            ColumnSpec(
                name="Patient_ID",
                role=ColumnRole.IDENTIFIER,
                description="Row identifier, unique within a dataset",
                candidates=[
                    "patient_id", "patient id", "id", "patientid", "sampleid",
                    "Patient_ID", "PatientID",
                ],
            ),
            ColumnSpec(
                name="Gender",
                role=ColumnRole.CATEGORICAL,
                description="Patient sex",
                candidates=["gender", "sex", "Gender", "Sex"],
            ),
            ColumnSpec(
                name="Genotype",
                role=ColumnRole.CATEGORICAL,
                description="Globin genotype, mutation or phenotype label",
                candidates=[
                    "genotype", "mutation", "Genotype", "Mutation",
                    "phenotype", "Phenotype",
                ],
            ),
            ColumnSpec(
                name="Hemoglobin",
                role=ColumnRole.NUMERIC,
                description="Haemoglobin concentration",
                unit="g/dL",
                candidates=["hemoglobin", "hb", "hgb", "Hemoglobin", "Hb", "HGB"],
            ),
            ColumnSpec(
                name="MCV",
                role=ColumnRole.NUMERIC,
                description="Mean corpuscular volume",
                unit="fL",
                candidates=["mcv", "MCV", "mean corpuscular volume", "m.c.v"],
            ),
            ColumnSpec(
                name="MCH",
                role=ColumnRole.NUMERIC,
                description="Mean corpuscular haemoglobin",
                unit="pg",
                candidates=["mch", "MCH", "mean corpuscular hemoglobin", "m.c.h"],
            ),
            ColumnSpec(
                name="RBC",
                role=ColumnRole.NUMERIC,
                description="Red blood cell count",
                unit="10^12/L",
                candidates=["rbc", "rbc_count", "rbc count", "RBC", "RBC Count"],
            ),
            ColumnSpec(
                name="Ferritin",
                role=ColumnRole.NUMERIC,
                description="Serum ferritin",
                unit="ng/mL",
                candidates=["ferritin", "Ferritin", "serum ferritin"],
            ),
        ],
    )
