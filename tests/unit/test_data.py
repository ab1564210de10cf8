"""Tests for thalsynth.data: records, cleaning, loader."""
import math

import pandas as pd
import pytest

from thalsynth.data.cleaning import RecordCleaner, coerce_numeric, map_columns
from thalsynth.data.loader import DataLoader, records_to_frame
from thalsynth.data.records import AnnotatedRecord, is_absent, numeric_value
from thalsynth.errors import UnsupportedFormatError
from thalsynth.schema import get_panel_schema


class TestValueHelpers:
    @pytest.mark.parametrize("value", [None, "", "  ", "na", "NA", float("nan")])
    def test_absent_markers(self, value):
        assert is_absent(value)

    def test_present_values(self):
        assert not is_absent(0)
        assert not is_absent("abc")

    def test_numeric_value(self):
        assert numeric_value(" 12.5 ") == 12.5
        assert numeric_value(7) == 7.0
        assert numeric_value("abc") is None
        assert numeric_value(True) is None
        assert numeric_value(float("inf")) is None

    def test_coerce_numeric(self):
        assert coerce_numeric(None) is None
        assert coerce_numeric("na") is None
        assert coerce_numeric(" 64.5 ") == 64.5
        assert coerce_numeric(3) == 3.0
        assert coerce_numeric(" high ") == "high"
        assert coerce_numeric(float("nan")) is None


class TestAnnotatedRecord:
    def test_values_are_frozen_copy(self):
        source = {"Patient_ID": "P001", "MCV": 70.0}
        record = AnnotatedRecord(values=source, signature_positive=True)
        source["MCV"] = 99.0
        assert record["MCV"] == 70.0
        with pytest.raises(TypeError):
            record.values["MCV"] = 1.0

    def test_to_dict(self):
        record = AnnotatedRecord(values={"Patient_ID": "P001"}, signature_positive=False)
        assert record.to_dict() == {"Patient_ID": "P001", "Likely_Thalassemia": False}
        assert record.to_dict("flag") == {"Patient_ID": "P001", "flag": False}


class TestMapColumns:
    def test_source_headers(self):
        headers = ["ID", "Sex", "Mutation", "Hb", "mcv", "MCH (pg)", "RBC Count", "Serum Ferritin"]
        mapping = map_columns(headers, get_panel_schema())
        assert mapping == {
            "Patient_ID": "ID",
            "Gender": "Sex",
            "Genotype": "Mutation",
            "Hemoglobin": "Hb",
            "MCV": "mcv",
            "MCH": "MCH (pg)",
            "RBC": "RBC Count",
            "Ferritin": "Serum Ferritin",
        }

    def test_unmatched_column_absent(self):
        mapping = map_columns(["Hb", "Notes"], get_panel_schema())
        assert mapping == {"Hemoglobin": "Hb"}


class TestRecordCleaner:
    def test_clean_fills_defaults(self):
        rows = [
            {"Sex": " Female ", "Hb": "11.2", "MCV": "na", "Ferritin": "high"},
            {"Sex": "", "Hb": "", "MCV": "", "Ferritin": ""},
            {"Sex": "", "Hb": "13", "MCV": "88", "Ferritin": "40"},
        ]
        cleaned = RecordCleaner().clean(rows)
        assert len(cleaned) == 2
        first, second = cleaned
        assert first["Patient_ID"] == "P001"
        assert first["Gender"] == "Female"
        assert first["Genotype"] == "Unknown"
        assert first["Hemoglobin"] == 11.2
        assert first["MCV"] is None
        assert first["Ferritin"] == "high"
        assert first["RBC"] is None
        assert second["Patient_ID"] == "P002"
        assert second["Gender"] == "Unknown"

    def test_clean_keeps_ids(self):
        cleaned = RecordCleaner().clean([{"Patient ID": " A-17 ", "MCV": 70}])
        assert cleaned[0]["Patient_ID"] == "A-17"
        assert cleaned[0]["MCV"] == 70.0

    def test_clean_empty(self):
        assert RecordCleaner().clean([]) == []


class TestDataLoader:
    def test_detect_format(self):
        loader = DataLoader()
        assert loader.detect_format("panel.csv") == "csv"
        assert loader.detect_format("panel.XLSX") == "excel"
        assert loader.detect_format("panel.txt") == "csv"

    def test_detect_unknown_strict(self):
        with pytest.raises(UnsupportedFormatError):
            DataLoader().detect_format("panel.json", strict=True)

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DataLoader().load_rows(tmp_path / "missing.csv")

    def test_load_csv_blank_cells(self, tmp_path):
        path = tmp_path / "panel.csv"
        path.write_text("ID,Hb,MCV\nP1,11.2,\nP2,,80\n")
        rows = DataLoader().load_rows(path)
        assert rows == [
            {"ID": "P1", "Hb": "11.2", "MCV": ""},
            {"ID": "P2", "Hb": "", "MCV": "80"},
        ]

    def test_load_excel_first_sheet(self, tmp_path):
        path = tmp_path / "panel.xlsx"
        pd.DataFrame({"ID": ["P1"], "Hb": [11.2]}).to_excel(path, index=False)
        rows = DataLoader().load_rows(path)
        assert rows[0]["ID"] == "P1"
        assert float(rows[0]["Hb"]) == 11.2

    def test_write_csv_quotes_everything(self, tmp_path):
        rows = [{"MCV": 70.5, "Patient_ID": "P001", "Ferritin": None}]
        path = DataLoader().write_csv(rows, tmp_path / "out" / "syn.csv", ["Patient_ID", "MCV", "Ferritin"])
        lines = path.read_text().splitlines()
        assert lines[0] == '"Patient_ID","MCV","Ferritin"'
        assert lines[1].startswith('"P001","70.5"')

    def test_records_to_frame_column_order(self):
        df = records_to_frame([{"b": 1, "a": 2, "c": 3}], ["a", "b"])
        assert list(df.columns) == ["a", "b", "c"]

    def test_loaded_panel_cleans(self, panel_csv):
        cleaned = RecordCleaner().clean(DataLoader().load_rows(panel_csv))
        assert len(cleaned) == 10
        assert cleaned[0]["Patient_ID"] == "P001"
        assert cleaned[0]["Genotype"] == "beta-trait"
        assert math.isclose(cleaned[0]["MCV"], 64.0)
        assert cleaned[9]["Ferritin"] is None
