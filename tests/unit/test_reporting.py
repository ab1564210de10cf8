"""Tests for thalsynth.reporting and thalsynth.audit."""
import json

import numpy as np

from thalsynth.audit import AuditEntry, AuditLog
from thalsynth.config import ScoringPolicy
from thalsynth.reporting import RECOMMENDATIONS, ReportBuilder, render_markdown
from thalsynth.synthesis import RecordSynthesizer


class TestReportBuilder:
    def test_build(self, annotated_records):
        synthetic = RecordSynthesizer(rng=np.random.default_rng(11)).generate(annotated_records, 30)
        report = ReportBuilder().build(annotated_records, synthetic)
        assert report.n_original == 10
        assert report.n_synthetic == 30
        assert report.feature == "Hemoglobin"
        assert report.similarity == report.feature_similarity["Hemoglobin"]
        assert set(report.distribution_data) == {"Hemoglobin", "MCV", "MCH", "RBC", "Ferritin"}
        assert report.reidentification.computable
        assert report.recommendations == RECOMMENDATIONS

    def test_to_dict(self, panel_records):
        data = ReportBuilder().build(panel_records, panel_records, feature="MCV", bins=20).to_dict()
        assert data["feature"] == "MCV"
        assert data["similarity"] == 100
        assert data["reid_risk_percent"] == 100
        assert data["flagged_count"] == 10
        assert len(data["distribution_data"]["MCV"]["original"]) == 20
        assert all(set(c) == {"combo", "count"} for c in data["rare_combinations"])
        assert data["threshold"] == round(data["threshold"], 3)

    def test_rare_combinations_reported(self, panel_records):
        # every Gender/Genotype pair in the panel covers at least 10% of rows
        report = ReportBuilder().build(panel_records, panel_records)
        assert report.rare_combinations == []
        assert report.attribute_disclosure.risk_percent == 0

    def test_extra_feature(self, panel_records):
        report = ReportBuilder().build(panel_records, panel_records, feature="Platelets")
        assert report.similarity is None
        assert "Platelets" in report.distribution_data

    def test_not_computable(self, panel_records):
        data = ReportBuilder().build(panel_records, []).to_dict()
        assert data["similarity"] is None
        assert data["reid_risk_percent"] is None
        assert data["attr_risk_percent"] is None
        assert data["threshold"] is None

    def test_snapshot_limits(self, annotated_records):
        synthetic = RecordSynthesizer(rng=np.random.default_rng(4)).generate(annotated_records, 20)
        report = ReportBuilder().build(annotated_records, synthetic)
        assert len(report.snapshot) == 6
        assert len(report.snapshot_columns) == 8
        assert report.snapshot_columns[0] == "Patient_ID"
        assert "Likely_Thalassemia" not in report.snapshot_columns
        assert [r["Patient_ID"] for r in report.snapshot] == ["P001", "P002", "P003", "P004", "P005", "P006"]

    def test_snapshot_blank_cells(self, panel_records):
        report = ReportBuilder(policy=ScoringPolicy(snapshot_rows=20)).build(panel_records, panel_records)
        assert len(report.snapshot) == 10
        assert report.snapshot[-1]["Ferritin"] == ""
        data = report.to_dict()["snapshot"]
        assert data["columns"] == report.snapshot_columns
        assert len(data["rows"]) == 10

    def test_snapshot_empty(self, panel_records):
        report = ReportBuilder().build(panel_records, [])
        assert (report.snapshot_columns, report.snapshot) == ([], [])


class TestRenderMarkdown:
    def test_render(self, panel_records):
        report = ReportBuilder().build(panel_records, panel_records)
        text = render_markdown(report)
        assert text.startswith("# Synthetic Data Privacy Report")
        assert "Original rows: 10 | Synthetic rows: 10" in text
        assert "| Re-identification risk | 100% |" in text
        assert "| MCV | 100% |" in text
        assert "No rare combinations detected" in text
        assert f"1. {RECOMMENDATIONS[0]}" in text

    def test_render_not_computable(self, panel_records):
        text = render_markdown(ReportBuilder().build(panel_records, []))
        assert "| Re-identification risk | N/A |" in text
        assert "| Distance threshold | N/A |" in text

    def test_render_rare_combinations(self):
        original = [{"Gender": "Male", "Genotype": "common", "MCV": 80.0}] * 20
        original = original + [{"Gender": "Female", "Genotype": "HbH", "MCV": 62.0}]
        text = render_markdown(ReportBuilder().build(original, original))
        assert "- **Female | HbH**: 1 row(s)" in text

    def test_render_snapshot(self, panel_records):
        text = render_markdown(ReportBuilder().build(panel_records, panel_records))
        assert "## Snapshot of synthetic data" in text
        assert "| Patient_ID | Gender | Genotype | Hemoglobin | MCV | MCH | RBC | Ferritin |" in text
        assert "|---|---|---|---|---|---|---|---|" in text
        assert "| P001 | Male | beta-trait | 11.2 | 64.0 | 20.5 | 5.8 | 85.0 |" in text
        assert "| P006 |" in text
        assert "| P007 |" not in text

    def test_render_snapshot_empty(self, panel_records):
        text = render_markdown(ReportBuilder().build(panel_records, []))
        assert "No synthetic rows." in text


class TestAuditLog:
    def test_record_and_read(self, audit_log):
        audit_log.record_call(
            "generate_synthetic", "Generated 5 rows", files=["panel.csv"],
            source_rows=10, rows_generated=5, seed=7, strategy="local",
        )
        audit_log.record_call("privacy_report", "Report failed", error="boom")
        entries = audit_log.read()
        assert len(entries) == 2
        assert isinstance(entries[0], AuditEntry)
        assert entries[0].files == ["panel.csv"]
        assert (entries[0].source_rows, entries[0].seed, entries[0].strategy) == (10, 7, "local")
        assert entries[1].error == "boom"
        assert entries[1].failed

    def test_one_json_line_per_call(self, audit_log):
        audit_log.record_call("describe_panel", "a")
        audit_log.record_call("describe_panel", "b")
        lines = audit_log.path.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["action"] == "a"

    def test_summary(self, audit_log):
        audit_log.record_call("generate_synthetic", "a", rows_generated=5, strategy="local")
        audit_log.record_call("generate_synthetic", "b", rows_generated=7, strategy="remote")
        audit_log.record_call("generate_synthetic", "c", rows_generated=3, strategy="local")
        audit_log.record_call("generate_synthetic", "failed", strategy="local", error="boom")
        audit_log.record_call("describe_panel", "d")
        summary = audit_log.summary()
        assert summary["total_entries"] == 5
        assert summary["entries_by_tool"] == {"generate_synthetic": 4, "describe_panel": 1}
        assert summary["rows_by_strategy"] == {"local": 8, "remote": 7}
        assert summary["total_rows_generated"] == 15
        assert summary["errors"] == 1

    def test_filters(self, audit_log):
        audit_log.append(AuditEntry(timestamp="2020-01-01T00:00:00+00:00", tool_name="t", action="old"))
        audit_log.append(AuditEntry(timestamp="2030-01-01T00:00:00+00:00", tool_name="t", action="new"))
        audit_log.append(AuditEntry(timestamp="2030-01-02T00:00:00+00:00", tool_name="u", action="other"))
        assert [e.action for e in audit_log.read(since="2025-01-01")] == ["new", "other"]
        assert [e.action for e in audit_log.read(since="2025-01-01", tool_name="t")] == ["new"]

    def test_missing_file(self, tmp_path):
        log = AuditLog(tmp_path / "empty.jsonl")
        assert log.read() == []
        assert log.path.parent == tmp_path
