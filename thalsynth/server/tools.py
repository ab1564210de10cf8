"""thalsynth server tools.

Each tool call is self-contained: datasets are read from the paths given in
the call and nothing is kept between calls.  Failures are returned as
``{"error": ...}`` payloads and recorded in the audit log.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from thalsynth.audit import AuditLog
from thalsynth.config import PanelConfig, ScoringPolicy
from thalsynth.data.cleaning import RecordCleaner
from thalsynth.data.loader import DataLoader
from thalsynth.reporting.report import ReportBuilder, render_markdown
from thalsynth.schema.panel import get_panel_schema
from thalsynth.synthesis.signature import SignatureClassifier
from thalsynth.synthesis.strategy import (
    FallbackGenerator,
    LocalGenerator,
    RemoteGenerator,
    SyntheticGenerator,
)

logger = logging.getLogger(__name__)


class SynthesisServerTools:
    """The generation / reporting tool set exposed by the MCP server."""

    def __init__(
        self,
        config: PanelConfig | None = None,
        policy: ScoringPolicy | None = None,
        audit_log: AuditLog | None = None,
        remote_url: str | None = None,
    ):
        self.config = config or PanelConfig.default()
        self.policy = policy or ScoringPolicy()
        self.schema = get_panel_schema()
        self.loader = DataLoader()
        self.cleaner = RecordCleaner(self.schema, self.config)
        self.classifier = SignatureClassifier.from_config(self.config)
        self.audit = audit_log or AuditLog()
        self.remote_url = remote_url

    def describe_panel(self) -> dict:
        """Tool 1: canonical columns, classifier rules and noise profiles."""
        try:
            result = {
                "schema_name": self.schema.name,
                "schema_version": self.schema.version,
                "columns": [
                    {
                        "name": col.name,
                        "role": col.role.value,
                        "unit": col.unit,
                        "description": col.description,
                    }
                    for col in self.schema.columns
                ],
                "conditions": [c.model_dump(mode="json") for c in self.config.conditions],
                "positive_score": self.config.positive_score,
                "general_profiles": {
                    k: p.model_dump() for k, p in self.config.general_profiles.items()
                },
                "signature_profiles": {
                    k: p.model_dump() for k, p in self.config.signature_profiles.items()
                },
            }
            self.audit.record_call("describe_panel", "Described panel configuration")
            return result
        except Exception as e:
            logger.exception("describe_panel failed")
            return {"error": str(e)}

    def generate_synthetic(
        self,
        path: str,
        rows: int,
        seed: int | None = None,
        output_path: str | None = None,
        preview: int = 10,
    ) -> dict:
        """Tool 2: generate *rows* synthetic records from the panel file at *path*.

        Args:
            path: CSV or Excel file with the original panel.
            rows: Number of synthetic rows (positive integer).
            seed: Optional seed for reproducible output.
            output_path: Optional CSV path to write the synthetic rows to.
            preview: Number of synthetic rows echoed back in the response.
        """
        try:
            records = self.classifier.annotate(self.cleaner.clean(self.loader.load_rows(path)))
            generator = self._generator(seed)
            synthetic, strategy = generator.run(records, rows)

            result = {
                "status": "generated",
                "source_rows": len(records),
                "source_signature_positive": sum(1 for r in records if r.signature_positive),
                "rows_generated": len(synthetic),
                "signature_positive": sum(1 for r in synthetic if r.get(self.config.flag_field)),
                "strategy": strategy,
                "preview": synthetic[:max(0, preview)],
            }
            if output_path:
                columns = [*self.config.canonical_fields, self.config.flag_field]
                result["output_path"] = str(self.loader.write_csv(synthetic, output_path, columns))

            self.audit.record_call(
                "generate_synthetic",
                f"Generated {len(synthetic)} rows from {len(records)} source rows",
                files=[path, *([output_path] if output_path else [])],
                source_rows=len(records),
                rows_generated=len(synthetic),
                seed=seed,
                strategy=strategy,
            )
            return result
        except Exception as e:
            logger.exception("generate_synthetic failed")
            self.audit.record_call(
                "generate_synthetic", "Generation failed", files=[path], seed=seed, error=str(e),
            )
            return {"error": str(e)}

    def privacy_report(
        self,
        original_path: str,
        synthetic_path: str,
        feature: str | None = None,
        bins: int | None = None,
        output_path: str | None = None,
    ) -> dict:
        """Tool 3: quality and privacy report for an original / synthetic file pair.

        Args:
            original_path: Original panel file.
            synthetic_path: Synthetic panel file.
            feature: Numeric feature for the headline similarity.
            bins: Histogram bin count.
            output_path: Optional path for a Markdown rendering of the report.
        """
        try:
            original = self.cleaner.clean(self.loader.load_rows(original_path))
            synthetic = self.cleaner.clean(self.loader.load_rows(synthetic_path))
            report = ReportBuilder(self.config, self.policy).build(
                original, synthetic, feature=feature, bins=bins,
            )
            result = report.to_dict()
            if output_path:
                out = Path(output_path)
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_text(render_markdown(report), encoding="utf-8")
                result["output_path"] = str(out)

            self.audit.record_call(
                "privacy_report",
                f"Scored {len(synthetic)} synthetic rows against {len(original)} original rows",
                files=[original_path, synthetic_path],
                source_rows=len(original),
            )
            return result
        except Exception as e:
            logger.exception("privacy_report failed")
            self.audit.record_call(
                "privacy_report", "Report failed",
                files=[original_path, synthetic_path], error=str(e),
            )
            return {"error": str(e)}

    def _generator(self, seed: int | None) -> SyntheticGenerator:
        local = LocalGenerator(self.config, rng=np.random.default_rng(seed))
        if not self.remote_url:
            return local
        return FallbackGenerator(RemoteGenerator(self.remote_url, self.config), local)
