"""Header reconciliation and value normalisation for uploaded panel rows."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from thalsynth.config import PanelConfig
from thalsynth.data.records import Record, is_absent
from thalsynth.schema.base import PanelSchema
from thalsynth.schema.panel import get_panel_schema

logger = logging.getLogger(__name__)


def coerce_numeric(value: Any) -> float | str | None:
    """Normalise a numeric cell: absent -> None, parseable -> float, else the trimmed text."""
    if is_absent(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    text = str(value).strip()
    try:
        number = float(text)
    except ValueError:
        return text
    return number if math.isfinite(number) else text


def map_columns(headers: Iterable[Any], schema: PanelSchema) -> dict[str, str]:
    """Map canonical column names to source headers.

    For each canonical column the candidate spellings are tried as exact
    case-insensitive matches first, then as substrings of a header.
    """
    lower_map: dict[str, str] = {}
    for header in headers:
        if header is None:
            continue
        lower_map.setdefault(str(header).lower(), str(header))

    mapping: dict[str, str] = {}
    for canonical, candidates in schema.candidate_map().items():
        keys = [c.lower() for c in candidates]
        match = next((lower_map[k] for k in keys if k in lower_map), None)
        if match is None:
            match = next(
                (lower_map[h] for k in keys for h in lower_map if k in h),
                None,
            )
        if match is not None:
            mapping[canonical] = match
    return mapping


class RecordCleaner:
    """Turn raw uploaded rows into canonical records.

    Every output record has all canonical fields: a non-empty identifier,
    categorical values defaulting to ``Unknown``, and numeric values that
    are floats, ``None`` when absent, or the raw text when unparseable.
    Rows with no usable canonical value are dropped.
    """

    def __init__(
        self,
        schema: PanelSchema | None = None,
        config: PanelConfig | None = None,
    ) -> None:
        self.schema = schema or get_panel_schema()
        self.config = config or PanelConfig.default()

    def clean(self, rows: Sequence[Mapping[str, Any]]) -> list[Record]:
        if not rows:
            return []

        mapping = map_columns(rows[0].keys(), self.schema)
        logger.info("Column mapping detected: %s", mapping)

        standardized = []
        for row in rows:
            out: Record = {}
            for canonical in self.config.canonical_fields:
                value = row.get(mapping[canonical]) if canonical in mapping else None
                out[canonical] = None if is_absent(value) else value
            if any(v is not None for v in out.values()):
                standardized.append(out)

        cfg = self.config
        cleaned = []
        for i, record in enumerate(standardized):
            record_id = record[cfg.id_field]
            record[cfg.id_field] = (
                str(record_id).strip() if record_id is not None else f"P{i + 1:03d}"
            )
            for field in cfg.categorical_fields:
                value = record[field]
                record[field] = cfg.unknown_value if value is None else str(value).strip()
            for field in cfg.numeric_fields:
                record[field] = coerce_numeric(record[field])
            cleaned.append(record)

        logger.info("Cleaned %d of %d rows", len(cleaned), len(rows))
        return cleaned
