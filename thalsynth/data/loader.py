"""Data loading and export for CSV and Excel panel files."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from thalsynth.errors import UnsupportedFormatError


class DataLoader:
    """Load uploaded panel files into raw row dicts and write results back."""

    _FORMAT_MAP = {
        ".csv": "csv",
        ".xlsx": "excel",
        ".xls": "excel",
    }

    def detect_format(self, filename: str, strict: bool = False) -> str:
        """Detect file format from extension.

        Returns ``"csv"`` or ``"excel"``.  Unknown extensions are read as CSV
        unless *strict* is set.

        Raises:
            UnsupportedFormatError: If *strict* and the extension is unknown.
        """
        suffix = Path(filename).suffix.lower()
        fmt = self._FORMAT_MAP.get(suffix)
        if fmt is None:
            if strict:
                raise UnsupportedFormatError(
                    f"Unknown file format '{suffix}'. "
                    f"Supported: {sorted(self._FORMAT_MAP.keys())}"
                )
            return "csv"
        return fmt

    def load_frame(self, path: Path | str) -> pd.DataFrame:
        """Load a file as an all-string DataFrame (first sheet for Excel).

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if self.detect_format(path.name) == "excel":
            df = pd.read_excel(path, sheet_name=0, dtype=str)
        else:
            df = pd.read_csv(path, dtype=str, skip_blank_lines=True)
        return df

    def load_rows(self, path: Path | str) -> list[dict[str, Any]]:
        """Load a file as a list of header-keyed dicts; blank cells become ``""``."""
        df = self.load_frame(path)
        return df.fillna("").to_dict(orient="records")

    def write_csv(
        self,
        rows: Sequence[dict[str, Any]],
        path: Path | str,
        columns: Sequence[str] | None = None,
    ) -> Path:
        """Write *rows* to CSV with every value quoted; absent values are blank."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        df = records_to_frame(rows, columns)
        df.to_csv(path, index=False, quoting=csv.QUOTE_ALL)
        return path


def records_to_frame(
    rows: Sequence[dict[str, Any]],
    columns: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Build a DataFrame from records, keeping *columns* first when given."""
    df = pd.DataFrame(list(rows))
    if columns:
        ordered = [c for c in columns if c in df.columns]
        ordered += [c for c in df.columns if c not in ordered]
        df = df[ordered] if ordered else df
    return df
