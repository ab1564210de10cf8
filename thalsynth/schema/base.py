"""Core schema types for screening-panel column definitions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ColumnRole(str, Enum):
    """How the generator treats a canonical column."""

    IDENTIFIER = "identifier"
    CATEGORICAL = "categorical"
    NUMERIC = "numeric"


class ColumnSpec(BaseModel):
    """Specification for a single canonical column of the panel."""

    name: str
    role: ColumnRole
    description: str = ""
    unit: str | None = None
    candidates: list[str] = Field(
        default_factory=list,
        description="Source header spellings that map onto this column.",
    )


class PanelSchema(BaseModel):
    """Ordered set of canonical columns recognised in uploaded datasets."""

    name: str
    version: str
    columns: list[ColumnSpec]
    description: str = ""

    def get_column(self, name: str) -> ColumnSpec | None:
        """Return a column spec by name, or None if not found."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def column_names(self) -> list[str]:
        """Return all column names."""
        return [col.name for col in self.columns]

    def columns_with_role(self, role: ColumnRole) -> list[str]:
        """Return the names of columns with the given role."""
        return [col.name for col in self.columns if col.role == role]

    def candidate_map(self) -> dict[str, list[str]]:
        """Return ``canonical name -> candidate headers`` in column order."""
        return {col.name: list(col.candidates) for col in self.columns}
