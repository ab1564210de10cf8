"""Canonical column definitions for the screening panel."""

from thalsynth.schema.base import ColumnRole, ColumnSpec, PanelSchema
from thalsynth.schema.panel import get_panel_schema

__all__ = [
    "ColumnRole",
    "ColumnSpec",
    "PanelSchema",
    "get_panel_schema",
]
