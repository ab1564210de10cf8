"""Record types and value helpers shared by the generator and the scorers.

A record is a plain ``dict`` keyed by canonical field name.  Numeric fields
hold a ``float``, ``None`` for an absent measurement, or the original string
when the source value could not be parsed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np

Record = dict[str, Any]


def numeric_value(value: Any) -> float | None:
    """Return *value* as a finite float, or ``None`` if absent or malformed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text or text.lower() == "na":
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def is_absent(value: Any) -> bool:
    """True for the absent-measurement markers: ``None``, blank, ``na``, NaN."""
    if value is None:
        return True
    if isinstance(value, str):
        text = value.strip()
        return text == "" or text.lower() == "na"
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


@dataclass(frozen=True)
class AnnotatedRecord:
    """A cleaned record plus its signature flag, fixed at classification time."""

    values: Mapping[str, Any]
    signature_positive: bool

    def __post_init__(self) -> None:
        # Freeze a private copy so later edits to the source dict cannot leak in.
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, field: str, default: Any = None) -> Any:
        return self.values.get(field, default)

    def __getitem__(self, field: str) -> Any:
        return self.values[field]

    def to_dict(self, flag_field: str = "Likely_Thalassemia") -> Record:
        """Return a mutable copy with the flag stored under *flag_field*."""
        out = dict(self.values)
        out[flag_field] = self.signature_positive
        return out


def as_mapping(row: AnnotatedRecord | Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the field mapping behind an annotated or plain record."""
    if isinstance(row, AnnotatedRecord):
        return row.values
    return row
