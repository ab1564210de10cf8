"""thalsynth data module: loading, cleaning, and record types."""

from thalsynth.data.cleaning import RecordCleaner, coerce_numeric, map_columns
from thalsynth.data.loader import DataLoader, records_to_frame
from thalsynth.data.records import AnnotatedRecord, Record, is_absent, numeric_value

__all__ = [
    "AnnotatedRecord",
    "DataLoader",
    "Record",
    "RecordCleaner",
    "coerce_numeric",
    "is_absent",
    "map_columns",
    "numeric_value",
    "records_to_frame",
]
