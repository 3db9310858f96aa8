"""
Field resolution for RecordBlock records.

Records are caller-owned mappings; nested values are addressed with
dot-separated paths such as ``address.city``. Resolution never raises and
never mutates the record.
"""

from typing import Any, Mapping, Optional

import pandas as pd


def get_field_value(record: Mapping[str, Any], field_path: str) -> Optional[Any]:
    """
    Resolve a dot-separated field path on a record.

    A key equal to the full dotted path (as produced by flattening a
    DataFrame with ``pd.json_normalize``) takes precedence over nested
    lookup.

    Args:
        record: Record mapping
        field_path: Field path, e.g. ``"address.postalCode"``

    Returns:
        Field value, or None if any segment is absent
    """
    if not isinstance(record, Mapping):
        return None

    if field_path in record:
        return record[field_path]

    value: Any = record
    for part in field_path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
        if value is None:
            return None

    return value


def field_value_as_text(value: Any) -> Optional[str]:
    """
    Convert a resolved field value to text for key generation.

    Args:
        value: Resolved field value

    Returns:
        String value, or None for missing, NaN, blank or non-scalar values
    """
    if value is None or isinstance(value, (Mapping, list, tuple, set)):
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if value is pd.NaT or value is pd.NA:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        # Integral floats come from numeric DataFrame columns
        value = int(value)

    text = str(value)
    if not text.strip():
        return None
    return text
