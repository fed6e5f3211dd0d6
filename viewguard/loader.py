"""
Loading view-event exports from disk.

Supports CSV, JSON (array of objects) and JSON Lines files. Column names
may be snake_case or the camelCase used by the web platform.
"""
import logging
import os
from typing import Any, Dict, List

import pandas as pd
from pydantic import ValidationError

from .detection.errors import InvalidInput
from .detection.models import ViewEventRecord

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".csv", ".json", ".jsonl")


def read_frame(path: str) -> pd.DataFrame:
    """Read an export file into a DataFrame based on its extension."""
    suffix = os.path.splitext(path)[1].lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise InvalidInput([
            f"Unsupported file type '{suffix}' for {path}; "
            f"expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        ])
    if not os.path.exists(path):
        raise InvalidInput([f"File not found: {path}"])

    # IDs such as "007" must stay text; pydantic parses the count columns
    try:
        if suffix == ".csv":
            return pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
        if suffix == ".jsonl":
            return pd.read_json(path, lines=True, dtype=False, convert_dates=False)
        return pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    except ValueError as e:
        raise InvalidInput([f"Cannot parse {path}: {e}"]) from e


def _to_python(value: Any) -> Any:
    """Convert pandas/numpy scalars to plain Python values."""
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if hasattr(value, "item"):
        return value.item()
    return value


def frame_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as dicts of plain Python values, dropping missing cells."""
    rows = []
    for raw in df.to_dict(orient="records"):
        row = {}
        for key, value in raw.items():
            converted = _to_python(value)
            if converted is not None:
                row[str(key)] = converted
        rows.append(row)
    return rows


def load_records(path: str) -> List[ViewEventRecord]:
    """
    Load and validate every record in an export file.

    Args:
        path: Path to a .csv, .json or .jsonl export

    Returns:
        Validated records in file order

    Raises:
        InvalidInput: If the file cannot be read or any row is malformed
    """
    df = read_frame(path)
    rows = frame_to_rows(df)

    records: List[ViewEventRecord] = []
    errors: List[str] = []
    for index, row in enumerate(rows):
        try:
            records.append(ViewEventRecord.model_validate(row))
        except ValidationError as e:
            fields = ", ".join(
                ".".join(str(p) for p in err["loc"]) or "row" for err in e.errors()
            )
            errors.append(f"Row {index + 1}: invalid {fields}")

    if errors:
        raise InvalidInput(errors)

    logger.info(f"Loaded {len(records)} view records from {path}")
    return records
