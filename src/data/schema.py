"""
Schema validation and column alias mapping.
"""
import pandas as pd
from typing import List, Tuple, Dict, Sequence

from src.config import HEADER_ALIASES, REQUIRED_COLUMNS, OPTIONAL_COLUMNS


class SchemaValidationError(Exception):
    """Raised when required columns are missing."""
    pass


# Source spelling -> canonical key, derived once from HEADER_ALIASES
_ALIAS_LOOKUP = {
    alias: canonical
    for canonical, aliases in HEADER_ALIASES.items()
    for alias in aliases
}


def clean_header(header: str) -> str:
    """Strip whitespace, carriage returns and one pair of enclosing quotes."""
    value = header.strip().replace("\r", "")
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return value.strip()


def translate_header(header: str) -> str:
    """Canonical key for a source header; unknown headers pass through."""
    cleaned = clean_header(header)
    return _ALIAS_LOOKUP.get(cleaned, cleaned)


def build_column_map(headers: Sequence[str]) -> Dict[str, int]:
    """
    Map canonical key -> column position.

    A header repeated later in the row overrides the earlier position.
    """
    column_map = {}
    for index, header in enumerate(headers):
        column_map[translate_header(header)] = index
    return column_map


def validate_required_columns(columns: Sequence[str], table_name: str) -> Tuple[bool, List[str]]:
    """
    Validate that required columns exist.
    Returns (is_valid, missing_columns).
    """
    if table_name not in REQUIRED_COLUMNS:
        return True, []

    required = REQUIRED_COLUMNS[table_name]
    missing = [col for col in required if col not in columns]

    return len(missing) == 0, missing


def check_optional_columns(columns: Sequence[str], table_name: str) -> List[str]:
    """
    Check which optional columns are missing.
    Returns list of missing optional columns.
    """
    if table_name not in OPTIONAL_COLUMNS:
        return []

    optional = OPTIONAL_COLUMNS[table_name]
    return [col for col in optional if col not in columns]


def validate_schema(columns: Sequence[str], table_name: str, strict: bool = True) -> Dict:
    """
    Full schema validation over canonical column keys.

    Args:
        columns: Canonical keys present (e.g. from build_column_map)
        table_name: Name of table for column requirements lookup
        strict: If True, raise error on missing required columns

    Returns:
        Dict with validation results
    """
    columns = list(columns)
    is_valid, missing_required = validate_required_columns(columns, table_name)
    missing_optional = check_optional_columns(columns, table_name)

    result = {
        "is_valid": is_valid,
        "missing_required": missing_required,
        "missing_optional": missing_optional,
        "total_columns": len(columns),
    }

    if strict and not is_valid:
        raise SchemaValidationError(
            f"Missing required columns in {table_name}: {missing_required}"
        )

    return result


def ensure_column_types(df: pd.DataFrame) -> pd.DataFrame:
    """Ensure consistent column types on a record-store frame."""
    df = df.copy()

    int_cols = ["total", "closed", "remaining", "backlog", "receipt", "assigned", "output", "ordinal"]
    for col in int_cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0).astype("int64")

    float_cols = ["completion", "efficiency", "capacity", "quality_score"]
    for col in float_cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)

    str_cols = ["date", "time", "name"]
    for col in str_cols:
        if col in df.columns:
            df[col] = df[col].astype(str)

    return df
