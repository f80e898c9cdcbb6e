"""
Data loading utilities with Streamlit caching.

The spreadsheet export is dropped into the data directory by whatever sync
job owns the network side; this module only reads it. The cache TTL matches
the export refresh cadence, so each expiry rebuilds the whole record store.
"""
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Union

import streamlit as st

from src.config import config
from src.data.parser import parse_csv_text
from src.data.records import RecordStore

logger = logging.getLogger(__name__)


def read_raw_csv(path: Optional[Union[str, Path]] = None) -> str:
    """
    Read the raw export text.

    Returns "" when the file is missing or unreadable so the pipeline
    degrades to an empty record store.
    """
    csv_path = Path(path) if path is not None else config.source_path
    if not csv_path.exists():
        logger.warning("CSV export not found at %s", csv_path)
        return ""
    try:
        # utf-8-sig drops the BOM spreadsheet exports prepend
        return csv_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Could not read CSV export %s: %s", csv_path, exc)
        return ""


@st.cache_data(ttl=config.refresh_seconds, show_spinner=False)
def load_record_store(path: Optional[str] = None) -> RecordStore:
    """Read and normalise the export; cached for one refresh interval."""
    return parse_csv_text(read_raw_csv(path))


def get_data_status(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Get status of the configured export file."""
    csv_path = Path(path) if path is not None else config.source_path
    exists = csv_path.exists()
    return {
        "path": str(csv_path),
        "exists": exists,
        "size_bytes": csv_path.stat().st_size if exists else 0,
        "refresh_minutes": config.refresh_minutes,
    }
