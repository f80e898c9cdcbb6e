"""
Export utilities for derived views and forecasts.
"""
import json
import pandas as pd
from typing import Optional, Dict, Any, List, Sequence
from datetime import datetime

from src.metrics.aggregation import PeriodView
from src.modeling.forecast import ForecastSnapshot


def export_dataframe_csv(df: pd.DataFrame, filename: Optional[str] = None) -> tuple:
    """
    Export dataframe to CSV bytes.

    Returns: (csv_bytes, filename)
    """
    if filename is None:
        filename = f"export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"

    # utf-8-sig so spreadsheet tools read the Korean labels correctly
    csv_bytes = df.to_csv(index=False).encode('utf-8-sig')

    return csv_bytes, filename


def _frame_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame -> JSON-safe records (NaN becomes None)."""
    if len(df) == 0:
        return []
    return json.loads(df.to_json(orient="records", force_ascii=False))


def view_to_dict(view: PeriodView) -> Dict[str, Any]:
    """Serialise a PeriodView to plain JSON types."""
    snapshot = None
    if view.snapshot is not None:
        snapshot = {"date": view.snapshot.date, "time": view.snapshot.time}

    return {
        "snapshot": snapshot,
        "metrics": [m.to_dict() for m in view.metrics],
        "series_date": view.series_date,
        "hourly_series": _frame_records(view.hourly_series),
        "distribution": view.distribution,
        "insights": view.insights,
        "scorecard": _frame_records(view.scorecard),
    }


def forecast_to_dict(forecast: Sequence[ForecastSnapshot]) -> List[Dict[str, Any]]:
    """Serialise forecast steps to plain JSON types."""
    return [
        {
            "date": step.date,
            "time": step.time,
            "ordinal": step.ordinal,
            "forecast_hour": step.forecast_hour,
            "is_prediction": step.is_prediction,
            "centers": [c.to_dict() for c in step.centers],
        }
        for step in forecast
    ]


def export_json(payload: Any, filename: Optional[str] = None) -> tuple:
    """
    Export a JSON-serialisable payload.

    Returns: (json_bytes, filename)
    """
    if filename is None:
        filename = f"export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

    json_bytes = json.dumps(payload, ensure_ascii=False, indent=2, default=str).encode('utf-8')

    return json_bytes, filename
