#!/usr/bin/env python
"""
Run the throughput pipeline on a CSV export and write the derived views.

Usage:
    python scripts/run_pipeline.py
    python scripts/run_pipeline.py --csv /path/to/export.csv --output-dir out --horizon 4
"""
import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import config, configure_logging, ALL, FORMAT_PERCENT, FORMAT_COUNT, FORMAT_SPEED
from src.data.loader import read_raw_csv
from src.data.parser import parse_csv_text
from src.exports import export_dataframe_csv, export_json, view_to_dict, forecast_to_dict
from src.metrics.aggregation import PeriodFilter, build_period_view
from src.modeling.completion_eta import completion_eta_frame, forecast_insights
from src.modeling.forecast import generate_forecast, forecast_frame


def main():
    parser = argparse.ArgumentParser(description="Compute center metrics and forecasts")
    parser.add_argument("--csv", type=str, default=None, help="Override export path")
    parser.add_argument("--output-dir", type=str, default="output", help="Where to write results")
    parser.add_argument("--date", type=str, default=ALL, help="Business date filter")
    parser.add_argument("--time", type=str, default=ALL, help="Hour filter, e.g. 21:00")
    parser.add_argument("--center", type=str, default=ALL, help="Center filter")
    parser.add_argument("--target", type=float, default=config.performance_target, help="Performance target %%")
    parser.add_argument("--horizon", type=int, default=config.forecast_horizon, help="Forecast hours (1-6)")
    parser.add_argument("--confidence", type=int, default=config.forecast_confidence, help="Forecast confidence (70-95)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else None)

    csv_path = Path(args.csv) if args.csv else config.source_path
    output_dir = Path(args.output_dir)

    print(f"Running pipeline...")
    print(f"  Source: {csv_path}")
    print(f"  Output: {output_dir}")
    print()

    store = parse_csv_text(read_raw_csv(csv_path))
    if store.is_empty:
        print(f"ERROR: No usable rows in {csv_path}")
        sys.exit(1)

    print(f"Loaded {len(store):,} snapshots for {len(store.center_names())} centers")

    params = PeriodFilter(date=args.date, time=args.time, center=args.center, target=args.target)
    view = build_period_view(store, params)
    forecast = generate_forecast(store, args.horizon, args.confidence)
    eta = completion_eta_frame(view.metrics, forecast)

    output_dir.mkdir(parents=True, exist_ok=True)
    outputs = {
        "center_metrics.csv": view.metrics_df,
        "hourly_series.csv": view.hourly_series,
        "scorecard.csv": view.scorecard,
        "forecast.csv": forecast_frame(forecast),
        "completion_eta.csv": eta,
    }
    for filename, df in outputs.items():
        data, _ = export_dataframe_csv(df, filename)
        (output_dir / filename).write_bytes(data)
        print(f"  {filename}: {len(df):,} rows")

    summary = {
        "params": vars(args),
        "view": view_to_dict(view),
        "forecast": forecast_to_dict(forecast),
        "forecast_insights": forecast_insights(view.metrics, forecast, args.target),
    }
    data, _ = export_json(summary, "summary.json")
    (output_dir / "summary.json").write_bytes(data)
    print(f"  summary.json")

    print()
    if view.snapshot is not None:
        print(f"Period: {view.snapshot.date} {view.snapshot.time}")
    for m in view.metrics:
        print(
            f"  {m.name}: {FORMAT_PERCENT.format(m.completion)} "
            f"({FORMAT_COUNT.format(m.closed)} closed, {FORMAT_SPEED.format(m.closing_speed)}) "
            f"{m.performance_grade}"
        )
    for insight in view.insights:
        print(f"  - {insight['title']}: {insight['content']}")
    print()
    print("✓ Pipeline complete")


if __name__ == "__main__":
    main()
