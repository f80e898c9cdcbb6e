"""
Application configuration management.
"""
import logging
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


def _default_data_dir() -> Path:
    env_dir = os.getenv("DATA_DIR")
    if env_dir:
        return Path(env_dir)
    if Path("./src/data/raw").exists():
        return Path("./src/data/raw")
    return Path("./data")


@dataclass
class AppConfig:
    """Application configuration with environment overrides."""

    # Paths
    data_dir: Path = field(default_factory=_default_data_dir)
    source_file: str = field(default_factory=lambda: os.getenv("SOURCE_FILE", "throughput.csv"))

    # Environment
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "dev"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Refresh cadence of the spreadsheet export
    refresh_minutes: int = field(default_factory=lambda: int(os.getenv("REFRESH_MINUTES", "10")))

    # Dashboard parameter defaults
    performance_target: int = field(default_factory=lambda: int(os.getenv("PERFORMANCE_TARGET", "85")))
    forecast_horizon: int = field(default_factory=lambda: int(os.getenv("FORECAST_HORIZON", "3")))
    forecast_confidence: int = field(default_factory=lambda: int(os.getenv("FORECAST_CONFIDENCE", "80")))

    @property
    def source_path(self) -> Path:
        return self.data_dir / self.source_file

    @property
    def refresh_seconds(self) -> int:
        return self.refresh_minutes * 60

    @property
    def is_prod(self) -> bool:
        return self.app_env.lower() == "prod"


# Global config instance
config = AppConfig()


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging for scripts."""
    logging.basicConfig(
        level=(level or config.log_level).upper(),
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    )


# Sentinel used by every selector for "no filter"
ALL = "전체"

# Canonical key -> accepted header spellings in the spreadsheet export
HEADER_ALIASES = {
    "date": ["날짜"],
    "time": ["시간"],
    "centerName": ["센터명"],
    "total": ["전체"],
    "completion": ["마감률(%)"],
    "closed": ["마감"],
    "remaining": ["잔여"],
    "receipt": ["접수"],
    "assigned": ["할당"],
    "output": ["출력"],
}

# Required columns (rows are unusable without them)
REQUIRED_COLUMNS = {
    "throughput": ["date", "time", "centerName"],
}

# Optional columns (default to 0 / configured fallbacks)
OPTIONAL_COLUMNS = {
    "throughput": [
        "total",
        "completion",
        "closed",
        "remaining",
        "receipt",
        "assigned",
        "output",
    ],
}

# Completion bands, lower bound inclusive; the last band is closed at 100
PERFORMANCE_GRADES = [
    {"range": (0, 50), "label": "저조함", "color": "#D83B01"},
    {"range": (50, 70), "label": "개선 필요", "color": "#FFB900"},
    {"range": (70, 85), "label": "양호", "color": "#107C10"},
    {"range": (85, 95), "label": "우수", "color": "#0078D4"},
    {"range": (95, 100), "label": "최상위", "color": "#775DD0"},
]

# Operation runs 09:00/10:00 through 01:00 the next day
BUSINESS_HOURS = frozenset(list(range(10, 24)) + [0, 1, 9])
OPENING_TIME = "10:00"
CLOSING_TIME = "01:00"

# Measure defaults applied during ingestion
DEFAULT_EFFICIENCY = 80
DEFAULT_QUALITY_SCORE = 85
CAPACITY_FACTOR = 1.2

# Forecast model
FORECAST_HISTORY_POINTS = 4
TREND_WEIGHTS = (0.2, 0.3, 0.5)
TREND_DAMPING = 0.9
LINEAR_STEP_PCT = 5.0
LINEAR_BAND_PCT = 5.0
COMPLETION_TARGET_PCT = 95.0
HORIZON_RANGE = (1, 6)
CONFIDENCE_RANGE = (70, 95)

# Formatting constants
FORMAT_PERCENT = "{:.1f}%"
FORMAT_COUNT = "{:,}"
FORMAT_SPEED = "{:,.1f}/hr"
