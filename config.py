"""Application configuration driven by environment variables.

All settings have sensible defaults for local development.  The tuning
constants further down are the defaults the insight engine ships with; the
detector classes accept them as constructor arguments so tests can vary
them without touching the environment.
"""

import os

# ---------------------------------------------------------------------------
# gRPC server (UI / notification layer connects to us on this address)
# ---------------------------------------------------------------------------

GRPC_SERVER_HOST: str = os.getenv("GRPC_SERVER_HOST", "0.0.0.0")
GRPC_SERVER_PORT: int = int(os.getenv("GRPC_SERVER_PORT", "50061"))

# Thread pool size for the gRPC server.  Generation passes are serialised
# internally, so extra workers only help read-only calls.
GRPC_MAX_WORKERS: int = int(os.getenv("GRPC_MAX_WORKERS", "4"))

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

# JSON file backing the key-value substrate (mood samples, correlation
# records, persisted insights and the last-analysis marker).
INSIGHTS_STORE_PATH: str = os.getenv("INSIGHTS_STORE_PATH", "moodinsights.json")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# ---------------------------------------------------------------------------
# Analysis windows
# ---------------------------------------------------------------------------

ANALYSIS_WINDOW_DAYS: int = int(os.getenv("ANALYSIS_WINDOW_DAYS", "90"))
PATTERN_WINDOW_DAYS: int = int(os.getenv("PATTERN_WINDOW_DAYS", "30"))
STREAK_LOOKBACK_DAYS: int = 365

# ---------------------------------------------------------------------------
# Insight store
# ---------------------------------------------------------------------------

INSIGHT_RETENTION_DAYS: int = int(os.getenv("INSIGHT_RETENTION_DAYS", "30"))
INSIGHT_PAGE_SIZE: int = int(os.getenv("INSIGHT_PAGE_SIZE", "15"))

# ---------------------------------------------------------------------------
# Detector thresholds (mood points on the 1-10 scale)
# ---------------------------------------------------------------------------

TIME_OF_DAY_MIN_RATINGS: int = 3
TIME_OF_DAY_THRESHOLD: float = 1.5

WEEKDAY_MIN_DAYS: int = 2          # days needed before a weekday counts
WEEKDAY_MIN_COVERAGE: int = 5      # distinct weekdays needed
WEEKDAY_THRESHOLD: float = 1.2

TREND_MIN_DAYS: int = 5            # logged days needed in each week
TREND_THRESHOLD: float = 1.0

EARLY_WARNING_MIN_DAYS: int = 4
EARLY_WARNING_THRESHOLD: float = 1.2

SLEEP_MIN_PAIRS: int = 5
SLEEP_MIN_BUCKETS: int = 3
SLEEP_THRESHOLD: float = 0.8
SLEEP_MIN_PEAK_MOOD: float = 6.5

CATEGORY_MIN_DAYS: int = 2         # days needed before a category counts
CATEGORY_MIN_SAMPLES: int = 4
EXERCISE_THRESHOLD: float = 0.8
SOCIAL_THRESHOLD: float = 0.8
WEATHER_THRESHOLD: float = 1.0
DEFAULT_BASELINE_MOOD: float = 6.0

WORK_STRESS_HIGH: int = 7
WORK_STRESS_LOW: int = 4
WORK_STRESS_MIN_DAYS: int = 2      # days needed in each of high / low
WORK_STRESS_THRESHOLD: float = 1.0

PROGRESS_MIN_DAYS: int = 15
PROGRESS_THRESHOLD: float = 0.8

# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------

FORECAST_MIN_INSTANCES: int = 3
FORECAST_OPTIMISTIC_AT: float = 7.5
FORECAST_PROTECTIVE_AT: float = 5.5
FORECAST_FULL_CONFIDENCE_INSTANCES: int = 8

# ---------------------------------------------------------------------------
# Achievement, celebration, concern and suggestion checks
# ---------------------------------------------------------------------------

STREAK_MILESTONES: tuple[int, ...] = (7, 14, 30, 50, 100, 365)

PERFECT_DAY_MIN_RATING: float = 8.0
PERSONAL_BEST_MIN_HISTORY_DAYS: int = 30

CONSISTENCY_MIN_DAYS: int = 20
CONSISTENCY_HIGH_RATING: float = 7.0
CONSISTENCY_MIN_SHARE: float = 0.7

LOW_MOOD_WINDOW_DAYS: int = 14
LOW_MOOD_MIN_LOGGED_DAYS: int = 10
LOW_MOOD_MAX_RATING: float = 4.0
LOW_MOOD_MIN_DAYS: int = 5

POOR_SLEEP_WINDOW_DAYS: int = 7
POOR_SLEEP_MIN_RECORDS: int = 5
POOR_SLEEP_MAX_QUALITY: float = 4.0

DAY_SPECIFIC_MIN_INSTANCES: int = 4
DAY_SPECIFIC_MAX_AVERAGE: float = 6.0
DAY_SPECIFIC_FULL_CONFIDENCE_INSTANCES: int = 8

# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

SUMMARY_TREND_MIN_DAYS: int = 4
SUMMARY_TREND_THRESHOLD: float = 0.8
