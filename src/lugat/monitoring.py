"""Monitoring configuration for the spaced-repetition core."""
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Review metrics
reviews_graded = Counter(
    "lugat_reviews_graded_total",
    "Total number of graded reviews",
    ["grade"],
)

progress_resets = Counter(
    "lugat_progress_resets_total",
    "Total number of full review-state resets",
)

# Session metrics
sessions_created = Counter(
    "lugat_sessions_created_total",
    "Total number of flashcard sessions created",
    ["kind"],
)

sessions_evicted = Counter(
    "lugat_sessions_evicted_total",
    "Total number of flashcard sessions evicted from the registry",
    ["reason"],
)

active_sessions = Gauge(
    "lugat_active_sessions",
    "Number of flashcard sessions currently held in memory",
)

session_size = Histogram(
    "lugat_session_size_words",
    "Number of words packaged into a flashcard session",
    ["kind"],
    buckets=[0, 5, 10, 20, 50, 100, 500],
)

study_sessions_recorded = Counter(
    "lugat_study_sessions_recorded_total",
    "Total number of historical study session records written",
)

# Error metrics
error_count = Counter(
    "lugat_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# Database metrics
db_operations = Counter(
    "lugat_db_operations_total",
    "Total number of database operations",
    ["operation_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
