"""Prometheus metrics for session start-up, recurring materialization and storage"""

from prometheus_client import Counter, Histogram

# Session metrics
session_start_counter = Counter(
    "finance_tracker_session_start_total",
    "Session start-ups",
    ["outcome"],  # ok | invalid_definition | storage_failed
)

materialized_transactions_counter = Counter(
    "finance_tracker_materialized_transactions_total",
    "Transactions generated from recurring definitions",
)

# Storage metrics
persist_failures_counter = Counter(
    "finance_tracker_persist_failures_total",
    "Failed atomic writes of ledger and recurring definitions",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_session_start(outcome: str, added_count: int = 0) -> None:
    """Record one session start-up and how many transactions it generated"""
    session_start_counter.labels(outcome=outcome).inc()
    if added_count > 0:
        materialized_transactions_counter.inc(added_count)
