"""Prometheus metrics for bill activity, check-ins, budget health and reminder delivery"""

from prometheus_client import Counter, Histogram

# Bill metrics
bill_event_counter = Counter(
    "nudgepal_bill_events_total",
    "Bill lifecycle events",
    ["event"],  # added | updated | paid | deleted
)

# Spending metrics
check_in_counter = Counter(
    "nudgepal_check_in_total",
    "Daily spending check-ins by budget band",
    ["budget_status"],  # under | within_range | over
)

budget_health_counter = Counter(
    "nudgepal_budget_health_total",
    "Budget health snapshots computed by status",
    ["status"],  # excellent | good | warning | critical
)

# Reminder webhook metrics
webhook_latency_histogram = Histogram(
    "reminder_webhook_latency_seconds",
    "Reminder webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "reminder_webhook_failures_total",
    "Failed reminder webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_bill_event(event: str) -> None:
    bill_event_counter.labels(event=event).inc()


def record_check_in(budget_status: str) -> None:
    check_in_counter.labels(budget_status=budget_status).inc()


def record_health(status: str) -> None:
    """Record health status distribution for monitoring how users are tracking"""
    budget_health_counter.labels(status=status).inc()
