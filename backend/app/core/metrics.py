"""
Prometheus instrumentation for the booking and traveller flows.
Exposed at /metrics by app.main.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Traveller mutation metrics
traveller_mutations = Counter(
    'traveller_mutations_total',
    'Traveller add/update/delete attempts',
    ['operation', 'outcome']  # add/update/delete x success/conflict/not_found/precondition
)

booking_version_retries = Counter(
    'booking_version_retries_total',
    'Traveller mutations retried after a booking version conflict'
)

# Booking read metrics
booking_queries = Counter(
    'booking_queries_total',
    'Booking list queries',
    ['status']  # upcoming, completed, all
)

# Summary metrics
summary_generations = Counter(
    'booking_summary_generations_total',
    'Booking summaries served',
    ['source']  # ai, fallback, cache
)

summary_latency = Histogram(
    'booking_summary_latency_seconds',
    'Latency of the text-generation call',
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0]
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss/error
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_traveller_mutation(operation: str, outcome: str):
    """Operation: add, update, delete. Outcome: success, conflict, not_found, precondition."""
    traveller_mutations.labels(operation=operation, outcome=outcome).inc()


def record_summary(source: str):
    """Source: ai, fallback, cache"""
    summary_generations.labels(source=source).inc()


def record_cache_operation(operation: str, result: str):
    cache_operations.labels(operation=operation, result=result).inc()
