"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Search metrics
gate_searches = Counter(
    'gate_search_total',
    'Total pass searches at the gate',
    ['result']  # found, not_found
)

# Entry metrics
entry_attempts = Counter(
    'gate_entry_attempts_total',
    'Total check-in attempts',
    ['result']  # admitted, override, invalid_pin, not_found, fully_utilized, exceeded, conflict
)

people_admitted = Counter(
    'gate_people_admitted_total',
    'People admitted through the gate'
)

entry_latency = Histogram(
    'gate_entry_latency_seconds',
    'Check-in request latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

entry_retries = Counter(
    'gate_entry_retries_total',
    'Check-in retries due to booking version conflicts'
)

# Redis metrics
redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)

redis_circuit_breaker_open = Gauge(
    'redis_circuit_breaker_open',
    'Redis circuit breaker state (1=open, 0=closed)'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_search(found: bool):
    result = "found" if found else "not_found"
    gate_searches.labels(result=result).inc()


def record_entry_attempt(result: str, admitted_count: int = 0):
    """Record check-in outcome. Admitted counts only for successful entries."""
    entry_attempts.labels(result=result).inc()
    if admitted_count:
        people_admitted.inc(admitted_count)
