"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking lifecycle metrics
booking_transitions = Counter(
    'booking_transitions_total',
    'Booking status transitions',
    ['from_status', 'to_status', 'result']  # applied, rejected, capacity_exhausted
)

inventory_adjustments = Counter(
    'inventory_adjustments_total',
    'Delta updates applied to available beds',
    ['direction']  # claim, release, frozen
)

operation_latency = Histogram(
    'inventory_operation_latency_seconds',
    'Latency of inventory engine operations',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Reconciliation metrics
reconciliations = Counter(
    'reconciliations_total',
    'Full recomputes of available beds',
    ['result']  # updated, unchanged, skipped_override
)

availability_drift = Counter(
    'availability_drift_beds_total',
    'Beds corrected by full recompute'
)

# Configuration sync metrics
configuration_sync = Counter(
    'configuration_sync_rows_total',
    'Room configuration rows touched by listing sync',
    ['outcome']  # created, updated, deleted, delete_blocked
)

# Expiry sweep metrics
sweep_bookings = Counter(
    'expiry_sweep_bookings_total',
    'Bookings considered by the expiry sweep',
    ['result']  # transitioned, skipped
)

sweep_runs = Counter(
    'expiry_sweep_runs_total',
    'Expiry sweep invocations',
    ['result']  # ok, error
)

# Database metrics
transaction_failures = Counter(
    'transaction_failures_total',
    'Logical operations rolled back because the store rejected them',
    ['operation']
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_transition(from_status: str, to_status: str, result: str):
    """Record a transition attempt. Result: applied, rejected, capacity_exhausted"""
    booking_transitions.labels(from_status=from_status, to_status=to_status, result=result).inc()


def record_adjustment(direction: str):
    inventory_adjustments.labels(direction=direction).inc()


def record_reconciliation(result: str, drift: int = 0):
    reconciliations.labels(result=result).inc()
    if drift:
        availability_drift.inc(abs(drift))


def record_sync_outcome(outcome: str, count: int = 1):
    if count:
        configuration_sync.labels(outcome=outcome).inc(count)


def record_sweep(transitioned: int, skipped: int):
    sweep_runs.labels(result="ok").inc()
    sweep_bookings.labels(result="transitioned").inc(transitioned)
    sweep_bookings.labels(result="skipped").inc(skipped)


def record_transaction_failure(operation: str):
    transaction_failures.labels(operation=operation).inc()
