"""
Prometheus metrics for the order API.

Exposes /metrics with request latency/counters, order lifecycle events and
business-rule rejections (terminal orders, stock shortages, duplicates...).
The endpoint is not authenticated; keep it on the internal network.
"""
import os
import time

from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers share metrics through PROMETHEUS_MULTIPROC_DIR
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = REGISTRY

REQUESTS = Counter(
    'order_api_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

LATENCY = Histogram(
    'order_api_http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

IN_FLIGHT = Gauge(
    'order_api_http_requests_in_flight',
    'Requests currently being processed',
    registry=_metric_registry
)

ORDER_EVENTS = Counter(
    'order_api_order_events_total',
    'Order lifecycle events (created, updated, status_changed, deleted)',
    ['event'],
    registry=_metric_registry
)

REJECTIONS = Counter(
    'order_api_business_rule_rejections_total',
    'Requests rejected by a business rule, by error type',
    ['error'],
    registry=_metric_registry
)


def record_order_event(event: str) -> None:
    ORDER_EVENTS.labels(event=event).inc()


def record_rejection(error) -> None:
    """Count a handled application error (called by the error handler)."""
    REJECTIONS.labels(error=type(error).__name__).inc()


def setup_metrics_instrumentation(app):
    """Register the request hooks that feed the HTTP metrics."""

    @app.before_request
    def start_request_timer():
        g._metrics_started = time.perf_counter()
        IN_FLIGHT.inc()

    @app.after_request
    def observe_request(response):
        started = g.pop('_metrics_started', None)
        if started is None:
            return response

        try:
            endpoint = request.endpoint or 'unknown'
            LATENCY.labels(method=request.method, endpoint=endpoint).observe(time.perf_counter() - started)
            REQUESTS.labels(method=request.method, endpoint=endpoint, http_status=response.status_code).inc()
            IN_FLIGHT.dec()
        except Exception as e:
            # Metrics must never break a response
            app.logger.warning(f"Failed to record metrics: {e}")

        return response


@metrics_bp.route('/metrics')
def metrics():
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
