"""
Prometheus metrics configuration and utilities.

HTTP metrics are recorded by the API middleware; job metrics by the queue
worker.
"""

from prometheus_client import REGISTRY as DEFAULT_REGISTRY
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

# HTTP Metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["service", "method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["service", "method"],
)


# Processing queue metrics
jobs_enqueued_total = Counter(
    "processing_jobs_enqueued_total",
    "Enqueue requests by trigger and outcome",
    ["trigger", "status"],
)

jobs_finished_total = Counter(
    "processing_jobs_finished_total",
    "Jobs that reached a terminal state",
    ["trigger", "status"],
)

job_run_duration_seconds = Histogram(
    "processing_job_run_duration_seconds",
    "Wall time of one thought processing run",
    ["trigger"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
)

llm_tokens_used_total = Counter(
    "processing_llm_tokens_used_total",
    "LLM tokens consumed by processing runs",
    ["trigger"],
)


def get_metrics() -> bytes:
    """
    Get current metrics in Prometheus format.

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(DEFAULT_REGISTRY)


METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST
