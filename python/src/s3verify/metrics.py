"""Prometheus metrics for s3verify runs.

All metrics use the ``s3verify_`` prefix. Collectors are created by
:func:`init_metrics`; until then the module-level references stay
``None`` and the ``record_*`` helpers do nothing, so library users and
tests that never enable metrics register nothing in the global registry.
"""

from __future__ import annotations

from prometheus_client import Counter

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Step outcome counter  (labels: operation, status)
# ---------------------------------------------------------------------------
steps_total: Counter | None = None

# ---------------------------------------------------------------------------
# Request counter  (labels: method, status_code)
# ---------------------------------------------------------------------------
requests_total: Counter | None = None

# ---------------------------------------------------------------------------
# Byte counters
# ---------------------------------------------------------------------------
bytes_sent_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics (idempotent)."""
    global _initialized
    global steps_total, requests_total, bytes_sent_total

    if _initialized:
        return

    steps_total = Counter(
        "s3verify_steps_total",
        "Total test steps by operation and outcome",
        ["operation", "status"],
    )

    requests_total = Counter(
        "s3verify_requests_total",
        "Total requests sent by method and response status code",
        ["method", "status_code"],
    )

    bytes_sent_total = Counter(
        "s3verify_bytes_sent_total",
        "Total bytes sent in request bodies",
    )

    _initialized = True


def record_step(operation: str, status: str) -> None:
    if steps_total is not None:
        steps_total.labels(operation=operation, status=status).inc()


def record_request(method: str, status_code: int, content_length: int) -> None:
    if requests_total is not None:
        requests_total.labels(method=method, status_code=str(status_code)).inc()
    if bytes_sent_total is not None:
        bytes_sent_total.inc(content_length)
