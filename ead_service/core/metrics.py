"""Application metrics using the Prometheus client library.

One inventory of everything the service measures.  Other modules import
specific metrics and increment/observe them at the point of action.

Counters only go up; Prometheus turns them into rates with rate().
Histograms bucket observations so Prometheus can compute percentiles.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Domain metrics
# ---------------------------------------------------------------------------

ACCESS_DENIALS = Counter(
    "access_denials_total",
    "Requests rejected by identity resolution or the access policy gate",
    ["reason"],  # unauthenticated|profile_missing|forbidden
)

ENROLLMENT_CHANGES = Counter(
    "enrollment_changes_total",
    "Enrollment ledger transitions",
    ["action"],  # grant|revoke|revoke_noop
)

CERTIFICATE_REQUESTS = Counter(
    "certificate_requests_total",
    "Certificate issuance requests by outcome",
    ["outcome"],  # issued|existing|incomplete|access_expired|invalid_course
)

CERTIFICATE_VERIFICATIONS = Counter(
    "certificate_verifications_total",
    "Public certificate verification lookups by result",
    ["result"],  # found|not_found
)

NOTIFICATIONS = Counter(
    "notifications_total",
    "Grant notifications by result",
    ["result"],  # queued|enqueue_failed|sent|logged|send_failed
)

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
