"""Prometheus metric inventory for quiz-grading-service.

Every metric the service exports is declared here; the modules that own
the behavior import the one they need and increment it in place.

HTTP metrics are fed by MetricsMiddleware.  The grading metrics answer
the questions operators actually ask about this service:

  - How many attempts pass vs fail?            quiz_submissions_total
  - How often does a client's claim get
    overridden, and for which question types?  grading_discrepancies_total
  - Are learners racing on the attempt
    counter (double-clicked submit buttons)?   attempt_number_conflicts_total
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
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
# Grading metrics
# ---------------------------------------------------------------------------

SUBMISSIONS_TOTAL = Counter(
    "quiz_submissions_total",
    "Stored quiz attempts by final outcome",
    ["result"],  # "passed" or "failed"
)

GRADING_DISCREPANCIES = Counter(
    "grading_discrepancies_total",
    "Responses whose client-claimed grade was overridden by the server",
    ["question_type"],
)

ATTEMPT_NUMBER_CONFLICTS = Counter(
    "attempt_number_conflicts_total",
    "Submissions that lost an attempt-number race and were retried",
)

GRADING_DURATION = Histogram(
    "grading_duration_seconds",
    "Time spent re-grading all responses of one submission",
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1],
)

# ---------------------------------------------------------------------------
# Supporting infrastructure
# ---------------------------------------------------------------------------

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Quiz definition cache lookups by result",
    ["operation"],  # "hit" or "miss"
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
