"""
Prometheus metrics collection.
"""

from prometheus_client import Counter, Gauge, Histogram

# ============================================================
# HTTP Metrics
# ============================================================

http_requests_total = Counter(
    "coffre_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "coffre_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_errors_total = Counter(
    "coffre_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "error_type"],
)

rate_limit_rejections_total = Counter(
    "coffre_rate_limit_rejections_total",
    "Requests rejected by the rate limiter",
    ["endpoint"],
)

# ============================================================
# Authentication Metrics
# ============================================================

sessions_issued_total = Counter(
    "coffre_sessions_issued_total",
    "Sessions issued on login",
)

sessions_evicted_total = Counter(
    "coffre_sessions_evicted_total",
    "Sessions evicted by the per-user session bound",
)

sessions_revoked_total = Counter(
    "coffre_sessions_revoked_total",
    "Sessions removed by logout",
)

auth_failures_total = Counter(
    "coffre_auth_failures_total",
    "Rejected bearer tokens",
    ["reason"],
)

# ============================================================
# Simulation Metrics
# ============================================================

simulations_created_total = Counter(
    "coffre_simulations_created_total",
    "Transfer simulations created",
    ["source"],
)

simulations_completed_total = Counter(
    "coffre_simulations_completed_total",
    "Transfer simulations reaching a terminal status",
    ["status"],
)

simulation_duration_seconds = Histogram(
    "coffre_simulation_duration_seconds",
    "Time spent executing one simulation",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

simulation_queue_depth = Gauge(
    "coffre_simulation_queue_depth",
    "Simulations submitted and not yet finished",
)

simulations_purged_total = Counter(
    "coffre_simulations_purged_total",
    "Expired simulation records deleted by the sweeper",
)

# ============================================================
# Blockchain Metrics
# ============================================================

oracle_requests_total = Counter(
    "coffre_oracle_requests_total",
    "Chain oracle requests",
    ["operation", "status"],
)

oracle_request_duration_seconds = Histogram(
    "coffre_oracle_request_duration_seconds",
    "Chain oracle request duration",
    ["operation"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

explorer_requests_total = Counter(
    "coffre_explorer_requests_total",
    "Block explorer requests",
    ["operation", "status"],
)

circuit_breaker_state_changes_total = Counter(
    "coffre_circuit_breaker_state_changes_total",
    "Circuit breaker transitions",
    ["breaker", "state"],
)
