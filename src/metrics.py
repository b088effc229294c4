"""
Prometheus metrics shared by the invocation adapter and the local FastAPI app.
"""

from prometheus_client import Counter, Histogram

PROXY_REQUESTS = Counter(
    "proxy_requests_total", "Routed proxy requests",
    ["route", "status"],
)

UPSTREAM_LATENCY = Histogram(
    "proxy_upstream_latency_seconds", "Outbound request latency by provider",
    ["provider"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
