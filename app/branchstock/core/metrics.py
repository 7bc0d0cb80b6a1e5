from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from app.branchstock.core.config import settings


@dataclass
class MetricsSnapshot:
    content: bytes
    content_type: str


class Metrics:
    def __init__(self) -> None:
        self.enabled = settings.METRICS_ENABLED
        self._registry = None
        self._http_requests_total = None
        self._http_request_duration_ms = None
        self._transfers_completed_total = None
        self._transfer_rejected_total = None
        self._stock_adjustments_total = None
        self._lock_wait_timeout_total = None
        self._branch_access_denied_total = None
        if self.enabled:
            self._initialize_registry()

    def _initialize_registry(self) -> None:
        self._registry = CollectorRegistry()
        self._http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests by route/method/status.",
            ["route", "method", "status"],
            registry=self._registry,
        )
        self._http_request_duration_ms = Histogram(
            "http_request_duration_ms",
            "HTTP request latency in milliseconds.",
            ["route", "method", "status"],
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
            registry=self._registry,
        )
        self._transfers_completed_total = Counter(
            "transfers_completed_total",
            "Branch transfers committed.",
            registry=self._registry,
        )
        self._transfer_rejected_total = Counter(
            "transfer_rejected_total",
            "Branch transfers rolled back or refused.",
            ["reason"],
            registry=self._registry,
        )
        self._stock_adjustments_total = Counter(
            "stock_adjustments_total",
            "Manual stock adjustments by movement type.",
            ["movement_type"],
            registry=self._registry,
        )
        self._lock_wait_timeout_total = Counter(
            "lock_wait_timeout_total",
            "Lock wait timeout occurrences.",
            registry=self._registry,
        )
        self._branch_access_denied_total = Counter(
            "branch_access_denied_total",
            "Requests refused by branch access policy.",
            registry=self._registry,
        )

    def reset(self) -> None:
        if not self.enabled:
            return
        self._initialize_registry()

    def record_http_request(self, *, route: str, method: str, status_code: int, latency_ms: float) -> None:
        if not self.enabled:
            return
        labels = {"route": route, "method": method, "status": str(status_code)}
        self._http_requests_total.labels(**labels).inc()
        self._http_request_duration_ms.labels(**labels).observe(latency_ms)

    def increment_transfer_completed(self) -> None:
        if not self.enabled:
            return
        self._transfers_completed_total.inc()

    def increment_transfer_rejected(self, reason: str) -> None:
        if not self.enabled:
            return
        self._transfer_rejected_total.labels(reason=reason).inc()

    def increment_stock_adjustment(self, movement_type: str) -> None:
        if not self.enabled:
            return
        self._stock_adjustments_total.labels(movement_type=movement_type).inc()

    def increment_lock_wait_timeout(self) -> None:
        if not self.enabled:
            return
        self._lock_wait_timeout_total.inc()

    def increment_branch_access_denied(self) -> None:
        if not self.enabled:
            return
        self._branch_access_denied_total.inc()

    def render(self) -> MetricsSnapshot:
        if not self.enabled:
            return MetricsSnapshot(content=b"metrics_disabled\n", content_type="text/plain")
        return MetricsSnapshot(content=generate_latest(self._registry), content_type=CONTENT_TYPE_LATEST)


metrics = Metrics()
