"""
Observability metrics for monitoring and debugging.
Provides live feed and HTTP request metrics.
"""

from fastapi import APIRouter, Response
from typing import Dict, List, Optional
import json

# Simple metrics tracking without Prometheus dependency
class SimpleMetrics:
    """Simple metrics tracking for observability."""

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.gauges: Dict[str, float] = {}
        self.histograms: Dict[str, List[float]] = {}

    def _key(self, name: str, labels: Optional[Dict[str, str]]) -> str:
        return f"{name}_{json.dumps(labels or {}, sort_keys=True)}"

    def inc_counter(self, name: str, labels: Dict[str, str] = None):
        """Increment a counter."""
        key = self._key(name, labels)
        self.counters[key] = self.counters.get(key, 0) + 1

    def set_gauge(self, name: str, value: float, labels: Dict[str, str] = None):
        """Set a gauge value."""
        self.gauges[self._key(name, labels)] = value

    def observe_histogram(self, name: str, value: float, labels: Dict[str, str] = None):
        """Observe a histogram value."""
        key = self._key(name, labels)
        if key not in self.histograms:
            self.histograms[key] = []
        self.histograms[key].append(value)
        # Keep only last 1000 samples
        if len(self.histograms[key]) > 1000:
            self.histograms[key] = self.histograms[key][-1000:]

    def get_counter(self, name: str, labels: Dict[str, str] = None) -> int:
        """Read back a counter value (0 if never incremented)."""
        return self.counters.get(self._key(name, labels), 0)

    def reset(self):
        """Drop all recorded values."""
        self.counters.clear()
        self.gauges.clear()
        self.histograms.clear()

    def get_metrics(self) -> str:
        """Get metrics in text format."""
        lines = []
        for key, value in self.counters.items():
            lines.append(f"# TYPE {key.split('_{')[0]} counter")
            lines.append(f"{key} {value}")
        for key, value in self.gauges.items():
            lines.append(f"# TYPE {key.split('_{')[0]} gauge")
            lines.append(f"{key} {value}")
        for key, values in self.histograms.items():
            if values:
                lines.append(f"# TYPE {key.split('_{')[0]} histogram")
                lines.append(f"{key}_count {len(values)}")
                lines.append(f"{key}_sum {sum(values)}")
                lines.append(f"{key}_avg {sum(values)/len(values)}")
        return "\n".join(lines)

# Global metrics instance
_metrics = SimpleMetrics()

# Gauge encoding of FeedStatus values
STATUS_GAUGE = {"disconnected": 0.0, "connecting": 0.5, "connected": 1.0, "erroring": -1.0}

def get_metrics_registry() -> SimpleMetrics:
    """Get the global metrics registry."""
    return _metrics

def record_feed_reconnect():
    """Record a scheduled feed reconnection."""
    _metrics.inc_counter("feed_reconnects")

def record_feed_message(kind: str):
    """Record an inbound feed frame ("applied" or "ignored")."""
    _metrics.inc_counter("feed_messages", {"kind": kind})

def record_feed_status(status: str):
    """Record the current feed status."""
    _metrics.set_gauge("feed_status", STATUS_GAUGE.get(status, 0.0))

def record_api_request(endpoint: str, status_code: int, duration_ms: float):
    """Record API request metrics."""
    status = "success" if 200 <= status_code < 400 else "error"
    _metrics.inc_counter("api_requests", {"endpoint": endpoint, "status": status})
    _metrics.observe_histogram("api_duration_ms", duration_ms, {"endpoint": endpoint})

def get_metrics() -> str:
    """Get metrics in text format."""
    return _metrics.get_metrics()

def create_metrics_router() -> APIRouter:
    """Create FastAPI router for metrics endpoint."""
    router = APIRouter()

    @router.get("/ops/metrics")
    def metrics():
        """Metrics endpoint."""
        return Response(get_metrics(), media_type="text/plain")

    return router
