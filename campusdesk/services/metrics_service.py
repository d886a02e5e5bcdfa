"""
Prometheus metrics service for CampusDesk.

Tracks HTTP request counts and latencies, and publishes the latest SLA
band counts, compliance rate and average rating as gauges.
"""

import re
import threading
from datetime import datetime
from typing import Dict, Any, Optional
import logging

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
)

from campusdesk.core.clock import utcnow
from campusdesk.core.config import settings
from campusdesk.services.sla_engine import SLABand, SLAStats

logger = logging.getLogger(__name__)


# Define histogram buckets for response times (in seconds)
RESPONSE_TIME_BUCKETS = (
    0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0
)

# Numeric ids, dashed UUIDs and bare hex UUIDs
_ID_SEGMENT = re.compile(r"^(\d+|[0-9a-f]{8}(-?[0-9a-f]{4}){3}-?[0-9a-f]{12})$", re.IGNORECASE)


class MetricsCollector:
    """
    Collects and exports application metrics.

    Each collector owns its registry so tests can build fresh instances
    without clashing on metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self._lock = threading.Lock()
        self._start_time = utcnow()
        self.registry = registry or CollectorRegistry()

        self._total_requests = 0
        self._total_errors = 0
        self._last_sla_stats: Optional[SLAStats] = None
        self._last_sla_update: Optional[datetime] = None

        self._init_prometheus_metrics()

    def _init_prometheus_metrics(self):
        """Initialize Prometheus metric collectors."""
        self.app_info = Info(
            "campusdesk_app",
            "CampusDesk application information",
            registry=self.registry
        )
        self.app_info.info({
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "app_name": settings.APP_NAME
        })

        self.request_counter = Counter(
            "campusdesk_http_requests_total",
            "Total number of HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self.request_duration = Histogram(
            "campusdesk_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=RESPONSE_TIME_BUCKETS,
            registry=self.registry
        )

        self.sla_band_gauge = Gauge(
            "campusdesk_sla_complaints",
            "Complaints per SLA band at the last evaluation",
            ["band"],
            registry=self.registry
        )

        self.sla_compliance_gauge = Gauge(
            "campusdesk_sla_compliance_rate",
            "SLA compliance rate (percent) at the last evaluation",
            registry=self.registry
        )

        self.average_rating_gauge = Gauge(
            "campusdesk_average_rating",
            "Average student satisfaction rating",
            registry=self.registry
        )

        self.uptime_gauge = Gauge(
            "campusdesk_uptime_seconds",
            "Application uptime in seconds",
            registry=self.registry
        )

    def record_request(self, method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Count and time one HTTP request; 5xx responses also count as errors."""
        route = self._normalize_endpoint(endpoint)

        with self._lock:
            self._total_requests += 1
            self._total_errors += int(status_code >= 500)

        self.request_counter.labels(method, route, str(status_code)).inc()
        self.request_duration.labels(method, route).observe(duration_seconds)

    def record_sla_stats(self, stats: SLAStats):
        """Publish the latest SLA aggregate as gauges."""
        band_counts = {
            SLABand.COMPLETED: stats.completed,
            SLABand.OVERDUE: stats.overdue,
            SLABand.URGENT: stats.urgent,
            SLABand.WARNING: stats.warning,
            SLABand.ON_TRACK: stats.on_track,
            SLABand.NONE: stats.total - (
                stats.completed + stats.overdue + stats.urgent + stats.warning + stats.on_track
            ),
        }
        for band, count in band_counts.items():
            self.sla_band_gauge.labels(band=band.value).set(count)

        self.sla_compliance_gauge.set(stats.compliance_rate)
        self.average_rating_gauge.set(stats.average_rating)

        with self._lock:
            self._last_sla_stats = stats
            self._last_sla_update = utcnow()

    def _normalize_endpoint(self, endpoint: str) -> str:
        """Collapse id segments so each route is one label value."""
        segments = [
            "{id}" if _ID_SEGMENT.match(segment) else segment
            for segment in endpoint.split("/") if segment
        ]
        return "/" + "/".join(segments)

    def get_summary(self) -> Dict[str, Any]:
        """JSON summary for the health endpoint."""
        with self._lock:
            stats = self._last_sla_stats
            return {
                "uptime_seconds": round((utcnow() - self._start_time).total_seconds(), 1),
                "total_requests": self._total_requests,
                "total_errors": self._total_errors,
                "sla": stats.to_dict() if stats else None,
                "sla_updated_at": self._last_sla_update.isoformat() if self._last_sla_update else None,
            }

    def get_prometheus_metrics(self) -> bytes:
        """Render all metrics in Prometheus text format."""
        self.uptime_gauge.set((utcnow() - self._start_time).total_seconds())
        return generate_latest(self.registry)

    def get_prometheus_content_type(self) -> str:
        return CONTENT_TYPE_LATEST


# Global metrics collector instance
metrics_collector = MetricsCollector()
