"""
Metrics Collection
Prometheus metrics for component loading, assembly and update flushing
"""

import time
from contextlib import contextmanager
from typing import Callable

from prometheus_client import CollectorRegistry, Counter, Histogram, REGISTRY, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for app sessions.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        self.registry = registry

        # Loader metrics
        self.component_loads_total = Counter(
            "uitree_component_loads_total",
            "Total number of component implementation loads",
            ["variant", "status"],
            registry=registry,
        )
        self.cache_hits = Counter(
            "uitree_component_cache_hits_total",
            "Total number of implementation cache hits",
            registry=registry,
        )

        # Assembly metrics
        self.assembly_duration = Histogram(
            "uitree_assembly_duration_seconds",
            "Tree assembly duration in seconds",
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
            registry=registry,
        )

        # Scheduler metrics
        self.flushes_total = Counter(
            "uitree_flushes_total",
            "Total number of coalesced update flushes",
            registry=registry,
        )
        self.updates_applied_total = Counter(
            "uitree_updates_applied_total",
            "Total number of prop update transactions applied",
            registry=registry,
        )

        # Remote metrics
        self.remote_calls_total = Counter(
            "uitree_remote_calls_total",
            "Total number of component server calls",
            ["status"],
            registry=registry,
        )

    def record_load(self, variant: str, status: str) -> None:
        """Record a component implementation load."""
        self.component_loads_total.labels(variant=variant, status=status).inc()

    def record_cache_hit(self) -> None:
        """Record an implementation cache hit."""
        self.cache_hits.inc()

    def record_assembly(self, duration: float) -> None:
        """Record one completed tree assembly."""
        self.assembly_duration.observe(duration)

    def record_flush(self, transactions: int) -> None:
        """Record a flush and the transactions it applied."""
        self.flushes_total.inc()
        self.updates_applied_total.inc(transactions)

    def record_remote_call(self, status: str) -> None:
        """Record a component server call."""
        self.remote_calls_total.labels(status=status).inc()

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]):
        """Context manager to measure operation duration."""
        start = time.time()
        try:
            yield
        finally:
            callback(time.time() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
